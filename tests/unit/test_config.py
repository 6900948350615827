"""
Unit Tests for Configuration Module

These tests verify that the configuration system works correctly:
- Default values are applied when needed
- Validation catches invalid configurations
- Property methods work as expected

Run with:
    pytest tests/unit/test_config.py -v
"""

import pytest
from core.config import Settings, settings, validate_configuration
from core.tokens import TOKEN_IDS


class TestConfigurationLoading:
    """Test that configuration loads with usable values"""

    def test_binance_ws_url_loaded(self):
        """Verify the upstream URL is a WebSocket URL"""
        assert settings.binance_ws_url.startswith(("ws://", "wss://"))
        assert "binance" in settings.binance_ws_url.lower()

    def test_app_port_is_valid_integer(self):
        """Verify app port is a valid integer"""
        assert isinstance(settings.app_port, int)
        assert 1 <= settings.app_port <= 65535

    def test_debug_mode_is_boolean(self):
        """Verify debug setting is a boolean"""
        assert isinstance(settings.debug, bool)

    def test_relay_timing_defaults(self):
        """Verify reconnect delay and keep-alive interval defaults"""
        config = Settings(_env_file=None)
        assert config.ws_reconnect_delay == 5.0
        assert config.sse_keepalive_interval == 30.0
        assert config.price_change_epsilon == 1e-6
        assert config.subscriber_max_pending == 1


class TestTrackedTokensParsing:
    """Test that tracked tokens are parsed from the comma-separated string"""

    def test_empty_tracks_every_token(self):
        """Verify an empty TRACKED_TOKENS falls back to the whole registry"""
        config = Settings(_env_file=None, tracked_tokens="")
        assert config.tracked_tokens_list == TOKEN_IDS

    def test_ids_are_lowercased_and_stripped(self):
        """Verify ids are normalized"""
        config = Settings(_env_file=None, tracked_tokens=" ETH , sol,,")
        assert config.tracked_tokens_list == ["eth", "sol"]


class TestCorsOrigins:
    """Test CORS origins parsing"""

    def test_cors_origins_split(self):
        config = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
        assert config.cors_origins_list == ["http://a.test", "http://b.test"]


class TestConfigurationValidation:
    """Test that validation catches invalid configurations"""

    def test_validation_passes_with_current_config(self):
        """Verify current configuration passes validation"""
        validate_configuration(Settings(_env_file=None))

    def test_unknown_token_rejected(self):
        config = Settings(_env_file=None, tracked_tokens="eth,doge")
        with pytest.raises(ValueError, match="Unknown token id 'doge'"):
            validate_configuration(config)

    def test_non_websocket_url_rejected(self):
        config = Settings(_env_file=None, binance_ws_url="https://stream.binance.com")
        with pytest.raises(ValueError, match="BINANCE_WS_URL"):
            validate_configuration(config)

    @pytest.mark.parametrize("field", ["ws_reconnect_delay", "sse_keepalive_interval"])
    def test_non_positive_intervals_rejected(self, field):
        config = Settings(_env_file=None, **{field: 0})
        with pytest.raises(ValueError, match="must be positive"):
            validate_configuration(config)

    def test_negative_epsilon_rejected(self):
        config = Settings(_env_file=None, price_change_epsilon=-1.0)
        with pytest.raises(ValueError, match="EPSILON"):
            validate_configuration(config)

    def test_zero_max_pending_rejected(self):
        config = Settings(_env_file=None, subscriber_max_pending=0)
        with pytest.raises(ValueError, match="SUBSCRIBER_MAX_PENDING"):
            validate_configuration(config)

    def test_invalid_log_level_rejected(self):
        config = Settings(_env_file=None, log_level="VERBOSE")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            validate_configuration(config)
