"""
Configuration Management Module

This module handles loading, validating, and providing access to application configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates tracked tokens against the token registry
- Provides type-safe access to relay timings (reconnect delay, keep-alive interval)
- Converts comma-separated strings to lists (tracked tokens, CORS origins)
- Handles optional settings with sensible defaults

Usage:
    from core.config import settings

    # Access configuration values
    print(settings.binance_ws_url)
    print(settings.tracked_tokens_list)  # Returns a list of token ids
"""

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application Settings

    This class defines all configuration parameters for the price relay.
    Values are automatically loaded from environment variables or .env file.

    Attributes:
        binance_ws_url: Upstream all-market 24h ticker stream
        tracked_tokens: Comma-separated token ids to track (empty = whole token list)
        ws_reconnect_delay: Flat delay before re-opening the upstream connection
        ws_heartbeat: Protocol-level ping interval on the upstream socket
        ws_connect_timeout: Timeout for the upstream WebSocket handshake
        sse_keepalive_interval: Interval between keep-alive frames to each subscriber
        price_change_epsilon: Minimum price delta that counts as a visible change
        subscriber_max_pending: Outbound payloads a subscriber may have queued
        app_host: Host address for FastAPI server
        app_port: Port number for FastAPI server
        environment: Current environment (development, production)
        debug: Enable debug mode with verbose logging
        log_level: Logging level name
        cors_origins: Comma-separated list of allowed CORS origins
    """

    # ============================================
    # Upstream Feed Configuration
    # ============================================

    binance_ws_url: str = Field(
        default="wss://stream.binance.com:9443/ws/!ticker@arr",
        description="Binance spot all-market 24h ticker stream"
    )

    ws_reconnect_delay: float = Field(
        default=5.0,
        description="Delay before reconnecting to the upstream feed (seconds)"
    )

    ws_heartbeat: float = Field(
        default=30.0,
        description="WebSocket ping interval for the upstream connection (seconds)"
    )

    ws_connect_timeout: float = Field(
        default=10.0,
        description="Upstream WebSocket handshake timeout (seconds)"
    )

    # ============================================
    # Tracked Tokens Configuration
    # ============================================

    tracked_tokens: str = Field(
        default="",
        description="Comma-separated token ids to track (empty = all configured tokens)"
    )

    price_change_epsilon: float = Field(
        default=1e-6,
        description="Price delta below which an upstream tick is not a change"
    )

    # ============================================
    # Subscriber Configuration
    # ============================================

    sse_keepalive_interval: float = Field(
        default=30.0,
        description="Keep-alive interval for streaming subscribers (seconds)"
    )

    subscriber_max_pending: int = Field(
        default=1,
        description="Pending payloads per subscriber before the oldest is dropped"
    )

    # ============================================
    # Application Configuration
    # ============================================

    app_host: str = Field(
        default="0.0.0.0",
        description="FastAPI server host address"
    )

    app_port: int = Field(
        default=8000,
        description="FastAPI server port"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # CORS Configuration
    # ============================================

    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False
    )

    # ============================================
    # Custom Properties
    # ============================================

    @property
    def tracked_tokens_list(self) -> List[str]:
        """
        Token ids the price table is initialized with.

        Returns:
            List of token ids (e.g., ["eth", "sol"]). When TRACKED_TOKENS is
            empty, every token from the registry is tracked.

        Example:
            >>> settings.tracked_tokens_list
            ['eth', 'sol', 'near', 'usdc', ...]
        """
        ids = [t.strip().lower() for t in self.tracked_tokens.split(",") if t.strip()]
        if ids:
            return ids

        from core.tokens import TOKEN_IDS
        return list(TOKEN_IDS)

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Convert comma-separated CORS origins string to a list.

        Returns:
            List of allowed origin URLs (e.g., ["http://localhost:3000", "https://myapp.com"])
        """
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# ============================================
# Global Settings Instance
# ============================================

# Create a single instance of settings to be imported throughout the application
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Settings = None) -> None:
    """
    Validate critical configuration settings on application startup.

    Args:
        config: Settings to validate (defaults to the global settings)

    Raises:
        ValueError: If required configuration is missing or invalid

    This function is called from the application lifespan before any
    component is constructed.
    """
    # Import here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger
    from core.tokens import get_token_by_id

    config = config or settings

    tokens = config.tracked_tokens_list
    if not tokens:
        raise ValueError("TRACKED_TOKENS must contain at least one token id")

    for token_id in tokens:
        if get_token_by_id(token_id) is None:
            raise ValueError(
                f"Unknown token id '{token_id}'. "
                f"Please update TRACKED_TOKENS in .env"
            )

    if not config.binance_ws_url.startswith(("ws://", "wss://")):
        raise ValueError(f"Invalid BINANCE_WS_URL: '{config.binance_ws_url}'. Must be a ws:// or wss:// URL")

    for name in ("ws_reconnect_delay", "ws_heartbeat", "ws_connect_timeout", "sse_keepalive_interval"):
        if getattr(config, name) <= 0:
            raise ValueError(f"{name.upper()} must be positive, got {getattr(config, name)}")

    if config.price_change_epsilon < 0:
        raise ValueError("PRICE_CHANGE_EPSILON cannot be negative")

    if config.subscriber_max_pending < 1:
        raise ValueError("SUBSCRIBER_MAX_PENDING must be at least 1")

    # Validate port number
    if not (1 <= config.app_port <= 65535):
        raise ValueError(f"Invalid port number: {config.app_port}. Must be between 1 and 65535")

    # Validate log level
    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    # Log successful validation
    logger.info("Configuration validated successfully")
    logger.info(f"Tracking tokens: {', '.join(tokens)}")
    logger.info(f"Upstream feed: {config.binance_ws_url}")
    logger.info(f"Reconnect delay: {config.ws_reconnect_delay}s | Keep-alive: {config.sse_keepalive_interval}s")
    logger.info(f"Server: {config.app_host}:{config.app_port}")
    logger.info(f"Log level: {config.log_level.upper()}")
