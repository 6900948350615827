"""
Unit Tests for the Token Registry and Symbol Mapper

Run with:
    pytest tests/unit/test_tokens.py -v
"""

import pytest
from pydantic import ValidationError

from core.symbol_mapper import BINANCE_SYMBOL_TO_ID, map_symbol
from core.tokens import (
    TOKEN_IDS,
    TOKEN_LIST,
    TOKENS_BY_MARKET_CAP,
    TokenConfig,
    get_token_by_id,
)


class TestTokenRegistry:
    """Tests for the static token list"""

    def test_ids_are_unique(self):
        assert len(TOKEN_IDS) == len(set(TOKEN_IDS))

    def test_binance_pairs_are_usdt(self):
        for token in TOKEN_LIST:
            assert token.binance_symbol == f"{token.symbol}USDT"
            assert token.display_symbol == f"{token.symbol}/USDT"

    def test_market_cap_order(self):
        """Verify display order follows market cap rank"""
        ranks = [token.market_cap_rank for token in TOKENS_BY_MARKET_CAP]
        assert ranks == sorted(ranks)
        assert TOKENS_BY_MARKET_CAP[0].id == "eth"

    def test_lookup_by_id(self):
        assert get_token_by_id("sol").name == "Solana"
        assert get_token_by_id("doge") is None

    def test_configs_are_frozen(self):
        token = get_token_by_id("eth")
        with pytest.raises(ValidationError):
            token.symbol = "ETC"

    def test_rank_must_be_positive(self):
        with pytest.raises(ValidationError):
            TokenConfig(
                id="x", symbol="X", name="X", display_symbol="X/USDT", category="l1",
                decimals=18, market_cap_rank=0, binance_symbol="XUSDT", coingecko_id="x",
            )


class TestSymbolMapper:
    """Tests for upstream symbol → token id mapping"""

    def test_maps_tracked_pairs(self):
        assert map_symbol("ETHUSDT") == "eth"
        assert map_symbol("PEPEUSDT") == "pepe"

    def test_btc_priced_into_wbtc(self):
        """Verify the BTCUSDT alias resolves to wbtc"""
        assert map_symbol("BTCUSDT") == "wbtc"

    def test_unknown_symbol_is_none(self):
        assert map_symbol("DOGEUSDT") is None
        assert map_symbol("ethusdt") is None

    def test_every_token_is_reachable(self):
        assert set(TOKEN_IDS) <= set(BINANCE_SYMBOL_TO_ID.values())
