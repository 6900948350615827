"""
Symbol Mapper

Maps upstream Binance ticker symbols (e.g., "ETHUSDT") to internal token
identifiers (e.g., "eth"). Symbols with no mapping are not tracked; callers
skip them without logging.
"""

from typing import Dict, Optional

from core.tokens import TOKEN_LIST


# Extra upstream pairs priced into an existing token
SYMBOL_ALIASES: Dict[str, str] = {
    "BTCUSDT": "wbtc",
}

BINANCE_SYMBOL_TO_ID: Dict[str, str] = {
    **{token.binance_symbol: token.id for token in TOKEN_LIST},
    **SYMBOL_ALIASES,
}


def map_symbol(upstream_symbol: str) -> Optional[str]:
    """
    Resolve an upstream ticker symbol to a token identifier.

    Args:
        upstream_symbol: Binance pair symbol (e.g., "ETHUSDT")

    Returns:
        Token identifier (e.g., "eth"), or None when the symbol is not tracked

    Example:
        >>> map_symbol("ETHUSDT")
        'eth'
        >>> map_symbol("DOGEUSDT") is None
        True
    """
    return BINANCE_SYMBOL_TO_ID.get(upstream_symbol)
