"""
Token Registry

Static configuration of every token the relay tracks. The registry is the
source of the TokenIdentifier set the price table is initialized with, and of
the Binance pair used to price each token.

Tokens are ordered by category; use TOKENS_BY_MARKET_CAP for display order.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


TokenCategory = Literal["l1", "l2", "stable", "defi", "meme"]


class TokenConfig(BaseModel):
    """
    Configuration for a single tracked token.

    Attributes:
        id: Unique token identifier used as the price table key (e.g., "eth")
        symbol: Trading symbol (e.g., "ETH")
        name: Full token name
        display_symbol: Pair-style display name (e.g., "ETH/USDT")
        category: Token category
        decimals: On-chain decimals
        market_cap_rank: Default sort rank (lower first)
        binance_symbol: Binance spot pair priced from the upstream feed
        coingecko_id: CoinGecko identifier
    """

    id: str
    symbol: str
    name: str
    display_symbol: str
    category: TokenCategory
    decimals: int = Field(..., ge=0)
    market_cap_rank: int = Field(..., ge=1)
    binance_symbol: str
    coingecko_id: str

    model_config = ConfigDict(frozen=True)


def _token(token_id: str, symbol: str, name: str, category: TokenCategory, decimals: int,
           market_cap_rank: int, coingecko_id: str) -> TokenConfig:
    return TokenConfig(
        id=token_id,
        symbol=symbol,
        name=name,
        display_symbol=f"{symbol}/USDT",
        category=category,
        decimals=decimals,
        market_cap_rank=market_cap_rank,
        binance_symbol=f"{symbol}USDT",
        coingecko_id=coingecko_id,
    )


# ============================================
# Token List
# ============================================

TOKEN_LIST: List[TokenConfig] = [
    # L1
    _token("eth", "ETH", "Ethereum", "l1", 18, 2, "ethereum"),
    _token("sol", "SOL", "Solana", "l1", 9, 5, "solana"),
    _token("near", "NEAR", "NEAR Protocol", "l1", 24, 25, "near"),

    # Stablecoins
    _token("usdc", "USDC", "USD Coin", "stable", 6, 6, "usd-coin"),

    # Wrapped BTC
    _token("wbtc", "WBTC", "Wrapped Bitcoin", "defi", 8, 12, "wrapped-bitcoin"),

    # L2
    _token("arb", "ARB", "Arbitrum", "l2", 18, 40, "arbitrum"),
    _token("op", "OP", "Optimism", "l2", 18, 50, "optimism"),
    _token("strk", "STRK", "Starknet", "l2", 18, 80, "starknet"),
    _token("pol", "POL", "Polygon", "l2", 18, 30, "polygon-ecosystem-token"),
    _token("imx", "IMX", "Immutable", "l2", 18, 55, "immutable-x"),

    # DeFi
    _token("link", "LINK", "Chainlink", "defi", 18, 15, "chainlink"),
    _token("uni", "UNI", "Uniswap", "defi", 18, 25, "uniswap"),
    _token("aave", "AAVE", "Aave", "defi", 18, 45, "aave"),
    _token("ldo", "LDO", "Lido DAO", "defi", 18, 60, "lido-dao"),
    _token("crv", "CRV", "Curve DAO", "defi", 18, 120, "curve-dao-token"),

    # Meme
    _token("shib", "SHIB", "Shiba Inu", "meme", 18, 18, "shiba-inu"),
    _token("pepe", "PEPE", "Pepe", "meme", 18, 38, "pepe"),
]

TOKEN_IDS: List[str] = [token.id for token in TOKEN_LIST]

# sorted() is stable, so equal ranks keep list order
TOKENS_BY_MARKET_CAP: List[TokenConfig] = sorted(TOKEN_LIST, key=lambda t: t.market_cap_rank)

_BY_ID: Dict[str, TokenConfig] = {token.id: token for token in TOKEN_LIST}


def get_token_by_id(token_id: str) -> Optional[TokenConfig]:
    """Return the token config for an id, or None if the id is not configured."""
    return _BY_ID.get(token_id)

