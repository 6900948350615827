"""
Price Relay Data Schemas

This module defines Pydantic models for every structure that crosses a
component boundary: upstream ticker records, price snapshots, and the wire
envelopes pushed to (or polled by) subscribers.

Key Principle:
    Upstream data is parsed into TickerRecord at the edge. Everything after
    that works with PriceSnapshot, which is immutable and replaced wholesale
    on update, so readers never see a half-written record.

Models:
    - ConnectionState: Upstream connection lifecycle state
    - TickerRecord: One entry of a Binance 24h ticker batch
    - PriceSnapshot: Latest known price for one token
    - PricesPush: Streaming payload ({type, data, timestamp})
    - PricesPoll: Request/response payload ({prices, timestamp})

Wire format:
    Field names on the wire are camelCase (priceChange24h, lastUpdated, ...)
    to match the dashboard front end. Serialize with by_alias=True.
    All timestamps are Unix epoch milliseconds.
"""

import math
from enum import Enum
from typing import Any, Dict, Literal
from pydantic import BaseModel, Field, field_validator, ConfigDict


# ============================================
# Connection State
# ============================================

class ConnectionState(str, Enum):
    """Upstream connection lifecycle: disconnected → connecting → connected → disconnected."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


# ============================================
# Upstream Ticker Schema
# ============================================

class TickerRecord(BaseModel):
    """
    Binance 24h Rolling Window Ticker Entry

    Binance delivers the all-market ticker stream (!ticker@arr) as a JSON
    array of these records roughly once per second. Only the fields the
    relay uses are modelled; the rest are ignored.

    Attributes:
        symbol: Trading pair (e.g., "ETHUSDT") - Binance key "s"
        last_price: Last traded price - Binance key "c"
        price_change: Absolute 24h price change - Binance key "p"
        price_change_percent: 24h price change in percent - Binance key "P"
        base_volume: 24h traded volume in base asset - Binance key "v"

    Notes:
        - Binance sends numbers as strings (e.g., "2500.00", "+50.00")
        - Non-numeric or non-finite values fail validation
    """

    symbol: str = Field(..., alias="s")
    last_price: float = Field(..., alias="c")
    price_change: float = Field(..., alias="p")
    price_change_percent: float = Field(..., alias="P")
    base_volume: float = Field(..., alias="v")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("last_price", "price_change", "price_change_percent", "base_volume", mode="before")
    @classmethod
    def parse_numeric(cls, v: Any) -> float:
        """Parse Binance numeric strings into finite floats"""
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            raise ValueError(f"expected a numeric string, got {type(v).__name__}")
        value = float(v)
        if not math.isfinite(value):
            raise ValueError(f"non-finite value: {v!r}")
        return value

    @property
    def quote_volume(self) -> float:
        """24h volume in quote currency, derived from the last price"""
        return self.base_volume * self.last_price


# ============================================
# Price Snapshot Schema
# ============================================

class PriceSnapshot(BaseModel):
    """
    Latest Price for One Token

    Immutable. The price table replaces a token's snapshot with a new instance
    on every visible change and never mutates one in place.

    Attributes:
        id: Token identifier (e.g., "eth")
        price: Last traded price in USDT
        price_change_24h: Absolute 24h change
        price_change_percentage_24h: 24h change in percent
        market_cap: Market capitalization (not provided by the feed; kept at 0)
        volume_24h: 24h volume in USDT (base volume × last price)
        last_updated: When this snapshot was created (epoch ms)

    Example:
        >>> PriceSnapshot(id="eth", price=2500.0, last_updated=1704110400000)
    """

    id: str
    price: float = 0.0
    price_change_24h: float = Field(0.0, alias="priceChange24h")
    price_change_percentage_24h: float = Field(0.0, alias="priceChangePercentage24h")
    market_cap: float = Field(0.0, alias="marketCap")
    volume_24h: float = Field(0.0, alias="volume24h")
    last_updated: int = Field(..., alias="lastUpdated")

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "eth",
                "price": 2500.0,
                "priceChange24h": 50.0,
                "priceChangePercentage24h": 2.04,
                "marketCap": 0.0,
                "volume24h": 2500000.0,
                "lastUpdated": 1704110400000
            }
        }
    )

    @classmethod
    def zeroed(cls, token_id: str, timestamp: int) -> "PriceSnapshot":
        """Placeholder snapshot for a token that has not been priced yet"""
        return cls(id=token_id, last_updated=timestamp)


# ============================================
# Wire Envelopes
# ============================================

class PricesPush(BaseModel):
    """
    Streaming payload sent to every subscriber.

    Serialized once per broadcast and framed as a Server-Sent Event:
        data: {"type": "prices", "data": {...}, "timestamp": 1704110400000}
    """

    type: Literal["prices"] = "prices"
    data: Dict[str, PriceSnapshot]
    timestamp: int


class PricesPoll(BaseModel):
    """Request/response payload for GET /api/prices without streaming."""

    prices: Dict[str, PriceSnapshot]
    timestamp: int
