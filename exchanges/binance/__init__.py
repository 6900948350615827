"""
Binance Upstream Connector

The relay prices every tracked token from Binance spot's all-market 24h
ticker stream. This package only owns the transport; batch parsing lives in
services.price_feed.

WebSocket:
    - wss://stream.binance.com:9443/ws/!ticker@arr
"""

from .ws_client import BinanceTickerStream, create_ticker_stream

__all__ = ["BinanceTickerStream", "create_ticker_stream"]
