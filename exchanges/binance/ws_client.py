"""
Binance Ticker Stream Client

This module provides the upstream WebSocket connection for the relay. It
handles:
- One WebSocket connection to the all-market 24h ticker stream
- Connection state tracking (disconnected → connecting → connected)
- JSON message parsing (undecodable frames are logged and skipped)
- Graceful shutdown

Reconnection is NOT handled here. When the connection closes or fails,
messages() returns (or raises) and the state goes back to disconnected;
FeedSupervisor decides when to connect again.

Stream:
    wss://stream.binance.com:9443/ws/!ticker@arr
    A JSON array of 24hrTicker objects for every symbol that changed in the
    last second.

WebSocket Documentation:
    https://developers.binance.com/docs/binance-spot-api-docs/web-socket-streams

Usage:
    async with BinanceTickerStream() as stream:
        await stream.connect()
        async for batch in stream.messages():
            print(len(batch))
"""

import aiohttp
import asyncio
import json
from typing import Any, AsyncGenerator, Optional
from core.logging import get_logger, log_websocket_event
from core.schemas import ConnectionState


class BinanceTickerStream:
    """
    Async WebSocket client for the Binance all-market ticker stream.

    Attributes:
        DEFAULT_URL: Binance spot all-market ticker stream
        url: Stream URL in use
        heartbeat: Ping interval passed to aiohttp (seconds)
        connect_timeout: Handshake timeout (seconds)
        session: aiohttp ClientSession for WebSocket
        ws: Active WebSocket connection
        state: Current ConnectionState

    Example:
        >>> async with BinanceTickerStream() as stream:
        ...     await stream.connect()
        ...     async for batch in stream.messages():
        ...         print(batch[0]["s"])

    Notes:
        - Use as async context manager for proper session cleanup
        - connect() is a no-op while already connected
    """

    DEFAULT_URL = "wss://stream.binance.com:9443/ws/!ticker@arr"

    def __init__(
        self,
        url: Optional[str] = None,
        heartbeat: float = 30.0,
        connect_timeout: float = 10.0
    ):
        """
        Initialize WebSocket client.

        Args:
            url: Stream URL (default: DEFAULT_URL)
            heartbeat: Ping interval in seconds (default: 30)
            connect_timeout: Handshake timeout in seconds (default: 10)
        """
        self.url = url or self.DEFAULT_URL
        self.heartbeat = heartbeat
        self.connect_timeout = connect_timeout

        # Connection state
        self.session: Optional[aiohttp.ClientSession] = None
        self.ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self.state = ConnectionState.DISCONNECTED

        self.logger = get_logger(__name__)

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        """
        Enter async context - creates HTTP session.

        Returns:
            Self for use in async with statement
        """
        self.session = aiohttp.ClientSession()
        self.logger.debug("BinanceTickerStream session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context - closes WebSocket and session."""
        await self.close()
        self.logger.debug("BinanceTickerStream session closed")

    # ============================================
    # WebSocket Connection Management
    # ============================================

    async def connect(self) -> None:
        """
        Establish the WebSocket connection.

        Raises:
            RuntimeError: If session not initialized
            asyncio.TimeoutError: If the handshake exceeds connect_timeout
            aiohttp.ClientError: If connection fails

        Notes:
            - No-op when already connected
            - State is DISCONNECTED again if the attempt fails
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        if self.state is ConnectionState.CONNECTED and self.ws is not None and not self.ws.closed:
            return

        self.state = ConnectionState.CONNECTING
        log_websocket_event("binance", "connecting", self.url)

        try:
            self.ws = await asyncio.wait_for(
                self.session.ws_connect(self.url, heartbeat=self.heartbeat),
                timeout=self.connect_timeout
            )
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            log_websocket_event("binance", "error", f"Failed to connect to {self.url}: {e!r}")
            raise

        self.state = ConnectionState.CONNECTED
        log_websocket_event("binance", "connected")

    async def disconnect(self) -> None:
        """
        Close the WebSocket but keep the session for the next connect().

        Safe to call multiple times.
        """
        if self.ws is not None and not self.ws.closed:
            await self.ws.close()
            self.logger.debug("WebSocket closed")
        self.ws = None
        if self.state is not ConnectionState.DISCONNECTED:
            self.state = ConnectionState.DISCONNECTED
            log_websocket_event("binance", "disconnected")

    async def close(self) -> None:
        """
        Close WebSocket connection and session gracefully.

        Notes:
            - Safe to call multiple times
            - Closes both WebSocket and HTTP session
        """
        await self.disconnect()

        if self.session and not self.session.closed:
            await self.session.close()
            self.logger.debug("Session closed")

    # ============================================
    # Message Streaming
    # ============================================

    async def messages(self) -> AsyncGenerator[Any, None]:
        """
        Yield decoded JSON messages from the current connection.

        Returns when the server closes the connection or an error frame
        arrives; the state is DISCONNECTED afterwards.

        Yields:
            Decoded JSON (normally a list of ticker dicts)

        Raises:
            RuntimeError: If not connected

        Message Types:
            - WSMsgType.TEXT: JSON data (yielded; undecodable text is skipped)
            - WSMsgType.PING/PONG: Heartbeat (handled automatically)
            - WSMsgType.CLOSED: Connection closed (ends iteration)
            - WSMsgType.ERROR: Error (ends iteration)
        """
        if self.ws is None or self.state is not ConnectionState.CONNECTED:
            raise RuntimeError("Not connected. Call connect() first.")

        try:
            async for msg in self.ws:
                # Text message - parse and yield JSON
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                    except json.JSONDecodeError as e:
                        self.logger.warning(f"Failed to parse JSON: {msg.data[:100]}... Error: {e}")
                        continue
                    yield data

                # Connection closed
                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED):
                    self.logger.warning(f"WebSocket closed: {msg.data}")
                    break

                # Error
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    log_websocket_event("binance", "error", f"{msg.data!r}")
                    break

                # Ping/Pong (handled automatically by aiohttp)
                else:
                    self.logger.debug(f"Received message type: {msg.type}")
        finally:
            await self.disconnect()


def create_ticker_stream(config=None) -> BinanceTickerStream:
    """
    Create a ticker stream client from settings.

    Args:
        config: Settings instance (defaults to the global settings)

    Returns:
        BinanceTickerStream configured with URL, heartbeat and timeout
    """
    if config is None:
        from core.config import settings as config

    return BinanceTickerStream(
        url=config.binance_ws_url,
        heartbeat=config.ws_heartbeat,
        connect_timeout=config.ws_connect_timeout,
    )
