"""
Upstream Feed Supervisor

Background service that keeps the single upstream connection alive.

Policy:
    - Whenever the connection drops (server close, transport error, or a
      failed connect), wait a flat reconnect delay and connect again.
    - Retries are unbounded; the relay is useless without its feed.
    - At most one connection attempt is in flight, and ensure_connected()
      does nothing while a connection is already up.

Use start() to begin supervising and stop() to cancel the loop and close
the connection.
"""

import asyncio
import contextlib
from typing import Optional

from core.logging import get_logger
from core.schemas import ConnectionState
from exchanges.binance.ws_client import BinanceTickerStream
from services.price_feed import PriceFeed


class FeedSupervisor:
    """
    Owns the upstream stream object and its reconnect loop.

    Args:
        stream: Upstream transport (BinanceTickerStream or compatible)
        feed: PriceFeed that receives every decoded message
        reconnect_delay: Seconds to wait before each reconnect

    Attributes:
        connect_attempts: Total connection attempts made
        last_error: repr() of the most recent transport error, if any
    """

    def __init__(self, stream: BinanceTickerStream, feed: PriceFeed, reconnect_delay: float = 5.0) -> None:
        self._stream = stream
        self._feed = feed
        self._reconnect_delay = reconnect_delay
        self._logger = get_logger(__name__)

        self._running = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._connect_lock = asyncio.Lock()

        self.connect_attempts = 0
        self.last_error: Optional[str] = None

    @property
    def state(self) -> ConnectionState:
        return self._stream.state

    @property
    def running(self) -> bool:
        return self._running.is_set()

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self) -> None:
        if self._running.is_set():
            return
        self._running.set()
        self._logger.info("Starting upstream feed supervisor...")
        self._task = asyncio.create_task(self._run(), name="feed_supervisor")

    async def stop(self) -> None:
        if not self._running.is_set():
            return
        self._logger.info("Stopping upstream feed supervisor...")
        self._running.clear()
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    # ============================================
    # Connection
    # ============================================

    async def ensure_connected(self) -> bool:
        """
        Open the upstream connection unless one is live or being opened.

        Returns:
            True if this call performed a connection attempt that succeeded,
            False if it was a no-op

        Raises:
            Whatever the transport raises on a failed attempt
        """
        if self._stream.state is not ConnectionState.DISCONNECTED or self._connect_lock.locked():
            return False

        async with self._connect_lock:
            self.connect_attempts += 1
            self._logger.info(f"Connecting to upstream feed (attempt {self.connect_attempts})")
            await self._stream.connect()
        return True

    # ============================================
    # Core Loop
    # ============================================

    async def _run(self) -> None:
        async with self._stream:
            while self._running.is_set():
                try:
                    await self.ensure_connected()
                    async for batch in self._stream.messages():
                        self._feed.handle_batch(batch)
                    self._logger.warning("Upstream feed closed by server")
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    self.last_error = repr(e)
                    self._logger.error(f"Upstream feed error: {e!r}")
                finally:
                    await self._stream.disconnect()

                if self._running.is_set():
                    self._logger.warning(f"Reconnecting to upstream feed in {self._reconnect_delay}s...")
                    await asyncio.sleep(self._reconnect_delay)
