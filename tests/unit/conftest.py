"""
Shared fixtures for unit tests.

FakeTickerStream stands in for BinanceTickerStream: it speaks the same
connect()/messages()/disconnect() protocol without touching the network.
"""

import asyncio
import pytest

from core.config import Settings
from core.schemas import ConnectionState


class FakeTickerStream:
    """
    In-memory upstream stream.

    Args:
        batches: Messages yielded by the first connection
        fail_connects: Number of initial connect() calls that raise
        close_first: If True the first connection ends after its batches
            (server close); every later connection stays open until cancelled
    """

    def __init__(self, batches=None, fail_connects=0, close_first=False):
        self.state = ConnectionState.DISCONNECTED
        self.batches = list(batches or [])
        self.fail_connects = fail_connects
        self.close_first = close_first
        self.connects = 0
        self.disconnects = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    async def connect(self):
        self.connects += 1
        self.state = ConnectionState.CONNECTING
        await asyncio.sleep(0.01)
        if self.connects <= self.fail_connects:
            self.state = ConnectionState.DISCONNECTED
            raise ConnectionRefusedError("upstream refused")
        self.state = ConnectionState.CONNECTED

    async def disconnect(self):
        self.disconnects += 1
        self.state = ConnectionState.DISCONNECTED

    async def messages(self):
        batches, self.batches = self.batches, []
        for batch in batches:
            yield batch
        if self.close_first and self.connects - self.fail_connects == 1:
            return
        await asyncio.Event().wait()


@pytest.fixture
def fake_stream():
    return FakeTickerStream()


@pytest.fixture
def stream_factory():
    """Build a FakeTickerStream with custom behaviour."""
    return FakeTickerStream


@pytest.fixture
def relay_config():
    return Settings(
        _env_file=None,
        tracked_tokens="eth,sol",
        ws_reconnect_delay=0.05,
        sse_keepalive_interval=0.05,
    )
