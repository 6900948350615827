"""
Unit Tests for Server-Sent Events Streaming

These tests verify that:
- Price payloads are framed as SSE data events
- Keep-alive frames go out even when prices never change
- A streaming client is unregistered when its stream ends

Run with:
    pytest tests/unit/test_streaming.py -v
"""

import asyncio
import json
import pytest

from app.streaming import KEEPALIVE_FRAME, format_event, stream_prices, subscriber_events
from services.broadcaster import Broadcaster
from services.subscribers import Subscriber, SubscriberRegistry
from storage.price_table import PriceTable


@pytest.fixture
def broadcaster():
    table = PriceTable()
    table.initialize(["eth"])
    return Broadcaster(table, SubscriberRegistry())


async def next_frame(gen, timeout=1.0):
    return await asyncio.wait_for(gen.__anext__(), timeout=timeout)


def test_format_event():
    assert format_event('{"a":1}') == 'data: {"a":1}\n\n'


class TestSubscriberEvents:
    """Tests for framing a single subscriber"""

    @pytest.mark.asyncio
    async def test_payload_framed(self):
        sub = Subscriber("a")
        sub.push('{"type":"prices"}')
        gen = subscriber_events(sub, keepalive_interval=10)

        assert await next_frame(gen) == 'data: {"type":"prices"}\n\n'
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_keepalive_without_changes(self):
        sub = Subscriber("idle")
        gen = subscriber_events(sub, keepalive_interval=0.05)

        assert await next_frame(gen) == KEEPALIVE_FRAME
        assert await next_frame(gen) == KEEPALIVE_FRAME
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_keepalive_interleaves_with_traffic(self):
        sub = Subscriber("busy")
        gen = subscriber_events(sub, keepalive_interval=0.1)

        frames = []

        async def produce():
            for i in range(6):
                sub.push(str(i))
                await asyncio.sleep(0.03)

        producer = asyncio.create_task(produce())
        while KEEPALIVE_FRAME not in frames:
            frames.append(await next_frame(gen))
        await producer
        await gen.aclose()

        assert frames[0] == "data: 0\n\n"

    @pytest.mark.asyncio
    async def test_ends_when_closed(self):
        sub = Subscriber("a")
        gen = subscriber_events(sub, keepalive_interval=10)
        sub.close()

        with pytest.raises(StopAsyncIteration):
            await next_frame(gen)


class TestStreamPrices:
    """Tests for the full client lifetime"""

    @pytest.mark.asyncio
    async def test_first_frame_is_bootstrap(self, broadcaster):
        gen = stream_prices(broadcaster, "client", keepalive_interval=10)

        frame = await next_frame(gen)
        assert frame.startswith("data: ")
        payload = json.loads(frame[len("data: "):])
        assert payload["type"] == "prices"
        assert set(payload["data"]) == {"eth"}
        assert len(broadcaster.registry) == 1

        await gen.aclose()
        assert len(broadcaster.registry) == 0

    @pytest.mark.asyncio
    async def test_bootstrap_framed_before_later_push(self, broadcaster):
        sub = broadcaster.subscribe("client")
        bootstrap = broadcaster.serialize_push()
        broadcaster.broadcast('{"type":"prices","data":{},"timestamp":1}')

        gen = subscriber_events(sub, keepalive_interval=10)
        assert await next_frame(gen) == f"data: {bootstrap}\n\n"
        assert await next_frame(gen) == 'data: {"type":"prices","data":{},"timestamp":1}\n\n'
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_broadcast_reaches_stream(self, broadcaster):
        gen = stream_prices(broadcaster, "client", keepalive_interval=10)
        await next_frame(gen)

        broadcaster.broadcast()
        frame = await next_frame(gen)
        assert json.loads(frame[len("data: "):])["type"] == "prices"
        await gen.aclose()

    @pytest.mark.asyncio
    async def test_cancelled_client_unregistered(self, broadcaster):
        frames = []

        async def consume():
            async for frame in stream_prices(broadcaster, "client", keepalive_interval=10):
                frames.append(frame)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.05)
        assert len(broadcaster.registry) == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(frames) == 1
        assert len(broadcaster.registry) == 0
        assert broadcaster.broadcast() == 0
