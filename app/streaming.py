"""
Server-Sent Events Streaming

Turns a Subscriber into an SSE byte stream for StreamingResponse:

    data: {"type":"prices","data":{...},"timestamp":1704110400000}

    :heartbeat

Price pushes are written as they arrive. Independently of price traffic, a
keep-alive comment goes out on a fixed schedule so proxies and load
balancers do not time the connection out.
"""

import asyncio
from typing import AsyncGenerator

from core.logging import get_logger
from services.broadcaster import Broadcaster
from services.subscribers import Subscriber

logger = get_logger(__name__)

KEEPALIVE_FRAME = ":heartbeat\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
}


def format_event(payload: str) -> str:
    """Frame one serialized payload as an SSE data event."""
    return f"data: {payload}\n\n"


async def subscriber_events(
    subscriber: Subscriber,
    keepalive_interval: float = 30.0
) -> AsyncGenerator[str, None]:
    """
    Yield SSE frames for one subscriber until it is closed.

    Args:
        subscriber: Registered subscriber to drain
        keepalive_interval: Seconds between keep-alive frames

    Yields:
        SSE-formatted strings (data events and keep-alive comments)
    """
    loop = asyncio.get_running_loop()
    next_keepalive = loop.time() + keepalive_interval

    while True:
        timeout = next_keepalive - loop.time()
        if timeout <= 0:
            yield KEEPALIVE_FRAME
            next_keepalive += keepalive_interval
            continue

        try:
            payload = await asyncio.wait_for(subscriber.next_payload(), timeout=timeout)
        except asyncio.TimeoutError:
            continue

        if payload is None:
            return
        yield format_event(payload)


async def stream_prices(
    broadcaster: Broadcaster,
    client_name: str,
    keepalive_interval: float = 30.0
) -> AsyncGenerator[str, None]:
    """
    Full lifetime of one streaming client.

    Registers a subscriber (which queues the bootstrap snapshot), streams
    its frames, and unregisters it when the client goes away. Starlette
    cancels this generator as soon as the client disconnects, so the
    finally block runs immediately rather than on the next broadcast.
    """
    subscriber = broadcaster.subscribe(client_name)
    try:
        async for frame in subscriber_events(subscriber, keepalive_interval):
            yield frame
    except asyncio.CancelledError:
        logger.info(f"SSE stream cancelled for: {client_name}")
        raise
    finally:
        broadcaster.unsubscribe(subscriber)
