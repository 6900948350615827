"""
Subscriber Registry

Tracks the downstream push channels currently connected to the relay. Each
subscriber owns a small asyncio.Queue holding serialized payloads that its
streaming response has not yet written out.

- The bootstrap snapshot is held apart from the queue and is always the
  first payload read, whatever arrives before that first read.
- Pushing never blocks: when a subscriber's queue is full the oldest pending
  payload is dropped, so a slow client only ever sees the newest table.
- Unregistering closes the subscriber, so no push can reach it afterwards
  even if a broadcast is already iterating over an older member list.
"""

import asyncio
from threading import Lock
from typing import List, Optional, Set

from core.logging import get_logger, log_subscriber_event


class SubscriberClosedError(Exception):
    """Raised when pushing to a subscriber that has been closed."""


class Subscriber:
    """
    Handle to one downstream push channel.

    Attributes:
        name: Human-readable label (usually the client address)
        closed: True once the subscriber has been unregistered or closed
        dropped: Pending payloads replaced by newer ones

    Example:
        >>> sub = Subscriber("127.0.0.1:51234", bootstrap='{"type": "prices", ...}')
        >>> sub.push('{"type": "prices", ...}')
        >>> payload = await sub.next_payload()  # the bootstrap payload
    """

    def __init__(self, name: str, max_pending: int = 1, bootstrap: Optional[str] = None) -> None:
        self.name = name
        self.closed = False
        self.dropped = 0
        # Held outside the queue so drop-oldest can never evict it
        self._bootstrap = bootstrap
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)

    def push(self, payload: str) -> None:
        """
        Hand a serialized payload to this subscriber without blocking.

        Raises:
            SubscriberClosedError: If the subscriber is closed
        """
        if self.closed:
            raise SubscriberClosedError(f"Subscriber {self.name} is closed")

        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            # Newest snapshot wins; older pending snapshots are stale anyway
            self._queue.get_nowait()
            self._queue.put_nowait(payload)
            self.dropped += 1

    async def next_payload(self) -> Optional[str]:
        """
        Wait for the next pending payload.

        The bootstrap payload, if any, is always returned first.

        Returns:
            The payload, or None once the subscriber is closed
        """
        if self._bootstrap is not None:
            payload, self._bootstrap = self._bootstrap, None
            return payload
        if self.closed and self._queue.empty():
            return None
        payload = await self._queue.get()
        return payload

    def close(self) -> None:
        """Close the subscriber and wake any reader waiting in next_payload(). Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        self._bootstrap = None
        while not self._queue.empty():
            self._queue.get_nowait()
        # Sentinel for a reader blocked in next_payload()
        self._queue.put_nowait(None)

    def __repr__(self) -> str:
        return f"Subscriber(name={self.name!r}, closed={self.closed})"


class SubscriberRegistry:
    """
    Set of currently connected subscribers.

    Registration, removal and iteration are guarded by one lock; members()
    returns a copy, so callers may iterate while subscribers are removed.
    """

    def __init__(self) -> None:
        self._subscribers: Set[Subscriber] = set()
        self._lock = Lock()
        self._logger = get_logger(__name__)

    def register(self, subscriber: Subscriber) -> Subscriber:
        """Add a subscriber and return it."""
        if subscriber.closed:
            raise SubscriberClosedError(f"Cannot register closed subscriber {subscriber.name}")
        with self._lock:
            self._subscribers.add(subscriber)
            total = len(self._subscribers)
        log_subscriber_event("registered", subscriber.name, total)
        return subscriber

    def unregister(self, subscriber: Subscriber, reason: str = "unregistered") -> bool:
        """
        Remove and close a subscriber.

        Args:
            subscriber: Subscriber to remove
            reason: Event label for the log line ("unregistered" or "dropped")

        Returns:
            True if the subscriber was registered, False if it was already gone
        """
        with self._lock:
            present = subscriber in self._subscribers
            self._subscribers.discard(subscriber)
            total = len(self._subscribers)
        subscriber.close()
        if present:
            log_subscriber_event(reason, subscriber.name, total)
        return present

    def members(self) -> List[Subscriber]:
        """Copy of the current member list."""
        with self._lock:
            return list(self._subscribers)

    def __contains__(self, subscriber: Subscriber) -> bool:
        with self._lock:
            return subscriber in self._subscribers

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)
