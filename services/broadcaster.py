"""
Price Broadcaster

Fans the price table out to every registered subscriber.

- subscribe(): registers a new subscriber with the full current table
  already queued, so its first payload is the bootstrap snapshot.
- broadcast(): serializes the table once and pushes the identical payload
  to every member. A member whose push fails is unregistered on the spot;
  there is no retry and no replay.
"""

from typing import Optional

from core.logging import get_logger
from core.schemas import PricesPoll, PricesPush
from services.subscribers import Subscriber, SubscriberRegistry
from storage.price_table import PriceTable


class Broadcaster:
    """
    Serializes price table snapshots and pushes them to subscribers.

    Args:
        price_table: Shared price table (read only)
        registry: Subscriber registry to push to
        max_pending: Pending payloads allowed per new subscriber

    Example:
        >>> broadcaster = Broadcaster(table, SubscriberRegistry())
        >>> sub = broadcaster.subscribe("127.0.0.1:51234")
        >>> broadcaster.broadcast()
        1
    """

    def __init__(self, price_table: PriceTable, registry: SubscriberRegistry, max_pending: int = 1) -> None:
        self._table = price_table
        self._registry = registry
        self._max_pending = max_pending
        self._logger = get_logger(__name__)
        self.broadcast_count = 0

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    # ============================================
    # Payloads
    # ============================================

    def build_push(self) -> PricesPush:
        """Point-in-time streaming payload for the whole table."""
        return PricesPush(data=self._table.snapshot_all(), timestamp=self._table.last_update)

    def build_poll(self) -> PricesPoll:
        """Point-in-time request/response payload for the whole table."""
        return PricesPoll(prices=self._table.snapshot_all(), timestamp=self._table.last_update)

    def serialize_push(self) -> str:
        return self.build_push().model_dump_json(by_alias=True)

    # ============================================
    # Subscriber Lifecycle
    # ============================================

    def subscribe(self, name: str) -> Subscriber:
        """
        Create, bootstrap and register a subscriber.

        The bootstrap payload is serialized before registration with no
        suspension point in between, and later broadcasts queue behind it
        rather than replacing it.
        """
        subscriber = Subscriber(name, max_pending=self._max_pending, bootstrap=self.serialize_push())
        return self._registry.register(subscriber)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        self._registry.unregister(subscriber)

    # ============================================
    # Broadcast
    # ============================================

    def broadcast(self, payload: Optional[str] = None) -> int:
        """
        Push the current table to every subscriber.

        Args:
            payload: Pre-serialized payload (serializes the table when None)

        Returns:
            Number of subscribers the payload was delivered to
        """
        members = self._registry.members()
        if not members:
            return 0

        if payload is None:
            payload = self.serialize_push()

        delivered = 0
        for subscriber in members:
            try:
                subscriber.push(payload)
                delivered += 1
            except Exception as e:
                self._logger.debug(f"Push to {subscriber.name} failed: {e}")
                self._registry.unregister(subscriber, reason="dropped")

        self.broadcast_count += 1
        self._logger.debug(f"Broadcast delivered to {delivered}/{len(members)} subscribers")
        return delivered
