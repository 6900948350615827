"""
Price Relay - Central Owner of the Relay Components

Builds and owns the one instance of every shared component:

    BinanceTickerStream ──► PriceFeed ──► PriceTable
            ▲                   │
     FeedSupervisor             └──► Broadcaster ──► SubscriberRegistry

The relay is constructed once in the application lifespan and reached by
HTTP handlers through app.state; nothing here is a module-level global.

Example Usage:
    relay = PriceRelay(settings)
    await relay.start()
    ...
    await relay.stop()
"""

from typing import Any, Dict, Optional

from core.config import Settings
from core.logging import logger
from exchanges.binance.ws_client import BinanceTickerStream, create_ticker_stream
from services.broadcaster import Broadcaster
from services.feed_supervisor import FeedSupervisor
from services.price_feed import PriceFeed
from services.subscribers import SubscriberRegistry
from storage.price_table import PriceTable


class PriceRelay:
    """
    Composition root for the price relay.

    Attributes:
        config: Settings the relay was built from
        price_table: Shared PriceTable
        registry: SubscriberRegistry
        broadcaster: Broadcaster over the table and registry
        feed: PriceFeed applying upstream batches
        supervisor: FeedSupervisor owning the upstream stream
    """

    def __init__(self, config: Settings, stream: Optional[BinanceTickerStream] = None) -> None:
        """
        Args:
            config: Application settings
            stream: Upstream transport override (defaults to a BinanceTickerStream from settings)
        """
        self.config = config
        self.price_table = PriceTable(epsilon=config.price_change_epsilon)
        self.registry = SubscriberRegistry()
        self.broadcaster = Broadcaster(
            self.price_table,
            self.registry,
            max_pending=config.subscriber_max_pending,
        )
        self.feed = PriceFeed(self.price_table, self.broadcaster)
        self.supervisor = FeedSupervisor(
            stream if stream is not None else create_ticker_stream(config),
            self.feed,
            reconnect_delay=config.ws_reconnect_delay,
        )

    # ============================================
    # Lifecycle Management
    # ============================================

    async def start(self) -> None:
        """Initialize the price table and start the upstream supervisor."""
        self.price_table.initialize(self.config.tracked_tokens_list)
        await self.supervisor.start()
        logger.info("Price relay started")

    async def stop(self) -> None:
        """Stop the upstream supervisor and close every subscriber."""
        await self.supervisor.stop()
        for subscriber in self.registry.members():
            self.registry.unregister(subscriber)
        logger.info("Price relay stopped")

    # ============================================
    # Status
    # ============================================

    def status(self) -> Dict[str, Any]:
        """Health summary for the /health endpoint."""
        return {
            "upstream": self.supervisor.state.value,
            "connect_attempts": self.supervisor.connect_attempts,
            "last_error": self.supervisor.last_error,
            "subscribers": len(self.registry),
            "tokens": len(self.price_table),
            "version": self.price_table.version,
            "last_update": self.price_table.last_update,
            "batches_processed": self.feed.batches_processed,
            "batches_discarded": self.feed.batches_discarded,
        }
