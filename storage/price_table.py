"""
In-Memory Price Table

Holds the latest PriceSnapshot for every tracked token. This is the only
shared price state in the process.

Ownership:
    - Constructed once in the application lifespan and injected into the
      feed, the broadcaster and the HTTP handlers.
    - Writer: PriceFeed (one batch at a time).
    - Readers: Broadcaster, HTTP poll endpoint, any valuation collaborator.

Invariants:
    - After initialize(), every configured token id has an entry; entries are
      never removed.
    - Snapshots are immutable and replaced atomically per key under the lock,
      so snapshot_all() never returns a partially updated record.
"""

from threading import Lock
from typing import Dict, Iterable, Optional

from core.logging import get_logger
from core.schemas import PriceSnapshot
from core.utils.time import current_utc_timestamp


DEFAULT_EPSILON = 1e-6


class PriceTable:
    """
    Thread-safe table of the latest price snapshot per token.

    Example:
        >>> table = PriceTable()
        >>> table.initialize(["eth", "sol"])
        >>> table.apply_update("eth", price=2500.0, price_change_24h=50.0,
        ...                    price_change_percentage_24h=2.04, volume_24h=2_500_000.0)
        True
        >>> table.snapshot_all()["eth"].price
        2500.0
    """

    def __init__(self, epsilon: float = DEFAULT_EPSILON) -> None:
        self._prices: Dict[str, PriceSnapshot] = {}
        self._lock = Lock()
        self._epsilon = epsilon
        self._initialized = False
        self._version = 0  # bumped on every visible change
        self._last_update = 0
        self._logger = get_logger(__name__)

    # ============================================
    # Lifecycle
    # ============================================

    def initialize(self, token_ids: Iterable[str]) -> None:
        """
        Populate one zeroed snapshot per token id.

        Args:
            token_ids: Configured token identifiers

        Raises:
            RuntimeError: If the table was already initialized
        """
        with self._lock:
            if self._initialized:
                raise RuntimeError("PriceTable already initialized")

            now = current_utc_timestamp()
            self._prices = {token_id: PriceSnapshot.zeroed(token_id, now) for token_id in token_ids}
            self._last_update = now
            self._initialized = True

        self._logger.info(f"Price table initialized with {len(self._prices)} tokens")

    # ============================================
    # Writes
    # ============================================

    def apply_update(
        self,
        token_id: str,
        price: float,
        price_change_24h: float,
        price_change_percentage_24h: float,
        volume_24h: float,
        timestamp: Optional[int] = None
    ) -> bool:
        """
        Replace a token's snapshot if the price visibly changed.

        A change is recorded when the new price differs from the stored one by
        more than epsilon, or when the stored price is exactly zero (the token
        has never been priced).

        Args:
            token_id: Token identifier
            price: Last traded price
            price_change_24h: Absolute 24h change
            price_change_percentage_24h: 24h change in percent
            volume_24h: 24h quote volume
            timestamp: Snapshot time in epoch ms (defaults to now)

        Returns:
            True if the snapshot was replaced, False otherwise (including
            unknown token ids, which are ignored)
        """
        with self._lock:
            current = self._prices.get(token_id)
            if current is None:
                return False

            if abs(current.price - price) <= self._epsilon and current.price != 0:
                return False

            ts = timestamp if timestamp is not None else current_utc_timestamp()
            self._prices[token_id] = PriceSnapshot(
                id=token_id,
                price=price,
                price_change_24h=price_change_24h,
                price_change_percentage_24h=price_change_percentage_24h,
                market_cap=current.market_cap,
                volume_24h=volume_24h,
                last_updated=ts,
            )
            self._version += 1
            # Push timestamps must never go backwards
            self._last_update = max(self._last_update, ts)
            return True

    # ============================================
    # Reads
    # ============================================

    def snapshot_all(self) -> Dict[str, PriceSnapshot]:
        """Read-consistent copy of the whole table. Snapshots are shared, not copied (they are immutable)."""
        with self._lock:
            return dict(self._prices)

    def get(self, token_id: str) -> Optional[PriceSnapshot]:
        """Latest snapshot for one token, or None if the id is not tracked."""
        with self._lock:
            return self._prices.get(token_id)

    @property
    def version(self) -> int:
        """Number of visible changes applied so far."""
        return self._version

    @property
    def last_update(self) -> int:
        """Epoch ms of the most recent visible change (initialization time before any)."""
        return self._last_update

    @property
    def initialized(self) -> bool:
        return self._initialized

    def __len__(self) -> int:
        with self._lock:
            return len(self._prices)

    def __contains__(self, token_id: str) -> bool:
        with self._lock:
            return token_id in self._prices
