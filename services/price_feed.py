"""
Price Feed

Applies Binance 24h ticker batches to the price table and triggers one
broadcast per batch that changed anything.

Processing a batch:
    1. Keep only records whose symbol maps to a tracked token.
    2. Validate every kept record (numeric strings → floats). If any kept
       record is malformed the whole batch is discarded, so subscribers
       never see half of a batch.
    3. Apply each record to the price table. Quote volume is derived as
       base volume × last price.
    4. If at least one record changed the table, broadcast once.

Untracked symbols are skipped silently; Binance sends every listed pair.
"""

from typing import Any, List, Optional, Tuple

from pydantic import ValidationError

from core.logging import get_logger
from core.schemas import TickerRecord
from core.symbol_mapper import map_symbol
from services.broadcaster import Broadcaster
from storage.price_table import PriceTable


class MalformedBatchError(ValueError):
    """An upstream batch could not be parsed."""


class PriceFeed:
    """
    Upstream batch handler.

    Attributes:
        batches_processed: Batches applied (with or without changes)
        batches_discarded: Malformed batches dropped
        last_batch_changes: Number of snapshots replaced by the latest batch
    """

    def __init__(self, price_table: PriceTable, broadcaster: Broadcaster) -> None:
        self._table = price_table
        self._broadcaster = broadcaster
        self._logger = get_logger(__name__)

        self.batches_processed = 0
        self.batches_discarded = 0
        self.last_batch_changes = 0

    def handle_batch(self, batch: Any) -> bool:
        """
        Apply one upstream message.

        Args:
            batch: Decoded JSON message (expected: list of ticker dicts)

        Returns:
            True if the batch changed the table and a broadcast was sent
        """
        try:
            records = self.parse_batch(batch)
        except MalformedBatchError as e:
            self.batches_discarded += 1
            self._logger.warning(f"Discarding malformed ticker batch: {e}")
            return False

        changes = 0
        for token_id, record in records:
            changed = self._table.apply_update(
                token_id,
                price=record.last_price,
                price_change_24h=record.price_change,
                price_change_percentage_24h=record.price_change_percent,
                volume_24h=record.quote_volume,
            )
            if changed:
                changes += 1

        self.batches_processed += 1
        self.last_batch_changes = changes

        if not changes:
            return False

        self._logger.debug(f"Applied {changes} price changes from batch of {len(records)} tracked tickers")
        self._broadcaster.broadcast()
        return True

    @staticmethod
    def parse_batch(batch: Any) -> List[Tuple[str, TickerRecord]]:
        """
        Extract (token_id, TickerRecord) pairs for tracked symbols.

        Raises:
            MalformedBatchError: If the payload is not a list, or a tracked
                record is missing fields or carries non-numeric values
        """
        # A single ticker object is accepted as a batch of one
        if isinstance(batch, dict):
            batch = [batch]
        if not isinstance(batch, list):
            raise MalformedBatchError(f"expected a list of tickers, got {type(batch).__name__}")

        records: List[Tuple[str, TickerRecord]] = []
        for entry in batch:
            if not isinstance(entry, dict):
                continue
            symbol = entry.get("s")
            token_id: Optional[str] = map_symbol(symbol) if isinstance(symbol, str) else None
            if token_id is None:
                continue

            try:
                records.append((token_id, TickerRecord.model_validate(entry)))
            except ValidationError as e:
                raise MalformedBatchError(f"bad ticker for {symbol}: {e.error_count()} invalid field(s)") from e

        return records
