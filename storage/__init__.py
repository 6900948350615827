"""
Storage Package

Holds the relay's in-memory state.

Current implementation:
- PriceTable: latest price snapshot per tracked token

Price history is not persisted; the table only ever reflects the newest tick.
"""

from storage.price_table import PriceTable

__all__ = ["PriceTable"]
