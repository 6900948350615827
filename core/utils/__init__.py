"""
Core Utilities Package

This package contains utility functions and helpers used throughout the relay.

Modules:
    - time: Epoch-millisecond timestamps and UTC conversion
"""

from core.utils.time import current_utc_timestamp, to_utc_datetime

__all__ = ["current_utc_timestamp", "to_utc_datetime"]
