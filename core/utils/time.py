"""
Time Utilities

The relay stamps everything in Unix epoch milliseconds: snapshot
lastUpdated, push/poll timestamps, and the price table's last update. Binance
uses the same unit, and so does the browser's Date.now().

These helpers produce those stamps and convert them back to timezone-aware
UTC datetimes for human-facing output such as /health.
"""

import time
from datetime import datetime, timezone
from typing import Union


def current_utc_timestamp(milliseconds: bool = True) -> int:
    """
    Get the current Unix timestamp.

    Args:
        milliseconds: If True (default), return milliseconds; otherwise seconds

    Returns:
        int: Current Unix timestamp

    Examples:
        >>> current_utc_timestamp()
        1704110400000

        >>> current_utc_timestamp(milliseconds=False)
        1704110400
    """
    now = time.time()
    return int(now * 1000) if milliseconds else int(now)


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: assumed to be milliseconds
        - Otherwise: assumed to be seconds

    Args:
        timestamp: Unix timestamp in seconds or milliseconds

    Returns:
        datetime: Timezone-aware datetime object in UTC

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > 1e12:
        timestamp = timestamp / 1000.0

    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")
