"""
Time Utilities

Snapshots, the rate gate and the staleness check all work in milliseconds
since epoch (the format stored in the cached snapshot). These helpers convert
between that representation and timezone-aware datetimes.
"""

import time
from datetime import datetime, timezone
from typing import Union


def to_utc_datetime(timestamp_ms: Union[int, float]) -> datetime:
    """
    Convert a millisecond timestamp to UTC datetime.

    Args:
        timestamp_ms: Unix timestamp in milliseconds

    Returns:
        datetime: Timezone-aware datetime object in UTC

    Raises:
        ValueError: If timestamp is negative or out of range

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
        >>> to_utc_datetime(946684800000)
        datetime.datetime(2000, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    if timestamp_ms < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp_ms}")

    try:
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp_ms}. Error: {e}")


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """
    Get current UTC timestamp.

    Args:
        milliseconds: If True, return milliseconds; if False, return seconds

    Examples:
        >>> current_utc_timestamp(milliseconds=True)
        1704110400000
    """
    now = time.time()
    return int(now * 1000) if milliseconds else int(now)


def to_local_time_string(timestamp_ms: Union[int, float]) -> str:
    """
    Render a millisecond timestamp as a wall-clock time in the local timezone,
    using the locale's time representation (e.g. "14:05:09").
    """
    return to_utc_datetime(timestamp_ms).astimezone().strftime("%X")
