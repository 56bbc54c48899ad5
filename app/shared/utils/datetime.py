"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Records store creation time as epoch milliseconds.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is UTC-aware.

    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def from_timestamp_ms_utc(timestamp_ms: int) -> datetime:
    """
    Create a UTC-aware datetime from a millisecond Unix timestamp.

    Args:
        timestamp_ms: Unix timestamp in milliseconds

    Returns:
        UTC-aware datetime
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)


def to_timestamp_ms(dt: datetime) -> int:
    """Return the millisecond Unix timestamp of a datetime (naive treated as UTC)."""
    return int(ensure_utc(dt).timestamp() * 1000)
