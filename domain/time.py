"""
Domain time utilities (pure).

Block timestamps arrive from the host in nanoseconds; every window comparison
in the sale works in whole seconds. Conversion happens here and nowhere else.

Behavior and error messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

NANOS_PER_SECOND: int = 10**9


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces the requirement that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def to_seconds(timestamp_ns: int) -> int:
    """
    Truncate a nanosecond block timestamp to whole seconds.

    Integer division, never rounding: 1_999_999_999 ns is second 1.
    """

    if timestamp_ns < 0:
        raise ValueError("timestamp_ns must be >= 0")
    return timestamp_ns // NANOS_PER_SECOND


def seconds_from_datetime(name: str, value: datetime) -> int:
    """Convert a UTC datetime to whole epoch seconds (sub-second part dropped)."""

    require_utc_timestamp(name, value)
    return int(value.timestamp())


def datetime_from_seconds(seconds: int) -> datetime:
    """Epoch seconds as a timezone-aware UTC datetime."""

    return datetime.fromtimestamp(seconds, tz=timezone.utc)
