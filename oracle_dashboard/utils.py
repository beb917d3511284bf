"""Shared utility helpers for oracle-dashboard."""

from __future__ import annotations

from datetime import datetime, timezone

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def from_epoch_millis(ms: int | float) -> datetime:
    """Convert an epoch-milliseconds timestamp to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def format_timestamp(ms: int | float, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    """Format an epoch-milliseconds timestamp in UTC.
    Out-of-range values come back as the raw number instead of raising."""
    try:
        return from_epoch_millis(ms).strftime(fmt)
    except (OverflowError, OSError, ValueError):
        return str(ms)


def format_amount(value: int | float) -> str:
    """Render a stake or payout without a trailing '.0' for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def short_address(address: str) -> str:
    """Abbreviate an address as first 6 chars + '...' + last 2 chars."""
    return f"{address[:6]}...{address[-2:]}"
