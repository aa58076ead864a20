"""
Datetime helpers.

Timestamps are stored as naive UTC values; incoming aware datetimes are
converted before they reach the database.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def days_since(value: datetime | None) -> int:
    if value is None:
        return 0
    return max((utc_now() - to_naive_utc(value)).days, 0)
