"""
Time Utilities
==============

MongoDB stores datetimes as UTC with millisecond precision and hands them
back naive. Everything we write goes through to_storage_time and everything
we read goes through from_storage_time, so the rest of the code only ever
sees timezone-aware UTC datetimes.
"""

from datetime import datetime, timezone
from typing import Optional

from dateutil.relativedelta import relativedelta


def utc_now() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def to_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to the naive UTC form MongoDB stores.

    Naive input is assumed to already be UTC. Microseconds are truncated to
    milliseconds, the precision MongoDB keeps.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def from_storage_time(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to a naive datetime read back from MongoDB."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def months_before(moment: datetime, months: int) -> datetime:
    """
    The same wall-clock time `months` calendar months earlier.

    Day-of-month is clamped (31 March minus one month is 28/29 February).
    """
    return moment - relativedelta(months=months)
