"""
Time Utilities
==============

Every timestamp in the store is timezone-aware UTC. These helpers keep it
that way and do the calendar arithmetic the reports need.
"""

import calendar
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an ISO-8601 timestamp string into aware UTC.

    Accepts a trailing "Z". Raises ValueError on anything else unparseable.
    """
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def truncate_to_hour(value: datetime) -> datetime:
    """Top of the hour `value` falls in, in UTC."""
    return ensure_utc(value).replace(minute=0, second=0, microsecond=0)


def months_before(value: datetime, months: int) -> datetime:
    """
    Step back a number of calendar months.

    The day is clamped to the length of the target month
    (e.g. 31 July minus 5 months is 28/29 February).
    """
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
