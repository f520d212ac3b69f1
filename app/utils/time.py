"""Time Utilities for UTC management"""

from datetime import date, datetime, time, timezone
from typing import Any, Optional


def get_utc_now() -> datetime:
    """
    Returns a naive UTC datetime.
    All ledger timestamps are compared as naive UTC.
    Avoids 'datetime.utcnow()' deprecation warnings.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Leniently parse a timestamp.

    Accepts datetimes, dates and ISO-8601 strings (including a trailing 'Z').
    Anything else, or an unparseable string, gives None.
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_naive_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def end_of_day(value: datetime) -> datetime:
    # 23:59:59.999, inclusive upper bound
    return datetime.combine(value.date(), time(23, 59, 59, 999000))
