"""
Date and Period Utilities

A period is a calendar month keyed as "YYYY-MM". Every entry in the ledger
lives in the bucket of the period its date falls in.

All parsing uses local calendar semantics: an ISO date string is read as a
plain calendar date and never shifted through UTC.
"""

from datetime import date, datetime, timezone
from typing import Union

from dateutil.relativedelta import relativedelta


DateLike = Union[date, datetime, str]

PERIOD_FORMAT = "%Y-%m"


def parse_local_date(value: DateLike) -> date:
    """
    Parse a calendar date.

    Accepts a date, a datetime (its calendar date is used as-is) or an
    ISO "YYYY-MM-DD" string.

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Not a date: {value!r}")
    return date.fromisoformat(value.strip())


def period_of(value: DateLike) -> str:
    """Map a date to its zero-padded "YYYY-MM" period key."""
    d = parse_local_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def add_months(value: DateLike, months: int) -> date:
    """
    Add a number of calendar months to a date.

    Day-of-month overflow is clamped to the last valid day of the target
    month, so 2024-01-31 + 1 month is 2024-02-29.
    """
    return parse_local_date(value) + relativedelta(months=months)


def period_start(key: str) -> date:
    """First day of a period."""
    return datetime.strptime(key, PERIOD_FORMAT).date()


def shift_period(key: str, months: int) -> str:
    """Move a period key forward (or backward) by whole months."""
    return period_of(add_months(period_start(key), months))


def months_between(start: str, end: str) -> int:
    """Number of months from period `start` to period `end` (may be negative)."""
    a = period_start(start)
    b = period_start(end)
    return (b.year - a.year) * 12 + (b.month - a.month)


def today_local() -> date:
    """Today's date in the host's local calendar."""
    return date.today()


def current_period() -> str:
    return period_of(today_local())


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp for created/updated stamps."""
    return datetime.now(timezone.utc)


def format_date(value: DateLike) -> str:
    """Format a date for display (DD/MM/YYYY)."""
    return parse_local_date(value).strftime("%d/%m/%Y")
