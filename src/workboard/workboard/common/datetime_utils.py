from __future__ import annotations

import calendar
from datetime import date, datetime, time
from typing import Tuple

from dateutil.relativedelta import relativedelta

from ..core.constants import PERIOD_KEY_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 date-time (``YYYY-MM-DDTHH:MM[:SS]``). An explicit UTC offset is kept on the result."""
    return datetime.fromisoformat(value.strip())


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by whole months, keeping its day-of-month.

    The day is clamped to the last day of the target month (Jan 31 + 1 -> Feb 28/29).
    """
    return value + relativedelta(months=months)


def month_index(year: int, month: int) -> int:
    """Absolute month number, handy for month arithmetic and distances."""
    return year * 12 + (month - 1)


def from_month_index(index: int) -> Tuple[int, int]:
    year, month0 = divmod(index, 12)
    return year, month0 + 1


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start``'s month to ``end``'s month (day ignored)."""
    return month_index(end.year, end.month) - month_index(start.year, start.month)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First and last instant of a calendar month."""
    first = datetime(year, month, 1)
    last = datetime.combine(date(year, month, days_in_month(year, month)), time.max)
    return first, last


def period_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def period_key_for(value: date) -> str:
    return period_key(value.year, value.month)


def parse_period_key(value: str) -> Tuple[int, int]:
    """Parse ``YYYY-MM`` into ``(year, month)``."""
    try:
        parsed = datetime.strptime((value or "").strip(), PERIOD_KEY_FORMAT)
    except ValueError:
        raise ValidationError(f"Invalid period key (YYYY-MM): {value!r}")
    return parsed.year, parsed.month
