"""Calendar periods (months) on which an obligation falls due."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

from ..common.datetime_utils import from_month_index, month_index, parse_period_key, period_key
from ..common.validators import require_non_negative
from ..core.enums import RecurrencePattern


@dataclass(frozen=True)
class Period:
    period_key: str
    year: int
    month: int
    is_past: bool
    is_current: bool
    is_future: bool


@dataclass(frozen=True)
class PeriodWindow:
    """How far around ``anchor_date`` to look for applicable periods."""

    anchor_date: date
    months_back: int
    months_forward: int

    @classmethod
    def build(cls, *, anchor_date: date, months_back, months_forward) -> "PeriodWindow":
        return cls(
            anchor_date=anchor_date,
            months_back=require_non_negative(months_back, "months_back"),
            months_forward=require_non_negative(months_forward, "months_forward"),
        )


def _on_cadence(pattern: RecurrencePattern, start_index: int, index: int) -> bool:
    return (index - start_index) % pattern.period_months == 0


def _last_index(end_date: Optional[date]) -> Optional[int]:
    return month_index(end_date.year, end_date.month) if end_date is not None else None


def generate_periods(
    pattern: RecurrencePattern,
    obligation_start_date: date,
    anchor_date: date,
    months_back: int,
    months_forward: int,
    end_date: Optional[date] = None,
) -> Tuple[Period, ...]:
    """Cadence months within ``[anchor - months_back, anchor + months_forward]``.

    The cadence is anchored on the obligation's own start month: a quarterly
    obligation starting in February falls in Feb/May/Aug/Nov. Months after the
    month of ``end_date`` (when given) are dropped. Output is chronological.
    """
    anchor = month_index(anchor_date.year, anchor_date.month)
    start = month_index(obligation_start_date.year, obligation_start_date.month)
    last = _last_index(end_date)

    out: list[Period] = []
    for index in range(anchor - months_back, anchor + months_forward + 1):
        if last is not None and index > last:
            break
        if not _on_cadence(pattern, start, index):
            continue
        year, month = from_month_index(index)
        out.append(
            Period(
                period_key=period_key(year, month),
                year=year,
                month=month,
                is_past=index < anchor,
                is_current=index == anchor,
                is_future=index > anchor,
            )
        )
    return tuple(out)


def is_applicable_period(
    pattern: RecurrencePattern,
    obligation_start_date: date,
    key: str,
    end_date: Optional[date] = None,
) -> bool:
    year, month = parse_period_key(key)
    index = month_index(year, month)
    last = _last_index(end_date)
    if last is not None and index > last:
        return False
    start = month_index(obligation_start_date.year, obligation_start_date.month)
    return _on_cadence(pattern, start, index)


def order_current_first(periods: Iterable[Period]) -> list[Period]:
    """Display ordering: current, then upcoming (soonest first), then past (latest first)."""
    items = list(periods)
    current = [p for p in items if p.is_current]
    future = sorted((p for p in items if p.is_future), key=lambda p: p.period_key)
    past = sorted((p for p in items if p.is_past), key=lambda p: p.period_key, reverse=True)
    return current + future + past
