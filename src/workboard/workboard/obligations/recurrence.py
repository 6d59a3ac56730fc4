"""Next-due-date computation for recurring obligations.

All functions here are pure: they take already-validated values and never
touch storage or the clock.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.datetime_utils import add_months, months_between
from ..core.enums import RecurrencePattern

_DESCRIPTIONS = {
    RecurrencePattern.MONTHLY: "Every month",
    RecurrencePattern.QUARTERLY: "Every 3 months",
    RecurrencePattern.HALF_YEARLY: "Every 6 months",
    RecurrencePattern.YEARLY: "Every year",
}


def compute_next_occurrence(
    start_date: date,
    pattern: RecurrencePattern,
    reference_date: date,
    end_date: Optional[date] = None,
) -> Optional[date]:
    """Earliest occurrence on or after ``reference_date``.

    Occurrences are ``add_months(start_date, k * period)`` for k = 0, 1, 2, ...
    Each candidate is derived from ``start_date`` itself, so a month-end start
    (e.g. the 31st) snaps back to the 31st whenever the month allows it.

    Returns None once the series has run past ``end_date``.
    """
    if start_date >= reference_date:
        candidate = start_date
    else:
        step = pattern.period_months
        # Month distance gives a lower bound for k; clamping can push that candidate
        # below the reference date by a few days, in which case one more step is due.
        k = max(months_between(start_date, reference_date) // step, 0)
        candidate = add_months(start_date, k * step)
        while candidate < reference_date:
            k += 1
            candidate = add_months(start_date, k * step)

    if end_date is not None and candidate > end_date:
        return None
    return candidate


def upcoming_occurrences(
    start_date: date,
    pattern: RecurrencePattern,
    reference_date: date,
    count: int,
    end_date: Optional[date] = None,
) -> list[date]:
    """The next ``count`` occurrences, starting with :func:`compute_next_occurrence`.

    Shorter than ``count`` (possibly empty) when ``end_date`` cuts the series off.
    """
    if count <= 0:
        return []

    first = compute_next_occurrence(start_date, pattern, reference_date, end_date)
    if first is None:
        return []

    step = pattern.period_months
    k0 = months_between(start_date, first) // step
    out = [add_months(start_date, (k0 + i) * step) for i in range(count)]
    if end_date is not None:
        out = [d for d in out if d <= end_date]
    return out


def describe_pattern(pattern: RecurrencePattern) -> str:
    return _DESCRIPTIONS[pattern]
