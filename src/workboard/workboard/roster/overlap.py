"""Month membership of date-ranged roster entries."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Tuple

from ..common.datetime_utils import month_bounds
from .model import DisplayRange, ScheduleEntry


def overlaps(entry: ScheduleEntry, window_start: datetime, window_end: datetime) -> bool:
    return entry.start <= window_end and entry.end >= window_start


def find_overlapping(entries: Iterable[ScheduleEntry], year: int, month: int) -> list[ScheduleEntry]:
    """Entries whose range touches the month. The only test for "belongs to this month"."""
    month_start, month_end = month_bounds(year, month)
    return [e for e in entries if overlaps(e, month_start, month_end)]


def compute_display_range(entry: ScheduleEntry, month_start: datetime, month_end: datetime) -> DisplayRange:
    """Clamp the entry to the month and express it as day-of-month bounds.

    Jan 28 - Feb 5 renders as (28, 31) in January and (1, 5) in February.
    """
    start = max(entry.start, month_start)
    end = min(entry.end, month_end)
    return DisplayRange(display_start_day=start.day, display_end_day=end.day)


def candidate_fetch_bounds(year: int, month: int, max_entry_duration: timedelta) -> Tuple[datetime, datetime]:
    """Range on entry *start* that is guaranteed to contain every overlapping entry.

    Holds as long as no entry lasts longer than ``max_entry_duration``.
    """
    month_start, month_end = month_bounds(year, month)
    return month_start - max_entry_duration, month_end
