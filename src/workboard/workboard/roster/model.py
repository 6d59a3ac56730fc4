from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EntryKind


@dataclass(frozen=True)
class ScheduleEntry:
    """A planned piece of work by one agent over a date-time range.

    No month/year is stored: which months an entry belongs to is always
    computed from ``start``/``end``.
    """

    entry_id: int
    agent_id: str
    label: str
    start: datetime
    end: datetime
    kind: EntryKind
    entity_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def duration_hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600


@dataclass(frozen=True)
class DisplayRange:
    display_start_day: int
    display_end_day: int

    def covers(self, day: int) -> bool:
        return self.display_start_day <= day <= self.display_end_day


@dataclass(frozen=True)
class RosterActivity:
    """Read-model: an entry as it appears in one month's roster view."""

    entry: ScheduleEntry
    display: DisplayRange


@dataclass(frozen=True)
class DayCounts:
    long_count: int
    short_count: int
    none_count: int

    @property
    def total(self) -> int:
        return self.long_count + self.short_count + self.none_count
