from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LONG_DAY_HOURS, DEFAULT_MAX_ENTRY_DAYS
from ..core.enums import EntryKind, Severity
from ..core.exceptions import InvalidDateRange, ScheduleEntryNotFound, ValidationError
from .model import DayCounts, RosterActivity, ScheduleEntry
from .overlap import candidate_fetch_bounds, compute_display_range, find_overlapping, overlaps
from .repository import ScheduleEntryRepository
from .severity import agent_day_severities, aggregate_month

logger = logging.getLogger(__name__)


def _require_month(year: int, month: int) -> tuple[int, int]:
    year, month = int(year), int(month)
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not 1 <= year <= 9999:
        raise ValidationError("Year is out of range")
    return year, month


class RosterService:
    """Roster planning and the monthly roster / workload views."""

    def __init__(
        self,
        entries: ScheduleEntryRepository,
        *,
        long_day_hours: float = DEFAULT_LONG_DAY_HOURS,
        max_entry_days: int = DEFAULT_MAX_ENTRY_DAYS,
    ):
        self._entries = entries
        self._long_day_hours = float(long_day_hours)
        self._max_entry_duration = timedelta(days=int(max_entry_days))

    def plan_entry(
        self,
        *,
        agent_id: str,
        label: str,
        start: datetime,
        end: datetime,
        kind: EntryKind | str,
        entity_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ScheduleEntry:
        agent_id = require_non_empty(str(agent_id or ""), "Agent")
        label = require_non_empty(label, "Label")
        kind = EntryKind.parse(kind)
        if not isinstance(start, datetime) or not isinstance(end, datetime):
            raise ValidationError("Start and end date-times are required")
        if start.tzinfo is not None or end.tzinfo is not None:
            raise ValidationError("Start and end must be local date-times without a UTC offset")

        if end < start:
            raise InvalidDateRange("End must not be before start")
        if end - start > self._max_entry_duration:
            raise ValidationError(f"An entry may not last longer than {self._max_entry_duration.days} days")
        if kind is EntryKind.SINGLE_ASSIGNMENT and start.date() != end.date():
            raise ValidationError("A single assignment must start and end on the same day")
        if kind is EntryKind.MULTI_DAY_ACTIVITY:
            self._check_no_conflict(agent_id, start, end)

        entity_id = (entity_id or "").strip() or None
        notes = (notes or "").strip() or None

        entry_id = self._entries.create(
            agent_id=agent_id,
            label=label,
            start=start,
            end=end,
            kind=kind,
            entity_id=entity_id,
            notes=notes,
        )
        logger.info("Agent %s planned entry %s (%s -> %s)", agent_id, entry_id, start.isoformat(), end.isoformat())

        return ScheduleEntry(
            entry_id=entry_id,
            agent_id=agent_id,
            label=label,
            start=start,
            end=end,
            kind=kind,
            entity_id=entity_id,
            notes=notes,
        )

    def _check_no_conflict(self, agent_id: str, start: datetime, end: datetime) -> None:
        """An agent's multi-day activities must not overlap each other."""
        # Stored entries never exceed the max duration, so any overlap starts after this.
        candidates = self._entries.list_starting_between(
            start=start - self._max_entry_duration,
            end=end,
            agent_id=agent_id,
        )
        for existing in candidates:
            if existing.kind is EntryKind.MULTI_DAY_ACTIVITY and overlaps(existing, start, end):
                raise ValidationError(
                    f"This schedule overlaps with entry {existing.entry_id} ({existing.label})"
                )

    def get_entry(self, entry_id: int) -> ScheduleEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise ScheduleEntryNotFound(f"Roster entry {entry_id} not found")
        return entry

    def _entries_for_month(self, year: int, month: int, agent_id: Optional[str] = None) -> list[ScheduleEntry]:
        lower, upper = candidate_fetch_bounds(year, month, self._max_entry_duration)
        candidates = self._entries.list_starting_between(start=lower, end=upper, agent_id=agent_id)
        return find_overlapping(candidates, year, month)

    def get_monthly_roster_overlaps(self, year: int, month: int, *, agent_id: Optional[str] = None) -> list[RosterActivity]:
        year, month = _require_month(year, month)
        month_start, month_end = month_bounds(year, month)

        out = [
            RosterActivity(entry=e, display=compute_display_range(e, month_start, month_end))
            for e in self._entries_for_month(year, month, agent_id)
        ]
        out.sort(key=lambda a: (a.entry.agent_id, a.entry.start, a.entry.entry_id))
        return out

    def get_agent_calendar(self, year: int, month: int, agent_id: str) -> dict[int, Severity]:
        year, month = _require_month(year, month)
        entries = self._entries_for_month(year, month, agent_id)
        return agent_day_severities(entries, agent_id, year, month, long_day_hours=self._long_day_hours)

    def get_daily_severity_bars(self, year: int, month: int, agents: Sequence[str]) -> dict[int, DayCounts]:
        year, month = _require_month(year, month)
        entries = self._entries_for_month(year, month)
        return aggregate_month(entries, list(agents), year, month, long_day_hours=self._long_day_hours)

    def entries_on_day(self, agent_id: str, day: date) -> list[RosterActivity]:
        """One agent's activities touching ``day``, earliest start first."""
        return [
            a
            for a in self.get_monthly_roster_overlaps(day.year, day.month, agent_id=agent_id)
            if a.display.covers(day.day)
        ]
