"""Daily workload tiers per agent and their month-wide aggregation."""

from __future__ import annotations

from typing import Iterable, Sequence

from ..common.datetime_utils import days_in_month, month_bounds
from ..core.constants import DEFAULT_LONG_DAY_HOURS
from ..core.enums import Severity
from .model import DayCounts, ScheduleEntry
from .overlap import compute_display_range, find_overlapping


def classify(entry: ScheduleEntry, *, long_day_hours: float = DEFAULT_LONG_DAY_HOURS) -> Severity:
    return Severity.LONG if entry.duration_hours >= long_day_hours else Severity.SHORT


def agent_day_severities(
    entries: Iterable[ScheduleEntry],
    agent_id: str,
    year: int,
    month: int,
    *,
    long_day_hours: float = DEFAULT_LONG_DAY_HOURS,
) -> dict[int, Severity]:
    """Severity of every day of the month for one agent.

    A day takes the highest tier among the entries covering it, so one long
    entry outweighs any number of short ones.
    """
    month_start, month_end = month_bounds(year, month)
    out = {day: Severity.NONE for day in range(1, days_in_month(year, month) + 1)}

    for entry in find_overlapping((e for e in entries if e.agent_id == agent_id), year, month):
        tier = classify(entry, long_day_hours=long_day_hours)
        rng = compute_display_range(entry, month_start, month_end)
        for day in range(rng.display_start_day, rng.display_end_day + 1):
            if tier.rank > out[day].rank:
                out[day] = tier
    return out


def aggregate_month(
    entries: Iterable[ScheduleEntry],
    agents: Sequence[str],
    year: int,
    month: int,
    *,
    long_day_hours: float = DEFAULT_LONG_DAY_HOURS,
) -> dict[int, DayCounts]:
    """Per day, how many agents have a long day, a short day, or nothing planned."""
    entries = find_overlapping(entries, year, month)
    agent_ids = list(dict.fromkeys(agents))

    long_counts = {day: 0 for day in range(1, days_in_month(year, month) + 1)}
    short_counts = dict(long_counts)

    for agent_id in agent_ids:
        days = agent_day_severities(entries, agent_id, year, month, long_day_hours=long_day_hours)
        for day, tier in days.items():
            if tier is Severity.LONG:
                long_counts[day] += 1
            elif tier is Severity.SHORT:
                short_counts[day] += 1

    total = len(agent_ids)
    return {
        day: DayCounts(
            long_count=long_counts[day],
            short_count=short_counts[day],
            none_count=total - long_counts[day] - short_counts[day],
        )
        for day in long_counts
    }
