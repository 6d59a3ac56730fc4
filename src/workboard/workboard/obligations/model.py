from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional, Tuple

from ..core.enums import RecurrencePattern


@dataclass(frozen=True)
class GroupAssignment:
    """Entities an agent is responsible for within one obligation."""

    agent_id: str
    entity_ids: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class RecurringObligation:
    """Domain entity: a recurring duty tracked per entity and per period.

    ``next_occurrence`` is deliberately absent; it is always derived from
    ``start_date``, ``pattern`` and a reference date.
    No occurrence falls after ``end_date`` when one is set.
    """

    obligation_id: int
    title: str
    pattern: RecurrencePattern
    start_date: date
    direct_entity_ids: FrozenSet[str] = frozenset()
    group_assignments: Tuple[GroupAssignment, ...] = ()
    description: Optional[str] = None
    requires_arn: bool = False
    is_paused: bool = False
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ObligationDraft:
    """Raw input for creating an obligation, validated by ObligationService."""

    title: str
    pattern: str
    start_date: date
    direct_entity_ids: Tuple[str, ...] = ()
    group_assignments: Tuple[GroupAssignment, ...] = ()
    description: Optional[str] = None
    requires_arn: bool = False
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ScheduledObligation:
    """Read-model: an obligation together with its derived next due date.

    ``next_occurrence`` is None once the series has ended.
    """

    obligation: RecurringObligation
    next_occurrence: Optional[date]
    upcoming: Tuple[date, ...] = field(default_factory=tuple)

    @property
    def is_finished(self) -> bool:
        return self.next_occurrence is None
