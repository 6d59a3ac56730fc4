from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Tuple

from ..common.validators import require_id_set, require_non_empty
from ..core.constants import DEFAULT_MONTHS_BACK, DEFAULT_MONTHS_FORWARD, DEFAULT_UPCOMING_COUNT
from ..core.enums import RecurrencePattern, Role
from ..core.exceptions import AuthorizationError, InvalidDateRange, ObligationNotFound, ValidationError
from .model import GroupAssignment, ObligationDraft, RecurringObligation, ScheduledObligation
from .periods import Period, PeriodWindow, generate_periods
from .recurrence import compute_next_occurrence, upcoming_occurrences
from .repository import ObligationRepository

logger = logging.getLogger(__name__)


def normalize_group_assignments(assignments: Iterable[GroupAssignment]) -> Tuple[GroupAssignment, ...]:
    """Validate agent/entity mappings once, at the mutation boundary.

    One mapping per agent; agent ids and entity ids must be non-empty.
    """
    seen: set[str] = set()
    out: list[GroupAssignment] = []
    for ga in assignments or ():
        agent_id = require_non_empty(str(ga.agent_id or ""), "Agent")
        if agent_id in seen:
            raise ValidationError(f"Agent {agent_id} is mapped more than once")
        seen.add(agent_id)

        entity_ids = require_id_set(ga.entity_ids, "Group entities")
        if not entity_ids:
            raise ValidationError(f"Agent {agent_id} has no entities assigned")
        out.append(GroupAssignment(agent_id=agent_id, entity_ids=entity_ids))

    out.sort(key=lambda g: g.agent_id)
    return tuple(out)


class ObligationService:
    """Use cases around recurring obligations: create, edit assignments, pause, schedule reads."""

    def __init__(
        self,
        obligations: ObligationRepository,
        *,
        months_back: int = DEFAULT_MONTHS_BACK,
        months_forward: int = DEFAULT_MONTHS_FORWARD,
    ):
        self._obligations = obligations
        self._months_back = int(months_back)
        self._months_forward = int(months_forward)

    @staticmethod
    def _require_privileged(current_role: Role) -> None:
        if not current_role.is_privileged:
            raise AuthorizationError("Only admins and managers can manage recurring obligations")

    def get(self, obligation_id: int) -> RecurringObligation:
        obligation = self._obligations.get_by_id(int(obligation_id))
        if not obligation:
            raise ObligationNotFound(f"Obligation {obligation_id} not found")
        return obligation

    def default_window(self, anchor_date: date) -> PeriodWindow:
        return PeriodWindow.build(
            anchor_date=anchor_date,
            months_back=self._months_back,
            months_forward=self._months_forward,
        )

    def create_obligation(
        self,
        *,
        current_role: Role,
        draft: ObligationDraft,
        today: Optional[date] = None,
    ) -> ScheduledObligation:
        self._require_privileged(current_role)

        title = require_non_empty(draft.title, "Title")
        pattern = RecurrencePattern.parse(draft.pattern)
        if not isinstance(draft.start_date, date):
            raise ValidationError("Start date is required")
        if draft.end_date is not None:
            if not isinstance(draft.end_date, date):
                raise ValidationError("End date must be a date")
            if draft.end_date < draft.start_date:
                raise InvalidDateRange("End date must not be before start date")
        direct = require_id_set(draft.direct_entity_ids, "Entities")
        groups = normalize_group_assignments(draft.group_assignments)
        description = (draft.description or "").strip() or None

        obligation_id = self._obligations.create(
            title=title,
            pattern=pattern,
            start_date=draft.start_date,
            end_date=draft.end_date,
            direct_entity_ids=direct,
            group_assignments=groups,
            description=description,
            requires_arn=bool(draft.requires_arn),
        )
        logger.info("Created obligation %s (%s, starts %s)", obligation_id, pattern.value, draft.start_date)

        obligation = self.get(obligation_id)
        return self._schedule(obligation, today or date.today())

    def update_assignments(
        self,
        *,
        current_role: Role,
        obligation_id: int,
        direct_entity_ids: Iterable[str],
        group_assignments: Iterable[GroupAssignment],
    ) -> RecurringObligation:
        self._require_privileged(current_role)

        direct = require_id_set(direct_entity_ids, "Entities")
        groups = normalize_group_assignments(group_assignments)
        if not self._obligations.replace_assignments(
            obligation_id=int(obligation_id),
            direct_entity_ids=direct,
            group_assignments=groups,
        ):
            raise ObligationNotFound(f"Obligation {obligation_id} not found")

        logger.info("Updated assignments of obligation %s (%d direct, %d groups)", obligation_id, len(direct), len(groups))
        return self.get(obligation_id)

    def pause(self, *, current_role: Role, obligation_id: int) -> RecurringObligation:
        return self._set_paused(current_role, obligation_id, True)

    def resume(self, *, current_role: Role, obligation_id: int) -> RecurringObligation:
        return self._set_paused(current_role, obligation_id, False)

    def _set_paused(self, current_role: Role, obligation_id: int, is_paused: bool) -> RecurringObligation:
        self._require_privileged(current_role)
        if not self._obligations.set_paused(obligation_id=int(obligation_id), is_paused=is_paused):
            raise ObligationNotFound(f"Obligation {obligation_id} not found")

        logger.info("Obligation %s %s", obligation_id, "paused" if is_paused else "resumed")
        return self.get(obligation_id)

    def get_next_occurrence(self, obligation_id: int, reference_date: date) -> Optional[date]:
        obligation = self.get(obligation_id)
        return compute_next_occurrence(obligation.start_date, obligation.pattern, reference_date, obligation.end_date)

    def get_scheduled(self, obligation_id: int, reference_date: date) -> ScheduledObligation:
        return self._schedule(self.get(obligation_id), reference_date)

    def get_applicable_periods(self, obligation_id: int, window: PeriodWindow) -> Tuple[Period, ...]:
        obligation = self.get(obligation_id)
        return generate_periods(
            obligation.pattern,
            obligation.start_date,
            window.anchor_date,
            window.months_back,
            window.months_forward,
            obligation.end_date,
        )

    def list_obligations(self, *, reference_date: date, include_paused: bool = True) -> list[ScheduledObligation]:
        items = [
            self._schedule(o, reference_date)
            for o in self._obligations.list_all()
            if include_paused or not o.is_paused
        ]
        # Finished series go last.
        items.sort(
            key=lambda s: (
                s.is_finished,
                s.next_occurrence or date.max,
                s.obligation.title.lower(),
                s.obligation.obligation_id,
            )
        )
        return items

    @staticmethod
    def _schedule(obligation: RecurringObligation, reference_date: date) -> ScheduledObligation:
        upcoming = upcoming_occurrences(
            obligation.start_date,
            obligation.pattern,
            reference_date,
            DEFAULT_UPCOMING_COUNT,
            obligation.end_date,
        )
        return ScheduledObligation(
            obligation=obligation,
            next_occurrence=upcoming[0] if upcoming else None,
            upcoming=tuple(upcoming),
        )
