from __future__ import annotations

from datetime import date
from typing import FrozenSet, Optional, Protocol, Sequence, Tuple

from ..core.enums import RecurrencePattern
from .model import GroupAssignment, RecurringObligation


class ObligationRepository(Protocol):
    """Storage interface for recurring obligations.

    Services depend on this protocol only; the MySQL implementation is wired in the container.
    """

    def get_by_id(self, obligation_id: int) -> Optional[RecurringObligation]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        pattern: RecurrencePattern,
        start_date: date,
        end_date: Optional[date],
        direct_entity_ids: FrozenSet[str],
        group_assignments: Tuple[GroupAssignment, ...],
        description: Optional[str] = None,
        requires_arn: bool = False,
    ) -> int:
        raise NotImplementedError

    def replace_assignments(
        self,
        *,
        obligation_id: int,
        direct_entity_ids: FrozenSet[str],
        group_assignments: Tuple[GroupAssignment, ...],
    ) -> bool:
        raise NotImplementedError

    def set_paused(self, *, obligation_id: int, is_paused: bool) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[RecurringObligation]:
        raise NotImplementedError
