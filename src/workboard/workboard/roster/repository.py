from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EntryKind
from .model import ScheduleEntry


class ScheduleEntryRepository(Protocol):
    def create(
        self,
        *,
        agent_id: str,
        label: str,
        start: datetime,
        end: datetime,
        kind: EntryKind,
        entity_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, entry_id: int) -> Optional[ScheduleEntry]:
        raise NotImplementedError

    def list_starting_between(
        self,
        *,
        start: datetime,
        end: datetime,
        agent_id: Optional[str] = None,
    ) -> Sequence[ScheduleEntry]:
        """Entries whose start lies in ``[start, end]`` (index-friendly candidate fetch)."""

        raise NotImplementedError
