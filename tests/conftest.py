from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from src.workboard.workboard.completions.model import CompletionCell
from src.workboard.workboard.core.enums import Role
from src.workboard.workboard.core.viewer import Viewer
from src.workboard.workboard.obligations.model import RecurringObligation
from src.workboard.workboard.roster.model import ScheduleEntry


class InMemoryObligations:
    def __init__(self):
        self._by_id: dict[int, RecurringObligation] = {}
        self._id = 0

    def get_by_id(self, obligation_id: int) -> Optional[RecurringObligation]:
        return self._by_id.get(int(obligation_id))

    def create(self, *, title, pattern, start_date, end_date, direct_entity_ids, group_assignments, description=None, requires_arn=False) -> int:
        self._id += 1
        self._by_id[self._id] = RecurringObligation(
            obligation_id=self._id,
            title=title,
            pattern=pattern,
            start_date=start_date,
            end_date=end_date,
            direct_entity_ids=frozenset(direct_entity_ids),
            group_assignments=tuple(group_assignments),
            description=description,
            requires_arn=requires_arn,
        )
        return self._id

    def replace_assignments(self, *, obligation_id, direct_entity_ids, group_assignments) -> bool:
        o = self._by_id.get(int(obligation_id))
        if not o:
            return False
        self._by_id[o.obligation_id] = replace(
            o,
            direct_entity_ids=frozenset(direct_entity_ids),
            group_assignments=tuple(group_assignments),
        )
        return True

    def set_paused(self, *, obligation_id, is_paused) -> bool:
        o = self._by_id.get(int(obligation_id))
        if not o:
            return False
        self._by_id[o.obligation_id] = replace(o, is_paused=is_paused)
        return True

    def list_all(self):
        return [self._by_id[k] for k in sorted(self._by_id)]


class InMemoryCompletions:
    def __init__(self):
        self.cells: dict[tuple[int, str, str], CompletionCell] = {}
        self.writes = 0
        self.batches = 0
        self.fail_on: Optional[tuple[str, str]] = None

    def get(self, *, obligation_id, entity_id, period_key) -> Optional[CompletionCell]:
        return self.cells.get((int(obligation_id), entity_id, period_key))

    def upsert_many(self, cells) -> None:
        staged = dict(self.cells)
        for c in cells:
            if self.fail_on == (c.entity_id, c.period_key):
                raise RuntimeError("connection lost")
            staged[(c.obligation_id, c.entity_id, c.period_key)] = c
        self.cells = staged
        self.writes += len(cells)
        self.batches += 1

    def list_for_obligation(self, *, obligation_id):
        return [c for (oid, _, _), c in sorted(self.cells.items()) if oid == int(obligation_id)]


class InMemoryScheduleEntries:
    def __init__(self):
        self.entries: list[ScheduleEntry] = []
        self.last_fetch = None

    def create(self, *, agent_id, label, start, end, kind, entity_id=None, notes=None) -> int:
        entry_id = len(self.entries) + 1
        self.entries.append(
            ScheduleEntry(
                entry_id=entry_id,
                agent_id=agent_id,
                label=label,
                start=start,
                end=end,
                kind=kind,
                entity_id=entity_id,
                notes=notes,
            )
        )
        return entry_id

    def get_by_id(self, entry_id):
        return next((e for e in self.entries if e.entry_id == int(entry_id)), None)

    def list_starting_between(self, *, start, end, agent_id=None):
        self.last_fetch = {"start": start, "end": end, "agent_id": agent_id}
        return [
            e
            for e in self.entries
            if start <= e.start <= end and (agent_id is None or e.agent_id == agent_id)
        ]


@pytest.fixture
def obligations_repo():
    return InMemoryObligations()


@pytest.fixture
def completions_repo():
    return InMemoryCompletions()


@pytest.fixture
def roster_repo():
    return InMemoryScheduleEntries()


@pytest.fixture
def admin():
    return Viewer(viewer_id="admin1", role=Role.ADMIN)


@pytest.fixture
def fixed_now():
    return datetime(2026, 2, 6, 10, 0, 0)
