from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EntryKind
from ..database.connection import DatabaseConnection
from .model import ScheduleEntry
from .repository import ScheduleEntryRepository


class MySQLScheduleEntryRepository(ScheduleEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with self._conn_factory.cursor() as cur:
            cur.execute(
                """
                INSERT INTO schedule_entries(agent_id, entity_id, label, kind, start_at, end_at, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (agent_id, entity_id, label, kind.value, start, end, notes),
            )
            return int(cur.lastrowid)

    def get_by_id(self, entry_id: int) -> Optional[ScheduleEntry]:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                """
                SELECT entry_id, agent_id, entity_id, label, kind, start_at, end_at, notes
                FROM schedule_entries
                WHERE entry_id=%s
                """,
                (int(entry_id),),
            )
            r = cur.fetchone()
            return self._to_entry(r) if r else None

    def list_starting_between(
        self,
        *,
        start: datetime,
        end: datetime,
        agent_id: Optional[str] = None,
    ) -> Sequence[ScheduleEntry]:
        clauses = ["start_at BETWEEN %s AND %s"]
        params: list[object] = [start, end]
        if agent_id is not None:
            clauses.append("agent_id=%s")
            params.append(agent_id)

        where = " AND ".join(clauses)

        with self._conn_factory.cursor() as cur:
            cur.execute(
                f"""
                SELECT entry_id, agent_id, entity_id, label, kind, start_at, end_at, notes
                FROM schedule_entries
                WHERE {where}
                ORDER BY start_at ASC, entry_id ASC
                """,
                tuple(params),
            )
            return [self._to_entry(r) for r in cur.fetchall()]

    @staticmethod
    def _to_entry(r: dict) -> ScheduleEntry:
        return ScheduleEntry(
            entry_id=int(r["entry_id"]),
            agent_id=str(r["agent_id"]),
            entity_id=r.get("entity_id"),
            label=r["label"],
            kind=EntryKind(r["kind"]),
            start=r["start_at"],
            end=r["end_at"],
            notes=r.get("notes"),
        )
