from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import FrozenSet, Optional, Sequence, Tuple

from ..core.enums import RecurrencePattern
from ..database.connection import DatabaseConnection
from .model import GroupAssignment, RecurringObligation
from .repository import ObligationRepository


class MySQLObligationRepository(ObligationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, obligation_id: int) -> Optional[RecurringObligation]:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                """
                SELECT obligation_id, title, pattern, start_date, end_date, description, requires_arn, is_paused
                FROM obligations
                WHERE obligation_id=%s
                """,
                (int(obligation_id),),
            )
            row = cur.fetchone()
            if not row:
                return None

            cur.execute("SELECT entity_id FROM obligation_entities WHERE obligation_id=%s", (int(obligation_id),))
            direct = [r["entity_id"] for r in cur.fetchall()]

            cur.execute(
                "SELECT agent_id, entity_id FROM obligation_group_entities WHERE obligation_id=%s",
                (int(obligation_id),),
            )
            groups = cur.fetchall()

        return self._to_obligation(row, direct, groups)

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
        with self._conn_factory.cursor() as cur:
            cur.execute(
                """
                INSERT INTO obligations(title, pattern, start_date, end_date, description, requires_arn, is_paused)
                VALUES(%s,%s,%s,%s,%s,%s,0)
                """,
                (title, pattern.value, start_date, end_date, description, 1 if requires_arn else 0),
            )
            obligation_id = int(cur.lastrowid)
            self._insert_assignments(cur, obligation_id, direct_entity_ids, group_assignments)
            return obligation_id

    def replace_assignments(
        self,
        *,
        obligation_id: int,
        direct_entity_ids: FrozenSet[str],
        group_assignments: Tuple[GroupAssignment, ...],
    ) -> bool:
        with self._conn_factory.cursor() as cur:
            cur.execute("SELECT obligation_id FROM obligations WHERE obligation_id=%s", (int(obligation_id),))
            if not cur.fetchone():
                return False

            cur.execute("DELETE FROM obligation_entities WHERE obligation_id=%s", (int(obligation_id),))
            cur.execute("DELETE FROM obligation_group_entities WHERE obligation_id=%s", (int(obligation_id),))
            self._insert_assignments(cur, int(obligation_id), direct_entity_ids, group_assignments)
            return True

    def set_paused(self, *, obligation_id: int, is_paused: bool) -> bool:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                "UPDATE obligations SET is_paused=%s WHERE obligation_id=%s",
                (1 if is_paused else 0, int(obligation_id)),
            )
            return cur.rowcount > 0

    def list_all(self) -> Sequence[RecurringObligation]:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                """
                SELECT obligation_id, title, pattern, start_date, end_date, description, requires_arn, is_paused
                FROM obligations
                ORDER BY obligation_id ASC
                """
            )
            rows = cur.fetchall()

            cur.execute("SELECT obligation_id, entity_id FROM obligation_entities")
            direct_by_id: dict[int, list[str]] = defaultdict(list)
            for r in cur.fetchall():
                direct_by_id[int(r["obligation_id"])].append(r["entity_id"])

            cur.execute("SELECT obligation_id, agent_id, entity_id FROM obligation_group_entities")
            groups_by_id: dict[int, list[dict]] = defaultdict(list)
            for r in cur.fetchall():
                groups_by_id[int(r["obligation_id"])].append(r)

        return [
            self._to_obligation(r, direct_by_id[int(r["obligation_id"])], groups_by_id[int(r["obligation_id"])])
            for r in rows
        ]

    @staticmethod
    def _insert_assignments(cur, obligation_id: int, direct_entity_ids, group_assignments) -> None:
        for entity_id in sorted(direct_entity_ids):
            cur.execute(
                "INSERT INTO obligation_entities(obligation_id, entity_id) VALUES(%s,%s)",
                (obligation_id, entity_id),
            )
        for ga in group_assignments:
            for entity_id in sorted(ga.entity_ids):
                cur.execute(
                    "INSERT INTO obligation_group_entities(obligation_id, agent_id, entity_id) VALUES(%s,%s,%s)",
                    (obligation_id, ga.agent_id, entity_id),
                )

    @staticmethod
    def _to_obligation(row: dict, direct: Sequence[str], groups: Sequence[dict]) -> RecurringObligation:
        by_agent: dict[str, set[str]] = defaultdict(set)
        for g in groups:
            by_agent[str(g["agent_id"])].add(str(g["entity_id"]))

        return RecurringObligation(
            obligation_id=int(row["obligation_id"]),
            title=row["title"],
            pattern=RecurrencePattern(row["pattern"]),
            start_date=row["start_date"],
            end_date=row.get("end_date"),
            direct_entity_ids=frozenset(str(e) for e in direct),
            group_assignments=tuple(
                GroupAssignment(agent_id=agent_id, entity_ids=frozenset(ids))
                for agent_id, ids in sorted(by_agent.items())
            ),
            description=row.get("description"),
            requires_arn=bool(row.get("requires_arn", False)),
            is_paused=bool(row.get("is_paused", False)),
        )
