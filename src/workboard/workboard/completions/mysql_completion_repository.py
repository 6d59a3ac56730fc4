from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from .model import CompletionCell
from .repository import CompletionRepository

_COLUMNS = """
    obligation_id, entity_id, period_key, is_completed,
    completed_by, completed_at, arn_number, arn_name
"""


class MySQLCompletionRepository(CompletionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, obligation_id: int, entity_id: str, period_key: str) -> Optional[CompletionCell]:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM completion_cells
                WHERE obligation_id=%s AND entity_id=%s AND period_key=%s
                """,
                (int(obligation_id), entity_id, period_key),
            )
            r = cur.fetchone()
            return self._to_cell(r) if r else None

    def upsert_many(self, cells: Sequence[CompletionCell]) -> None:
        if not cells:
            return

        with self._conn_factory.cursor() as cur:
            cur.executemany(
                """
                INSERT INTO completion_cells(
                    obligation_id, entity_id, period_key, is_completed,
                    completed_by, completed_at, arn_number, arn_name
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    is_completed=VALUES(is_completed),
                    completed_by=VALUES(completed_by),
                    completed_at=VALUES(completed_at),
                    arn_number=VALUES(arn_number),
                    arn_name=VALUES(arn_name)
                """,
                [
                    (
                        int(c.obligation_id),
                        c.entity_id,
                        c.period_key,
                        1 if c.is_completed else 0,
                        c.completed_by,
                        c.completed_at,
                        c.arn_number,
                        c.arn_name,
                    )
                    for c in cells
                ],
            )

    def list_for_obligation(self, *, obligation_id: int) -> Sequence[CompletionCell]:
        with self._conn_factory.cursor() as cur:
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM completion_cells
                WHERE obligation_id=%s
                ORDER BY entity_id ASC, period_key ASC
                """,
                (int(obligation_id),),
            )
            return [self._to_cell(r) for r in cur.fetchall()]

    @staticmethod
    def _to_cell(r: dict) -> CompletionCell:
        return CompletionCell(
            obligation_id=int(r["obligation_id"]),
            entity_id=str(r["entity_id"]),
            period_key=r["period_key"],
            is_completed=bool(r["is_completed"]),
            completed_by=r.get("completed_by"),
            completed_at=r.get("completed_at"),
            arn_number=r.get("arn_number"),
            arn_name=r.get("arn_name"),
        )
