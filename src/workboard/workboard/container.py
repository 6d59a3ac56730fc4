from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .completions.mysql_completion_repository import MySQLCompletionRepository
from .completions.repository import CompletionRepository
from .completions.service import CompletionService
from .core.constants import DEFAULT_LONG_DAY_HOURS, DEFAULT_MAX_ENTRY_DAYS, DEFAULT_MONTHS_BACK, DEFAULT_MONTHS_FORWARD
from .database.connection import DBConfig, DatabaseConnection
from .obligations.mysql_obligation_repository import MySQLObligationRepository
from .obligations.repository import ObligationRepository
from .obligations.service import ObligationService
from .roster.mysql_roster_repository import MySQLScheduleEntryRepository
from .roster.repository import ScheduleEntryRepository
from .roster.service import RosterService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    obligations_repo: ObligationRepository
    completions_repo: CompletionRepository
    roster_repo: ScheduleEntryRepository

    obligation_service: ObligationService
    completion_service: CompletionService
    roster_service: RosterService


def build_services(
    *,
    conn: Optional[DatabaseConnection],
    obligations_repo: ObligationRepository,
    completions_repo: CompletionRepository,
    roster_repo: ScheduleEntryRepository,
    months_back: int = DEFAULT_MONTHS_BACK,
    months_forward: int = DEFAULT_MONTHS_FORWARD,
    long_day_hours: float = DEFAULT_LONG_DAY_HOURS,
    max_entry_days: int = DEFAULT_MAX_ENTRY_DAYS,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, in-memory in tests)."""
    obligation_service = ObligationService(obligations_repo, months_back=months_back, months_forward=months_forward)
    completion_service = CompletionService(obligation_service, completions_repo)
    roster_service = RosterService(roster_repo, long_day_hours=long_day_hours, max_entry_days=max_entry_days)

    return Container(
        conn=conn,
        obligations_repo=obligations_repo,
        completions_repo=completions_repo,
        roster_repo=roster_repo,
        obligation_service=obligation_service,
        completion_service=completion_service,
        roster_service=roster_service,
    )


def build_container(*, db_config: dict, **settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        conn=conn,
        obligations_repo=MySQLObligationRepository(conn),
        completions_repo=MySQLCompletionRepository(conn),
        roster_repo=MySQLScheduleEntryRepository(conn),
        **settings,
    )
