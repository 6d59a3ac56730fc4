from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional, Tuple

from ..obligations.periods import Period


@dataclass(frozen=True)
class CompletionCell:
    """Completion state of one (obligation, entity, period) cell."""

    obligation_id: int
    entity_id: str
    period_key: str
    is_completed: bool = False
    completed_by: Optional[str] = None
    completed_at: Optional[datetime] = None
    arn_number: Optional[str] = None
    arn_name: Optional[str] = None


@dataclass(frozen=True)
class CompletionUpdate:
    """One requested write in a bulk update."""

    entity_id: str
    period_key: str
    is_completed: bool
    arn_number: Optional[str] = None
    arn_name: Optional[str] = None


@dataclass(frozen=True)
class CompletionStats:
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True)
class CompletionMatrixView:
    """Read-model for the completion grid: entities as rows, periods as columns."""

    obligation_id: int
    entities: Tuple[str, ...]
    periods: Tuple[Period, ...]
    cells: Mapping[Tuple[str, str], bool]
    stats: CompletionStats

    def is_completed(self, entity_id: str, period_key: str) -> bool:
        return bool(self.cells.get((entity_id, period_key), False))
