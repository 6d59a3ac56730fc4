from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import now_local, parse_period_key, period_key
from ..core.constants import ARN_LENGTH
from ..core.exceptions import EntityNotInScope, ValidationError
from ..core.viewer import Viewer
from ..obligations.model import RecurringObligation
from ..obligations.periods import PeriodWindow, is_applicable_period
from ..obligations.service import ObligationService
from .matrix import completion_stats, filter_entity_set_for_viewer, resolve_entity_set
from .model import CompletionCell, CompletionMatrixView, CompletionUpdate
from .repository import CompletionRepository

logger = logging.getLogger(__name__)

_ARN_RE = re.compile(rf"^\d{{{ARN_LENGTH}}}$")


class CompletionService:
    """Per-entity, per-period completion tracking for recurring obligations."""

    def __init__(self, obligations: ObligationService, completions: CompletionRepository):
        self._obligations = obligations
        self._completions = completions

    def _scope(self, obligation: RecurringObligation, viewer: Optional[Viewer]):
        if viewer is None:
            return resolve_entity_set(obligation)
        return filter_entity_set_for_viewer(obligation, viewer.viewer_id, viewer.role)

    def _check_cell(self, obligation: RecurringObligation, entity_id: str, key: str, viewer: Optional[Viewer]) -> str:
        year, month = parse_period_key(key)
        key = period_key(year, month)

        if entity_id not in resolve_entity_set(obligation):
            raise EntityNotInScope(f"Entity {entity_id} is not tracked by obligation {obligation.obligation_id}")
        if entity_id not in self._scope(obligation, viewer):
            raise EntityNotInScope(f"Entity {entity_id} is not assigned to you on this obligation")
        if not is_applicable_period(obligation.pattern, obligation.start_date, key, obligation.end_date):
            raise ValidationError(f"{key} is not a {obligation.pattern.value} period for this obligation")
        return key

    @staticmethod
    def _check_arn(obligation: RecurringObligation, update: CompletionUpdate) -> tuple[Optional[str], Optional[str]]:
        if not (obligation.requires_arn and update.is_completed):
            return None, None

        arn_number = (update.arn_number or "").strip()
        arn_name = (update.arn_name or "").strip()
        if not _ARN_RE.match(arn_number):
            raise ValidationError(f"ARN must be exactly {ARN_LENGTH} digits")
        if not arn_name:
            raise ValidationError("ARN name is required")
        return arn_number, arn_name

    def get_cell(
        self,
        obligation_id: int,
        entity_id: str,
        key: str,
        *,
        viewer: Optional[Viewer] = None,
    ) -> bool:
        obligation = self._obligations.get(obligation_id)
        key = self._check_cell(obligation, entity_id, key, viewer)
        cell = self._completions.get(obligation_id=obligation.obligation_id, entity_id=entity_id, period_key=key)
        return bool(cell and cell.is_completed)

    def toggle_completion(
        self,
        obligation_id: int,
        entity_id: str,
        key: str,
        value: bool,
        *,
        viewer: Optional[Viewer] = None,
        arn_number: Optional[str] = None,
        arn_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CompletionCell:
        """Set one cell to ``value`` (idempotent upsert on the composite key)."""
        return self.bulk_update(
            obligation_id,
            [CompletionUpdate(entity_id=entity_id, period_key=key, is_completed=bool(value), arn_number=arn_number, arn_name=arn_name)],
            viewer=viewer,
            now=now,
        )[0]

    def bulk_update(
        self,
        obligation_id: int,
        updates: Iterable[CompletionUpdate],
        *,
        viewer: Optional[Viewer] = None,
        now: Optional[datetime] = None,
    ) -> list[CompletionCell]:
        """Validate every update first; write only if all of them are acceptable."""
        obligation = self._obligations.get(obligation_id)
        now = now or now_local()

        cells: list[CompletionCell] = []
        for u in updates:
            entity_id = str(u.entity_id or "").strip()
            try:
                key = self._check_cell(obligation, entity_id, u.period_key, viewer)
            except EntityNotInScope:
                logger.warning(
                    "Rejected completion write on obligation %s for entity %s by %s",
                    obligation.obligation_id,
                    entity_id,
                    viewer.viewer_id if viewer else "-",
                )
                raise
            arn_number, arn_name = self._check_arn(obligation, u)
            cells.append(
                CompletionCell(
                    obligation_id=obligation.obligation_id,
                    entity_id=entity_id,
                    period_key=key,
                    is_completed=bool(u.is_completed),
                    completed_by=viewer.viewer_id if (viewer and u.is_completed) else None,
                    completed_at=now if u.is_completed else None,
                    arn_number=arn_number,
                    arn_name=arn_name,
                )
            )

        self._completions.upsert_many(cells)
        logger.info("Wrote %d completion cell(s) on obligation %s", len(cells), obligation.obligation_id)
        return cells

    def get_completion_matrix(
        self,
        obligation_id: int,
        viewer: Viewer,
        window: Optional[PeriodWindow] = None,
    ) -> CompletionMatrixView:
        obligation = self._obligations.get(obligation_id)
        window = window or self._obligations.default_window(now_local().date())
        periods = self._obligations.get_applicable_periods(obligation.obligation_id, window)

        entities = filter_entity_set_for_viewer(obligation, viewer.viewer_id, viewer.role)
        keys = [p.period_key for p in periods]

        completed = {
            (c.entity_id, c.period_key)
            for c in self._completions.list_for_obligation(obligation_id=obligation.obligation_id)
            if c.is_completed
        }
        cells = {(e, k): (e, k) in completed for e in entities for k in keys}

        return CompletionMatrixView(
            obligation_id=obligation.obligation_id,
            entities=tuple(sorted(entities)),
            periods=periods,
            cells=cells,
            stats=completion_stats(entities, keys, completed),
        )
