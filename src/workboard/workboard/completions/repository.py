from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import CompletionCell


class CompletionRepository(Protocol):
    def get(self, *, obligation_id: int, entity_id: str, period_key: str) -> Optional[CompletionCell]:
        raise NotImplementedError

    def upsert_many(self, cells: Sequence[CompletionCell]) -> None:
        """Create or overwrite every cell on its composite key (last write wins).

        All cells are written in one transaction: either all of them land or none does.
        """

        raise NotImplementedError

    def list_for_obligation(self, *, obligation_id: int) -> Sequence[CompletionCell]:
        raise NotImplementedError
