"""Pure functions behind the completion grid.

Entity-set resolution, viewer visibility and completion rates. No storage
access; the service feeds these with records it already fetched.
"""

from __future__ import annotations

from typing import AbstractSet, Collection, FrozenSet, Iterable, Tuple

from ..core.enums import Role
from ..obligations.model import RecurringObligation
from .model import CompletionStats


def resolve_entity_set(obligation: RecurringObligation) -> FrozenSet[str]:
    """Direct entities plus every group assignment's entities, deduplicated."""
    out = set(obligation.direct_entity_ids)
    for ga in obligation.group_assignments:
        out.update(ga.entity_ids)
    return frozenset(out)


def filter_entity_set_for_viewer(obligation: RecurringObligation, viewer_id: str, viewer_role: Role) -> FrozenSet[str]:
    """Entities the viewer may see on this obligation.

    Privileged roles see everything. Anyone else sees only the entities of
    their own group assignment(s); no mapping means nothing, even when the
    obligation has direct (ungrouped) entities.
    """
    if viewer_role.is_privileged:
        return resolve_entity_set(obligation)

    out: set[str] = set()
    for ga in obligation.group_assignments:
        if ga.agent_id == viewer_id:
            out.update(ga.entity_ids)
    return frozenset(out)


def count_completed(
    entity_ids: AbstractSet[str],
    period_keys: Collection[str],
    completed_keys: Iterable[Tuple[str, str]],
) -> int:
    keys = set(period_keys)
    return sum(1 for e, p in set(completed_keys) if e in entity_ids and p in keys)


def completion_rate(
    entity_ids: AbstractSet[str],
    period_keys: Collection[str],
    completed_keys: Iterable[Tuple[str, str]],
) -> float:
    """Share of completed cells in the ``entities x periods`` grid; 0.0 for an empty grid."""
    total = len(entity_ids) * len(set(period_keys))
    if total == 0:
        return 0.0
    return count_completed(entity_ids, period_keys, completed_keys) / total


def completion_stats(
    entity_ids: AbstractSet[str],
    period_keys: Collection[str],
    completed_keys: Iterable[Tuple[str, str]],
) -> CompletionStats:
    completed_keys = list(completed_keys)
    total = len(entity_ids) * len(set(period_keys))
    completed = count_completed(entity_ids, period_keys, completed_keys) if total else 0
    rate = completion_rate(entity_ids, period_keys, completed_keys)
    return CompletionStats(completed=completed, total=total, percentage=int(round(rate * 100)))
