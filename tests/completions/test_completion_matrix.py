from datetime import date

from src.workboard.workboard.completions.matrix import (
    completion_rate,
    completion_stats,
    filter_entity_set_for_viewer,
    resolve_entity_set,
)
from src.workboard.workboard.core.enums import RecurrencePattern, Role
from src.workboard.workboard.obligations.model import GroupAssignment, RecurringObligation


def make_obligation(direct=(), groups=()):
    return RecurringObligation(
        obligation_id=1,
        title="GST filing",
        pattern=RecurrencePattern.MONTHLY,
        start_date=date(2026, 1, 1),
        direct_entity_ids=frozenset(direct),
        group_assignments=tuple(GroupAssignment(agent_id=a, entity_ids=frozenset(e)) for a, e in groups),
    )


def test_resolve_entity_set_unions_direct_and_groups():
    o = make_obligation(direct=["E1", "E2"], groups=[("u1", ["E2", "E3"]), ("u2", ["E4"])])
    assert resolve_entity_set(o) == frozenset({"E1", "E2", "E3", "E4"})


def test_resolve_entity_set_empty():
    assert resolve_entity_set(make_obligation()) == frozenset()


def test_privileged_viewer_sees_everything():
    o = make_obligation(direct=["E1"], groups=[("u1", ["E2"])])
    assert filter_entity_set_for_viewer(o, "boss", Role.ADMIN) == frozenset({"E1", "E2"})
    assert filter_entity_set_for_viewer(o, "lead", Role.MANAGER) == frozenset({"E1", "E2"})


def test_staff_sees_only_own_mapping():
    o = make_obligation(direct=["E1"], groups=[("u1", ["E2", "E3"]), ("u2", ["E4"])])
    assert filter_entity_set_for_viewer(o, "u1", Role.STAFF) == frozenset({"E2", "E3"})


def test_staff_without_mapping_sees_nothing():
    o = make_obligation(direct=["E1"], groups=[("u1", ["E2"])])
    assert filter_entity_set_for_viewer(o, "u9", Role.STAFF) == frozenset()


def test_viewer_scope_is_subset_of_resolved_set():
    o = make_obligation(direct=["E1"], groups=[("u1", ["E2"]), ("u2", ["E2", "E5"])])
    full = resolve_entity_set(o)
    for viewer_id in ("u1", "u2", "u3"):
        assert filter_entity_set_for_viewer(o, viewer_id, Role.STAFF) <= full


def test_completion_rate_counts_only_cells_in_grid():
    entities = {"E1", "E2"}
    keys = ["2026-01", "2026-02"]
    completed = [("E1", "2026-01"), ("E2", "2026-02"), ("E9", "2026-01"), ("E1", "2025-12")]

    assert completion_rate(entities, keys, completed) == 0.5


def test_completion_rate_empty_grid_is_zero():
    assert completion_rate(set(), ["2026-01"], []) == 0.0
    assert completion_rate({"E1"}, [], [("E1", "2026-01")]) == 0.0


def test_completion_stats_percentage():
    stats = completion_stats({"E1", "E2", "E3"}, ["2026-01"], [("E1", "2026-01")])
    assert (stats.completed, stats.total, stats.percentage) == (1, 3, 33)
