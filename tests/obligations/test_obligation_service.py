from datetime import date

import pytest

from src.workboard.workboard.core.enums import RecurrencePattern, Role
from src.workboard.workboard.core.exceptions import (
    AuthorizationError,
    InvalidDateRange,
    InvalidPattern,
    ObligationNotFound,
    ValidationError,
)
from src.workboard.workboard.obligations.model import GroupAssignment, ObligationDraft
from src.workboard.workboard.obligations.service import ObligationService, normalize_group_assignments


def make_draft(**overrides):
    data = dict(
        title="VAT return",
        pattern="quarterly",
        start_date=date(2026, 1, 15),
        direct_entity_ids=("E1", "E2"),
        group_assignments=(),
    )
    data.update(overrides)
    return ObligationDraft(**data)


@pytest.fixture
def service(obligations_repo):
    return ObligationService(obligations_repo, months_back=2, months_forward=4)


def test_create_obligation_returns_next_occurrence(service):
    scheduled = service.create_obligation(current_role=Role.ADMIN, draft=make_draft(), today=date(2026, 2, 1))

    assert scheduled.obligation.pattern is RecurrencePattern.QUARTERLY
    assert scheduled.obligation.direct_entity_ids == frozenset({"E1", "E2"})
    assert scheduled.next_occurrence == date(2026, 4, 15)
    assert scheduled.upcoming[:2] == (date(2026, 4, 15), date(2026, 7, 15))


def test_create_obligation_starting_today_is_due_today(service):
    today = date(2026, 3, 1)
    scheduled = service.create_obligation(
        current_role=Role.MANAGER, draft=make_draft(start_date=today), today=today
    )
    assert scheduled.next_occurrence == today


def test_staff_cannot_create_obligation(service, obligations_repo):
    with pytest.raises(AuthorizationError):
        service.create_obligation(current_role=Role.STAFF, draft=make_draft())
    assert obligations_repo.list_all() == []


def test_create_rejects_unknown_pattern(service):
    with pytest.raises(InvalidPattern):
        service.create_obligation(current_role=Role.ADMIN, draft=make_draft(pattern="weekly"))


def test_create_rejects_blank_title(service):
    with pytest.raises(ValidationError):
        service.create_obligation(current_role=Role.ADMIN, draft=make_draft(title="   "))


def test_create_rejects_missing_start_date(service):
    with pytest.raises(ValidationError):
        service.create_obligation(current_role=Role.ADMIN, draft=make_draft(start_date=None))


def test_normalize_group_assignments_sorts_and_dedupes_entities():
    groups = normalize_group_assignments(
        [
            GroupAssignment(agent_id="u2", entity_ids=["E3", "E3", " E4 "]),
            GroupAssignment(agent_id="u1", entity_ids=["E1"]),
        ]
    )
    assert [g.agent_id for g in groups] == ["u1", "u2"]
    assert groups[1].entity_ids == frozenset({"E3", "E4"})


@pytest.mark.parametrize(
    "assignments",
    [
        [GroupAssignment(agent_id="u1", entity_ids=["E1"]), GroupAssignment(agent_id="u1", entity_ids=["E2"])],
        [GroupAssignment(agent_id="u1", entity_ids=[])],
        [GroupAssignment(agent_id="", entity_ids=["E1"])],
        [GroupAssignment(agent_id="u1", entity_ids="E1")],
    ],
)
def test_normalize_group_assignments_rejects_bad_mappings(assignments):
    with pytest.raises(ValidationError):
        normalize_group_assignments(assignments)


def test_update_assignments_replaces_sets(service):
    created = service.create_obligation(current_role=Role.ADMIN, draft=make_draft(), today=date(2026, 1, 1))
    oid = created.obligation.obligation_id

    updated = service.update_assignments(
        current_role=Role.ADMIN,
        obligation_id=oid,
        direct_entity_ids=["E9"],
        group_assignments=[GroupAssignment(agent_id="u1", entity_ids=["E1", "E2"])],
    )
    assert updated.direct_entity_ids == frozenset({"E9"})
    assert updated.group_assignments == (GroupAssignment(agent_id="u1", entity_ids=frozenset({"E1", "E2"})),)


def test_update_assignments_unknown_obligation(service):
    with pytest.raises(ObligationNotFound):
        service.update_assignments(current_role=Role.ADMIN, obligation_id=404, direct_entity_ids=[], group_assignments=[])


def test_pause_and_resume(service):
    oid = service.create_obligation(current_role=Role.ADMIN, draft=make_draft()).obligation.obligation_id

    assert service.pause(current_role=Role.ADMIN, obligation_id=oid).is_paused is True
    assert service.resume(current_role=Role.MANAGER, obligation_id=oid).is_paused is False

    with pytest.raises(AuthorizationError):
        service.pause(current_role=Role.STAFF, obligation_id=oid)


def test_get_next_occurrence_uses_given_reference(service):
    oid = service.create_obligation(
        current_role=Role.ADMIN, draft=make_draft(pattern="monthly", start_date=date(2026, 1, 31))
    ).obligation.obligation_id

    assert service.get_next_occurrence(oid, date(2026, 2, 1)) == date(2026, 2, 28)
    assert service.get_next_occurrence(oid, date(2026, 3, 1)) == date(2026, 3, 31)


def test_get_raises_for_unknown_obligation(service):
    with pytest.raises(ObligationNotFound):
        service.get(99)


def test_applicable_periods_use_default_window(service):
    oid = service.create_obligation(current_role=Role.ADMIN, draft=make_draft()).obligation.obligation_id

    window = service.default_window(date(2026, 4, 10))
    periods = service.get_applicable_periods(oid, window)

    assert [p.period_key for p in periods] == ["2026-04", "2026-07"]
    assert periods[0].is_current


def test_list_obligations_orders_by_due_date_and_filters_paused(service):
    a = service.create_obligation(
        current_role=Role.ADMIN, draft=make_draft(title="Yearly audit", pattern="yearly", start_date=date(2025, 12, 1))
    ).obligation.obligation_id
    b = service.create_obligation(
        current_role=Role.ADMIN, draft=make_draft(title="Payroll", pattern="monthly", start_date=date(2025, 1, 5))
    ).obligation.obligation_id
    service.pause(current_role=Role.ADMIN, obligation_id=a)

    ref = date(2026, 2, 1)
    everything = service.list_obligations(reference_date=ref)
    assert [s.obligation.obligation_id for s in everything] == [b, a]
    assert everything[0].next_occurrence == date(2026, 2, 5)

    active = service.list_obligations(reference_date=ref, include_paused=False)
    assert [s.obligation.obligation_id for s in active] == [b]


def test_create_rejects_end_date_before_start(service):
    with pytest.raises(InvalidDateRange):
        service.create_obligation(
            current_role=Role.ADMIN, draft=make_draft(start_date=date(2026, 3, 1), end_date=date(2026, 2, 28))
        )


def test_obligation_past_end_date_is_finished(service):
    ended = service.create_obligation(
        current_role=Role.ADMIN,
        draft=make_draft(title="Old filing", start_date=date(2025, 1, 10), end_date=date(2025, 12, 31)),
        today=date(2026, 2, 1),
    )
    assert ended.next_occurrence is None
    assert ended.is_finished
    assert ended.upcoming == ()

    running = service.create_obligation(current_role=Role.ADMIN, draft=make_draft(title="Zeta"), today=date(2026, 2, 1))
    listed = service.list_obligations(reference_date=date(2026, 2, 1))
    assert [s.obligation.obligation_id for s in listed] == [
        running.obligation.obligation_id,
        ended.obligation.obligation_id,
    ]
    assert service.get_next_occurrence(ended.obligation.obligation_id, date(2026, 2, 1)) is None


def test_applicable_periods_stop_at_end_date(service):
    oid = service.create_obligation(
        current_role=Role.ADMIN, draft=make_draft(end_date=date(2026, 5, 31))
    ).obligation.obligation_id

    periods = service.get_applicable_periods(oid, service.default_window(date(2026, 4, 10)))
    assert [p.period_key for p in periods] == ["2026-04"]
