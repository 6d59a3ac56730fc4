import pytest

from src.workboard.workboard.container import build_services
from src.workboard.workboard.main import create_app


@pytest.fixture
def app(monkeypatch, obligations_repo, completions_repo, roster_repo):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(
        conn=None,
        obligations_repo=obligations_repo,
        completions_repo=completions_repo,
        roster_repo=roster_repo,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


def create_quarterly(client):
    res = client.post(
        "/api/obligations",
        json={
            "title": "Quarterly TDS",
            "pattern": "quarterly",
            "start_date": "2026-01-01",
            "direct_entity_ids": ["E1", "E2"],
            "group_assignments": [{"agent_id": "u1", "entity_ids": ["E3"]}],
        },
    )
    assert res.status_code == 201
    return res.get_json()["obligation"]["obligation_id"]


def test_requires_session(client):
    res = client.get("/api/obligations")
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_create_and_read_obligation(client):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    body = client.get(f"/api/obligations/{oid}?date=2026-02-01").get_json()["obligation"]
    assert body["next_occurrence"] == "2026-04-01"
    assert body["pattern_label"] == "Every 3 months"
    assert body["group_assignments"] == [{"agent_id": "u1", "entity_ids": ["E3"]}]


def test_staff_cannot_create(client):
    login(client, "u1", "staff")
    res = client.post("/api/obligations", json={"title": "x", "pattern": "monthly", "start_date": "2026-01-01"})
    assert res.status_code == 403


def test_bad_pattern_is_400(client):
    login(client, "admin1", "admin")
    res = client.post("/api/obligations", json={"title": "x", "pattern": "weekly", "start_date": "2026-01-01"})
    assert res.status_code == 400


def test_unknown_obligation_is_404(client):
    login(client, "admin1", "admin")
    assert client.get("/api/obligations/77").status_code == 404


def test_periods_current_first(client):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    res = client.get(f"/api/obligations/{oid}/periods?anchor=2026-04-10&months_back=3&months_forward=6&order=current_first")
    keys = [p["period_key"] for p in res.get_json()["periods"]]
    assert keys == ["2026-04", "2026-07", "2026-10", "2026-01"]


def test_toggle_and_matrix(client):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    res = client.put(f"/api/obligations/{oid}/completions/E1/2026-04", json={"is_completed": True})
    assert res.status_code == 200
    assert res.get_json()["cell"]["completed_by"] == "admin1"

    matrix = client.get(f"/api/obligations/{oid}/matrix?anchor=2026-01-01&months_back=0&months_forward=11").get_json()
    assert matrix["entities"] == ["E1", "E2", "E3"]
    assert matrix["cells"]["E1"] == {"2026-01": False, "2026-04": True, "2026-07": False, "2026-10": False}
    assert matrix["stats"]["completed"] == 1


def test_toggle_requires_boolean(client):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    res = client.put(f"/api/obligations/{oid}/completions/E1/2026-04", json={"is_completed": "yes"})
    assert res.status_code == 400


def test_staff_toggle_outside_scope_is_403(client):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    login(client, "u1", "staff")
    assert client.put(f"/api/obligations/{oid}/completions/E1/2026-04", json={"is_completed": True}).status_code == 403
    assert client.put(f"/api/obligations/{oid}/completions/E3/2026-04", json={"is_completed": True}).status_code == 200


def test_bulk_update_rejects_whole_batch(client, completions_repo):
    login(client, "admin1", "admin")
    oid = create_quarterly(client)

    res = client.post(
        f"/api/obligations/{oid}/completions",
        json={
            "updates": [
                {"entity_id": "E1", "period_key": "2026-01", "is_completed": True},
                {"entity_id": "E1", "period_key": "2026-02", "is_completed": True},
            ]
        },
    )
    assert res.status_code == 400
    assert completions_repo.writes == 0


def test_roster_plan_and_monthly(client):
    login(client, "u1", "staff")
    res = client.post(
        "/api/roster/entries",
        json={"label": "Stock audit", "kind": "multi", "start": "2026-01-28T09:00", "end": "2026-02-05T17:00"},
    )
    assert res.status_code == 201
    assert res.get_json()["entry"]["agent_id"] == "u1"

    feb = client.get("/api/roster/monthly?year=2026&month=2").get_json()["activities"]
    assert [(a["start_day"], a["end_day"]) for a in feb] == [(1, 5)]


def test_staff_cannot_plan_for_others(client):
    login(client, "u1", "staff")
    res = client.post(
        "/api/roster/entries",
        json={"agent_id": "u2", "label": "x", "kind": "single", "start": "2026-02-02T09:00", "end": "2026-02-02T10:00"},
    )
    assert res.status_code == 403


def test_roster_inverted_range_is_400(client):
    login(client, "u1", "staff")
    res = client.post(
        "/api/roster/entries",
        json={"label": "x", "kind": "single", "start": "2026-02-02T10:00", "end": "2026-02-02T09:00"},
    )
    assert res.status_code == 400


def test_daily_stats(client):
    login(client, "u1", "staff")
    client.post(
        "/api/roster/entries",
        json={"label": "Close books", "kind": "single", "start": "2026-03-02T09:00", "end": "2026-03-02T17:30"},
    )
    assert client.get("/api/roster/daily-stats?year=2026&month=3&agent=u1").status_code == 403

    login(client, "mgr", "manager")
    body = client.get("/api/roster/daily-stats?year=2026&month=3&agent=u1&agent=u2").get_json()
    assert body["total_agents"] == 2
    assert body["stats"]["2"] == {"long": 1, "short": 0, "none": 1}
    assert body["stats"]["3"] == {"long": 0, "short": 0, "none": 2}


def test_requires_arn_must_be_a_real_boolean(client, obligations_repo):
    login(client, "admin1", "admin")
    res = client.post(
        "/api/obligations",
        json={"title": "x", "pattern": "monthly", "start_date": "2026-01-01", "requires_arn": "false"},
    )
    assert res.status_code == 400
    assert obligations_repo.list_all() == []


def test_obligation_past_its_end_date_is_finished(client):
    login(client, "admin1", "admin")
    res = client.post(
        "/api/obligations",
        json={"title": "Old filing", "pattern": "monthly", "start_date": "2025-01-01", "end_date": "2025-06-30"},
    )
    assert res.status_code == 201
    oid = res.get_json()["obligation"]["obligation_id"]

    body = client.get(f"/api/obligations/{oid}?date=2026-02-01").get_json()["obligation"]
    assert body["end_date"] == "2025-06-30"
    assert body["next_occurrence"] is None
    assert body["is_finished"] is True


def test_roster_rejects_utc_offset(client, roster_repo):
    login(client, "u1", "staff")
    res = client.post(
        "/api/roster/entries",
        json={"label": "x", "kind": "single", "start": "2026-02-06T09:00+00:00", "end": "2026-02-06T10:00+00:00"},
    )
    assert res.status_code == 400
    assert roster_repo.entries == []


def test_roster_overlapping_activity_is_400(client):
    login(client, "u1", "staff")
    first = {"label": "Audit", "kind": "multi", "start": "2026-02-02T09:00", "end": "2026-02-06T17:00"}
    assert client.post("/api/roster/entries", json=first).status_code == 201

    second = dict(first, start="2026-02-04T09:00", end="2026-02-09T17:00")
    assert client.post("/api/roster/entries", json=second).status_code == 400


def test_roster_entry_detail(client):
    login(client, "u1", "staff")
    res = client.post(
        "/api/roster/entries",
        json={"label": "Close books", "kind": "single", "start": "2026-03-02T09:00", "end": "2026-03-02T17:30"},
    )
    entry_id = res.get_json()["entry"]["entry_id"]

    assert client.get(f"/api/roster/entries/{entry_id}").get_json()["entry"]["label"] == "Close books"
    assert client.get("/api/roster/entries/999").status_code == 404

    login(client, "u2", "staff")
    assert client.get(f"/api/roster/entries/{entry_id}").status_code == 403
    login(client, "mgr", "manager")
    assert client.get(f"/api/roster/entries/{entry_id}").status_code == 200


def test_roster_day_drill_down(client):
    login(client, "u1", "staff")
    client.post(
        "/api/roster/entries",
        json={"label": "Stock audit", "kind": "multi", "start": "2026-01-28T09:00", "end": "2026-02-05T17:00"},
    )
    client.post(
        "/api/roster/entries",
        json={"label": "Call", "kind": "single", "start": "2026-02-09T09:00", "end": "2026-02-09T10:00"},
    )

    body = client.get("/api/roster/day?date=2026-02-03").get_json()
    assert body["date"] == "2026-02-03"
    assert [e["label"] for e in body["entries"]] == ["Stock audit"]
    assert client.get("/api/roster/day?date=2026-02-07").get_json()["entries"] == []
    assert client.get("/api/roster/day?date=2026-02-03&agent_id=u2").status_code == 403
