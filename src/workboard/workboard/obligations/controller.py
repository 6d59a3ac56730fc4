from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import api_view, arg_date, arg_int, current_viewer, json_bool
from ..container import Container
from ..core.exceptions import ValidationError
from .model import GroupAssignment, ObligationDraft, RecurringObligation, ScheduledObligation
from .periods import PeriodWindow, order_current_first
from .recurrence import describe_pattern


def obligation_to_dict(o: RecurringObligation) -> dict:
    return {
        "obligation_id": o.obligation_id,
        "title": o.title,
        "description": o.description,
        "pattern": o.pattern.value,
        "pattern_label": describe_pattern(o.pattern),
        "start_date": o.start_date.isoformat(),
        "end_date": o.end_date.isoformat() if o.end_date else None,
        "direct_entity_ids": sorted(o.direct_entity_ids),
        "group_assignments": [
            {"agent_id": g.agent_id, "entity_ids": sorted(g.entity_ids)} for g in o.group_assignments
        ],
        "requires_arn": o.requires_arn,
        "is_paused": o.is_paused,
    }


def scheduled_to_dict(s: ScheduledObligation) -> dict:
    out = obligation_to_dict(s.obligation)
    out["next_occurrence"] = s.next_occurrence.isoformat() if s.next_occurrence else None
    out["is_finished"] = s.is_finished
    out["upcoming"] = [d.isoformat() for d in s.upcoming]
    return out


def _parse_date(data: dict, name: str, *, required: bool = True):
    raw = data.get(name)
    if raw in (None, "") and not required:
        return None
    try:
        return parse_iso_date(str(raw or ""))
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def _parse_groups(raw) -> tuple[GroupAssignment, ...]:
    if not isinstance(raw, list):
        raise ValidationError("group_assignments must be a list")
    out = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each group assignment must be an object")
        out.append(GroupAssignment(agent_id=str(item.get("agent_id") or ""), entity_ids=item.get("entity_ids") or ()))
    return tuple(out)


def register(app: Flask, container: Container) -> None:
    service = container.obligation_service

    @app.route("/api/obligations", methods=["GET"], endpoint="api_obligations_list")
    @api_view
    def api_obligations_list():
        today = arg_date("date", date.today())
        include_paused = request.args.get("include_paused", "1") != "0"
        items = service.list_obligations(reference_date=today, include_paused=include_paused)
        return jsonify({"success": True, "obligations": [scheduled_to_dict(s) for s in items]})

    @app.route("/api/obligations", methods=["POST"], endpoint="api_obligations_create")
    @api_view
    def api_obligations_create():
        data = request.get_json(silent=True) or {}
        draft = ObligationDraft(
            title=str(data.get("title") or ""),
            pattern=str(data.get("pattern") or ""),
            start_date=_parse_date(data, "start_date"),
            end_date=_parse_date(data, "end_date", required=False),
            direct_entity_ids=data.get("direct_entity_ids") or (),
            group_assignments=_parse_groups(data.get("group_assignments") or []),
            description=data.get("description"),
            requires_arn=json_bool(data, "requires_arn", default=False),
        )
        created = service.create_obligation(current_role=current_viewer().role, draft=draft)
        return jsonify({"success": True, "obligation": scheduled_to_dict(created)}), 201

    @app.route("/api/obligations/<int:obligation_id>", methods=["GET"], endpoint="api_obligations_get")
    @api_view
    def api_obligations_get(obligation_id: int):
        scheduled = service.get_scheduled(obligation_id, arg_date("date", date.today()))
        return jsonify({"success": True, "obligation": scheduled_to_dict(scheduled)})

    @app.route("/api/obligations/<int:obligation_id>/assignments", methods=["PUT"], endpoint="api_obligations_assign")
    @api_view
    def api_obligations_assign(obligation_id: int):
        data = request.get_json(silent=True) or {}
        updated = service.update_assignments(
            current_role=current_viewer().role,
            obligation_id=obligation_id,
            direct_entity_ids=data.get("direct_entity_ids") or (),
            group_assignments=_parse_groups(data.get("group_assignments") or []),
        )
        return jsonify({"success": True, "obligation": obligation_to_dict(updated)})

    @app.route("/api/obligations/<int:obligation_id>/pause", methods=["PATCH"], endpoint="api_obligations_pause")
    @api_view
    def api_obligations_pause(obligation_id: int):
        updated = service.pause(current_role=current_viewer().role, obligation_id=obligation_id)
        return jsonify({"success": True, "obligation": obligation_to_dict(updated)})

    @app.route("/api/obligations/<int:obligation_id>/resume", methods=["PATCH"], endpoint="api_obligations_resume")
    @api_view
    def api_obligations_resume(obligation_id: int):
        updated = service.resume(current_role=current_viewer().role, obligation_id=obligation_id)
        return jsonify({"success": True, "obligation": obligation_to_dict(updated)})

    @app.route("/api/obligations/<int:obligation_id>/periods", methods=["GET"], endpoint="api_obligations_periods")
    @api_view
    def api_obligations_periods(obligation_id: int):
        default = service.default_window(date.today())
        window = PeriodWindow.build(
            anchor_date=arg_date("anchor", default.anchor_date),
            months_back=arg_int("months_back", default.months_back),
            months_forward=arg_int("months_forward", default.months_forward),
        )
        periods = service.get_applicable_periods(obligation_id, window)
        if request.args.get("order") == "current_first":
            periods = order_current_first(periods)

        return jsonify(
            {
                "success": True,
                "periods": [
                    {
                        "period_key": p.period_key,
                        "is_past": p.is_past,
                        "is_current": p.is_current,
                        "is_future": p.is_future,
                    }
                    for p in periods
                ],
            }
        )
