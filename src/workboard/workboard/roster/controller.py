from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.web import api_view, arg_date, arg_int, current_viewer
from ..container import Container
from ..core.exceptions import AuthorizationError, ValidationError
from .model import ScheduleEntry


def entry_to_dict(e: ScheduleEntry) -> dict:
    return {
        "entry_id": e.entry_id,
        "agent_id": e.agent_id,
        "entity_id": e.entity_id,
        "label": e.label,
        "kind": e.kind.value,
        "start": e.start.isoformat(),
        "end": e.end.isoformat(),
        "duration_hours": round(e.duration_hours, 2),
        "notes": e.notes,
    }


def _parse_dt(data: dict, name: str):
    try:
        return parse_iso_datetime(str(data.get(name) or ""))
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date-time")


def register(app: Flask, container: Container) -> None:
    service = container.roster_service

    def _month_args() -> tuple[int, int]:
        today = date.today()
        return arg_int("year", today.year), arg_int("month", today.month)

    @app.route("/api/roster/entries", methods=["POST"], endpoint="api_roster_plan")
    @api_view
    def api_roster_plan():
        data = request.get_json(silent=True) or {}
        viewer = current_viewer()

        # Agents plan their own work; admins/managers may plan for anyone.
        agent_id = str(data.get("agent_id") or viewer.viewer_id)
        if agent_id != viewer.viewer_id and not viewer.is_privileged:
            raise AuthorizationError("You can only plan your own roster")

        entry = service.plan_entry(
            agent_id=agent_id,
            label=str(data.get("label") or ""),
            start=_parse_dt(data, "start"),
            end=_parse_dt(data, "end"),
            kind=str(data.get("kind") or ""),
            entity_id=data.get("entity_id"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "entry": entry_to_dict(entry)}), 201

    @app.route("/api/roster/entries/<int:entry_id>", methods=["GET"], endpoint="api_roster_entry")
    @api_view
    def api_roster_entry(entry_id: int):
        viewer = current_viewer()
        entry = service.get_entry(entry_id)
        if entry.agent_id != viewer.viewer_id and not viewer.is_privileged:
            raise AuthorizationError("You can only view your own roster")
        return jsonify({"success": True, "entry": entry_to_dict(entry)})

    @app.route("/api/roster/monthly", methods=["GET"], endpoint="api_roster_monthly")
    @api_view
    def api_roster_monthly():
        year, month = _month_args()
        activities = service.get_monthly_roster_overlaps(year, month, agent_id=request.args.get("agent_id") or None)
        return jsonify(
            {
                "success": True,
                "year": year,
                "month": month,
                "activities": [
                    dict(
                        entry_to_dict(a.entry),
                        start_day=a.display.display_start_day,
                        end_day=a.display.display_end_day,
                    )
                    for a in activities
                ],
            }
        )

    @app.route("/api/roster/calendar", methods=["GET"], endpoint="api_roster_calendar")
    @api_view
    def api_roster_calendar():
        year, month = _month_args()
        viewer = current_viewer()
        agent_id = request.args.get("agent_id") or viewer.viewer_id
        if agent_id != viewer.viewer_id and not viewer.is_privileged:
            raise AuthorizationError("You can only view your own calendar")

        days = service.get_agent_calendar(year, month, agent_id)
        return jsonify({"success": True, "agent_id": agent_id, "days": {str(d): s.value for d, s in days.items()}})

    @app.route("/api/roster/day", methods=["GET"], endpoint="api_roster_day")
    @api_view
    def api_roster_day():
        viewer = current_viewer()
        agent_id = request.args.get("agent_id") or viewer.viewer_id
        if agent_id != viewer.viewer_id and not viewer.is_privileged:
            raise AuthorizationError("You can only view your own calendar")

        day = arg_date("date", date.today())
        activities = service.entries_on_day(agent_id, day)
        return jsonify(
            {
                "success": True,
                "agent_id": agent_id,
                "date": day.isoformat(),
                "entries": [entry_to_dict(a.entry) for a in activities],
            }
        )

    @app.route("/api/roster/daily-stats", methods=["GET"], endpoint="api_roster_daily_stats")
    @api_view
    def api_roster_daily_stats():
        if not current_viewer().is_privileged:
            raise AuthorizationError("Only admins and managers can view roster stats")

        year, month = _month_args()
        agents = [a for a in request.args.getlist("agent") if a]
        if not agents:
            raise ValidationError("At least one agent is required")

        bars = service.get_daily_severity_bars(year, month, agents)
        return jsonify(
            {
                "success": True,
                "total_agents": len(set(agents)),
                "stats": {
                    str(day): {"long": c.long_count, "short": c.short_count, "none": c.none_count}
                    for day, c in bars.items()
                },
            }
        )
