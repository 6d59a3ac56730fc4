from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.web import api_view, arg_date, arg_int, current_viewer, json_bool
from ..container import Container
from ..core.exceptions import ValidationError
from ..obligations.periods import PeriodWindow, order_current_first
from .model import CompletionCell, CompletionUpdate


def cell_to_dict(c: CompletionCell) -> dict:
    return {
        "entity_id": c.entity_id,
        "period_key": c.period_key,
        "is_completed": c.is_completed,
        "completed_by": c.completed_by,
        "completed_at": c.completed_at.isoformat() if c.completed_at else None,
        "arn_number": c.arn_number,
        "arn_name": c.arn_name,
    }


def register(app: Flask, container: Container) -> None:
    service = container.completion_service

    @app.route("/api/obligations/<int:obligation_id>/matrix", methods=["GET"], endpoint="api_completion_matrix")
    @api_view
    def api_completion_matrix(obligation_id: int):
        default = container.obligation_service.default_window(date.today())
        window = PeriodWindow.build(
            anchor_date=arg_date("anchor", default.anchor_date),
            months_back=arg_int("months_back", default.months_back),
            months_forward=arg_int("months_forward", default.months_forward),
        )
        matrix = service.get_completion_matrix(obligation_id, current_viewer(), window)

        periods = matrix.periods
        if request.args.get("order") == "current_first":
            periods = order_current_first(periods)

        return jsonify(
            {
                "success": True,
                "entities": list(matrix.entities),
                "periods": [
                    {"period_key": p.period_key, "is_past": p.is_past, "is_current": p.is_current, "is_future": p.is_future}
                    for p in periods
                ],
                "cells": {
                    e: {p.period_key: matrix.is_completed(e, p.period_key) for p in periods} for e in matrix.entities
                },
                "stats": {
                    "completed": matrix.stats.completed,
                    "total": matrix.stats.total,
                    "percentage": matrix.stats.percentage,
                },
            }
        )

    @app.route(
        "/api/obligations/<int:obligation_id>/completions/<entity_id>/<period_key>",
        methods=["PUT"],
        endpoint="api_completion_toggle",
    )
    @api_view
    def api_completion_toggle(obligation_id: int, entity_id: str, period_key: str):
        data = request.get_json(silent=True) or {}
        cell = service.toggle_completion(
            obligation_id,
            entity_id,
            period_key,
            json_bool(data, "is_completed"),
            viewer=current_viewer(),
            arn_number=data.get("arn_number"),
            arn_name=data.get("arn_name"),
        )
        return jsonify({"success": True, "cell": cell_to_dict(cell)})

    @app.route("/api/obligations/<int:obligation_id>/completions", methods=["POST"], endpoint="api_completion_bulk")
    @api_view
    def api_completion_bulk(obligation_id: int):
        data = request.get_json(silent=True) or {}
        raw = data.get("updates")
        if not isinstance(raw, list):
            raise ValidationError("updates must be a list")

        updates = []
        for item in raw:
            if not isinstance(item, dict):
                raise ValidationError("Each update must be an object")
            updates.append(
                CompletionUpdate(
                    entity_id=str(item.get("entity_id") or ""),
                    period_key=str(item.get("period_key") or ""),
                    is_completed=json_bool(item, "is_completed"),
                    arn_number=item.get("arn_number"),
                    arn_name=item.get("arn_name"),
                )
            )

        cells = service.bulk_update(obligation_id, updates, viewer=current_viewer())
        return jsonify({"success": True, "cells": [cell_to_dict(c) for c in cells]})
