"""Shared bits of the JSON controller layer."""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.viewer import Viewer
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def error(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def current_viewer() -> Viewer:
    """Viewer as established by the auth layer at login (``user_id`` + ``role`` in session)."""
    try:
        role = Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role")
    return Viewer(viewer_id=str(session["user_id"]), role=role)


def api_view(view):
    """Require a session and translate domain errors into JSON responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error("Please log in", 401)
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error(str(e), 400)
        except AuthorizationError as e:
            return error(str(e), 403)
        except NotFoundError as e:
            return error(str(e), 404)
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return error("Internal error", 500)

    return wrapper


def arg_date(name: str, default: date) -> date:
    value = request.args.get(name)
    if not value:
        return default
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def arg_int(name: str, default: int) -> int:
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def json_bool(data: dict, name: str, default: Optional[bool] = None) -> bool:
    """Strict JSON boolean: ``"false"`` or ``0`` is rejected, not coerced."""
    value = data.get(name)
    if value is None and default is not None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false")
    return value
