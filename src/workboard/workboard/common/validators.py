from __future__ import annotations

from typing import FrozenSet, Iterable

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_id_set(values: Iterable[str], field_name: str) -> FrozenSet[str]:
    """Normalize a collection of string ids; blank ids are rejected, duplicates collapse."""
    if isinstance(values, str):
        raise ValidationError(f"{field_name} must be a list of ids")

    out = set()
    for v in values or ():
        s = str(v).strip() if v is not None else ""
        if not s:
            raise ValidationError(f"{field_name} contains an empty id")
        out.add(s)
    return frozenset(out)


def require_non_negative(value: int, field_name: str) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if n < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return n
