from __future__ import annotations

from enum import Enum

from .exceptions import InvalidPattern, ValidationError


class Role(str, Enum):
    """Viewer role used for visibility and permission checks."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"

    @property
    def is_privileged(self) -> bool:
        return self in PRIVILEGED_ROLES


PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class RecurrencePattern(str, Enum):
    """Cadence of a recurring obligation."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half-yearly"
    YEARLY = "yearly"

    @property
    def period_months(self) -> int:
        return _PERIOD_MONTHS[self]

    @classmethod
    def parse(cls, value: "RecurrencePattern | str") -> "RecurrencePattern":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidPattern(f"Unknown recurrence pattern: {value!r}")


_PERIOD_MONTHS = {
    RecurrencePattern.MONTHLY: 1,
    RecurrencePattern.QUARTERLY: 3,
    RecurrencePattern.HALF_YEARLY: 6,
    RecurrencePattern.YEARLY: 12,
}


class EntryKind(str, Enum):
    """Shape of a roster entry."""

    SINGLE_ASSIGNMENT = "single"
    MULTI_DAY_ACTIVITY = "multi"

    @classmethod
    def parse(cls, value: "EntryKind | str") -> "EntryKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown entry kind: {value!r}")


class Severity(str, Enum):
    """Workload tier of an agent on a given day (NONE < SHORT < LONG)."""

    NONE = "none"
    SHORT = "short"
    LONG = "long"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.NONE: 0,
    Severity.SHORT: 1,
    Severity.LONG: 2,
}
