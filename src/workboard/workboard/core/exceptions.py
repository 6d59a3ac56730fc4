class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidPattern(ValidationError):
    """Raised for an unrecognized recurrence cadence."""


class InvalidDateRange(ValidationError):
    """Raised when an end date/time precedes its start."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class EntityNotInScope(AuthorizationError):
    """Raised when a completion read/write targets an entity outside the visible set."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ObligationNotFound(NotFoundError):
    """Raised when an obligation id does not resolve."""


class ScheduleEntryNotFound(NotFoundError):
    """Raised when a roster entry id does not resolve."""
