class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or a required field is missing."""


class AuthenticationError(DomainError):
    """Raised when there is no authenticated actor or credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""


class RelationshipViolationError(AuthorizationError):
    """Raised when a parent acts on a player that is not one of their children."""


class NotFoundError(DomainError):
    """Raised when a referenced event, user or record does not exist."""


class LockedEventError(DomainError):
    """Raised when a mutation is blocked by an event lock."""


class ForbiddenTransitionError(DomainError):
    """Raised when a role may not set the requested attendance status."""
