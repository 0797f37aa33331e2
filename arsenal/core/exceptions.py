"""
Application-wide exception hierarchy.

Services raise these; the app factory registers one handler per type so
every blueprint gets the same HTTP status codes and error body.

Usage:
    from arsenal.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Submission", resource_id=sid)
    raise ValidationError("No updates provided")
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.  Maps to HTTP 404."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ValidationError(Exception):
    """Raised when input is malformed or violates a field rule.  Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown, keyed by field name.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when a write would violate a unique constraint.

    Maps to HTTP 400 (``ERR_CONFLICT_DUPLICATE``), matching the directory's
    duplicate-name contract.
    """

    def __init__(self, resource: str, field: str, value: str | None = None,
                 message: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message or f"{resource} {field} already exists")


class TransitionError(Exception):
    """Raised when a lifecycle action is not allowed from the current status.

    Maps to HTTP 409.
    """

    def __init__(self, resource: str, action: str, current: str, reason: str | None = None):
        msg = f"Cannot '{action}' {resource.lower()} in status '{current}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.resource = resource
        self.action = action
        self.current_status = current
        self.reason = reason


class AuthenticationRequired(Exception):
    """Raised when a route needs an identity and none was resolved.  HTTP 401."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDenied(Exception):
    """Raised when the acting user lacks the role or ownership for an action.

    Maps to HTTP 403.
    """

    def __init__(self, user_id: str | None, action: str, required_role: str | None = None):
        msg = f"User {user_id} is not allowed to {action}"
        if required_role:
            msg += f" (requires role '{required_role}' or higher)"
        super().__init__(msg)
        self.user_id = user_id
        self.action = action
        self.required_role = required_role
