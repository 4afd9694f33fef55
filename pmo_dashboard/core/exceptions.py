"""
Application-wide exception hierarchy.

Services and the data access layer raise these; the handlers registered by
``register_error_handlers`` turn them into the JSON envelope with a fixed
HTTP status per type. Blueprints never build error responses by hand.

Usage:
    from pmo_dashboard.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Project", resource_id=42)
    raise ValidationError("Validation failed", details=[{"field": "project_name", "reason": "is required"}])
"""

from pmo_dashboard.utils.errors import E


class PMOError(Exception):
    """Base for every error the API reports deliberately.

    Attributes:
        status_code: HTTP status the handler responds with.
        code: Machine-readable error code (see ``E``).
    """

    status_code = 500
    code = E.INTERNAL

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(PMOError):
    """Raised when a payload or query parameter breaks its contract.

    Args:
        message: Summary line for the ``error`` field.
        details: Every violated field, as ``{"field": ..., "reason": ...}`` dicts.
    """

    status_code = 400
    code = E.VALIDATION_INVALID

    def __init__(self, message: str = "Validation failed", details: list[dict] | None = None) -> None:
        self.details = details or []
        super().__init__(message)


class AuthError(PMOError):
    """Bad or missing credentials.

    The message is intentionally generic: unknown user, inactive user and
    wrong password all look the same to the caller.
    """

    status_code = 401
    code = E.UNAUTHENTICATED

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class ForbiddenError(PMOError):
    status_code = 403
    code = E.FORBIDDEN

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class NotFoundError(PMOError):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Project", "Comment").
        resource_id: The key that was looked up.
    """

    status_code = 404
    code = E.NOT_FOUND

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource} not found"
        super().__init__(msg)


class ConflictError(PMOError):
    """Raised for duplicates and for deleting something still in use.

    Args:
        resource: Model name.
        field: The unique (or referenced) field.
        value: The conflicting value.
        message: Overrides the default "already exists" text.
    """

    status_code = 409
    code = E.CONFLICT_DUPLICATE

    def __init__(
        self,
        resource: str,
        field: str | None = None,
        value: str | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        if message is None:
            message = f"{resource} with this {field} already exists" if field else f"{resource} already exists"
        super().__init__(message)


class RateLimitedError(PMOError):
    status_code = 429
    code = E.RATE_LIMITED

    def __init__(self, message: str = "Too many requests from this IP, please try again later.") -> None:
        super().__init__(message)


class UpstreamUnavailableError(PMOError):
    """Storage unreachable or returned an unexpected fault.

    The cause is kept on the instance for server-side logging only; the
    caller always sees the generic ``public_message``.
    """

    status_code = 500
    code = E.DATABASE

    def __init__(self, message: str = "Storage backend error", cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)

    @property
    def public_message(self) -> str:
        return "Internal server error"


class InUseError(ConflictError):
    """Deleting an entity that other records still reference."""

    code = E.CONFLICT_IN_USE

    def __init__(self, resource: str, field: str | None = None, value: str | None = None) -> None:
        super().__init__(
            resource, field, value,
            message=f"Cannot delete {resource.lower()}: it is in use by existing projects",
        )
