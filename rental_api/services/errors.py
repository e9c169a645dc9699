# This project was developed with assistance from AI tools.
"""Service-layer exceptions for the application lifecycle.

Each exception carries a stable ``code`` and enough structure for the
route layer to render an actionable RFC 7807 problem response.
"""


class ApplicationError(Exception):
    """Base class for lifecycle errors surfaced to callers."""

    code = "application_error"
    status_code = 400

    def __init__(self, detail: str, *, errors: dict[str, str] | None = None):
        super().__init__(detail)
        self.detail = detail
        self.errors = errors or {}


class ValidationError(ApplicationError):
    """Missing or invalid field, or missing transition payload."""

    code = "validation_error"
    status_code = 422


class InvalidTransitionError(ApplicationError):
    """Raised when an application status transition is not allowed."""

    code = "invalid_transition"
    status_code = 422

    def __init__(self, from_status, to_status, detail: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            detail
            or f"Cannot transition from '{from_status.value}' to '{to_status.value}'.",
            errors={"from": from_status.value, "to": to_status.value},
        )


class ConflictError(ApplicationError):
    """Version mismatch or a write the current status no longer accepts."""

    code = "conflict"
    status_code = 409


class NotFoundError(ApplicationError):
    """Missing record, or a record outside the caller's data scope."""

    code = "not_found"
    status_code = 404


class AlreadyPaidError(ApplicationError):
    """The application fee is already paid; no further attempts are recorded."""

    code = "already_paid"
    status_code = 409
