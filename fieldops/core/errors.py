from __future__ import annotations


class FieldOpsError(Exception):
    """Base error for FieldOps."""


class ApiError(FieldOpsError):
    """Client-facing failure carrying a stable HTTP status and error code.

    Policies raise these (usually ``BadRequest``) to reject a write; the API
    layer renders them without further translation.
    """

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        errors: dict[str, str] | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class Unauthenticated(ApiError):
    """No resolvable principal for the request."""

    status_code = 401
    code = "AUTH_UNAUTHORIZED"


class Forbidden(ApiError):
    """Permission denied or cross-tenant write attempt."""

    status_code = 403
    code = "AUTH_FORBIDDEN"


class NotFound(ApiError):
    """Entity absent or outside the caller's tenant scope."""

    status_code = 404
    code = "NOT_FOUND"


class Conflict(ApiError):
    """Uniqueness or referential conflict."""

    status_code = 409
    code = "CONFLICT"


class BadRequest(ApiError):
    """Structural validation failure or business-rule rejection."""

    status_code = 400
    code = "BAD_REQUEST"


class InternalError(ApiError):
    """Unanticipated failure; the message must stay generic."""

    status_code = 500
    code = "INTERNAL_ERROR"
