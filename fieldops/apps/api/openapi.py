from __future__ import annotations

from typing import Any

from fieldops.apps.api.response import ErrorBody


def _error_example(*, code: str, message: str, errors: dict[str, str] | None = None) -> dict[str, Any]:
    # Build a consistent error body example for OpenAPI docs.
    payload: dict[str, Any] = {"message": message, "code": code, "request_id": "req_example"}
    if errors:
        payload["errors"] = errors
    return payload


def _response(description: str, example: dict[str, Any]) -> dict[str, Any]:
    return {
        "model": ErrorBody,
        "description": description,
        "content": {"application/json": {"example": example}},
    }


DEFAULT_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: _response(
        "Validation or business-rule failure",
        _error_example(
            code="NOT_NULL_VIOLATION",
            message="Worktype name is required",
            errors={"worktype_name": "Worktype name is required"},
        ),
    ),
    401: _response(
        "Unauthorized",
        _error_example(code="AUTH_UNAUTHORIZED", message="Missing or invalid bearer token"),
    ),
    403: _response(
        "Forbidden",
        _error_example(code="AUTH_FORBIDDEN", message="Forbidden: lacks add on 'Manage Job'"),
    ),
    404: _response("Not found", _error_example(code="NOT_FOUND", message="Not found")),
    409: _response(
        "Conflict",
        _error_example(
            code="FK_CONSTRAINT_VIOLATION",
            message="Cannot delete: record is referenced by other data",
        ),
    ),
    500: _response(
        "Internal server error",
        _error_example(code="INTERNAL_ERROR", message="Internal server error"),
    ),
}
