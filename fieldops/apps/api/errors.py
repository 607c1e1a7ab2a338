from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fieldops.apps.api.response import error_response
from fieldops.core.errors import ApiError
from fieldops.persistence.guards import TenantPredicateError


logger = logging.getLogger(__name__)

_DEFAULT_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "AUTH_UNAUTHORIZED",
    403: "AUTH_FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _default_code(status_code: int) -> str:
    # Map status codes to fallback error codes when none are provided.
    return _DEFAULT_ERROR_CODES.get(status_code, "UNKNOWN_ERROR")


def _split_detail(detail: Any, status_code: int) -> tuple[str, str]:
    # Extract code/message from HTTPException detail payloads.
    if isinstance(detail, dict):
        code = str(detail.get("code") or _default_code(status_code))
        message = str(detail.get("message") or "Request failed")
        return code, message
    if isinstance(detail, str):
        return _default_code(status_code), detail
    return _default_code(status_code), "Request failed"


def _field_path(loc: tuple[Any, ...] | list[Any]) -> str:
    # Drop the "body"/"query" prefix so clients see plain field names.
    parts = [str(part) for part in loc]
    if parts and parts[0] in {"body", "query", "path", "header"}:
        parts = parts[1:]
    return ".".join(parts) or "body"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    # Render taxonomy errors raised by guards, policies and the storage translator.
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    payload = error_response(request=request, code=exc.code, message=exc.message, errors=exc.errors)
    return JSONResponse(content=payload, status_code=exc.status_code, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    code, message = _split_detail(exc.detail, exc.status_code)
    payload = error_response(request=request, code=code, message=message)
    return JSONResponse(content=payload, status_code=exc.status_code, headers=exc.headers)


async def starlette_http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # Ensure router-level 404/405 responses share the same shape.
    code, message = _split_detail(exc.detail, exc.status_code)
    payload = error_response(request=request, code=code, message=message)
    return JSONResponse(content=payload, status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed payloads are client errors with a per-field reason map.
    errors = {_field_path(item.get("loc", ())): str(item.get("msg", "Invalid value")) for item in exc.errors()}
    payload = error_response(
        request=request,
        code="VALIDATION_ERROR",
        message="Validation error",
        errors=errors,
    )
    return JSONResponse(content=payload, status_code=400)


async def tenant_predicate_exception_handler(
    request: Request, exc: TenantPredicateError
) -> JSONResponse:
    # Missing tenant predicates are server bugs; fail closed without details.
    logger.error("tenant_predicate_missing path=%s message=%s", request.url.path, exc.message)
    payload = error_response(
        request=request,
        code="TENANT_PREDICATE_REQUIRED",
        message="Tenant scope could not be resolved",
    )
    return JSONResponse(content=payload, status_code=500)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Avoid leaking stack traces; return a stable internal error body.
    logger.error(
        "unhandled_exception method=%s path=%s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    payload = error_response(request=request, code="INTERNAL_ERROR", message="Internal server error")
    return JSONResponse(content=payload, status_code=500)
