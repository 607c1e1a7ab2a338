from __future__ import annotations

from typing import Any, Generic, TypeVar
from uuid import uuid4

from fastapi import Request
from pydantic import BaseModel


T = TypeVar("T")


class ErrorBody(BaseModel):
    # Every error carries at least a human-readable message.
    message: str
    code: str
    request_id: str | None = None
    errors: dict[str, str] | None = None


class Page(BaseModel, Generic[T]):
    # Offset pagination result for generic list endpoints.
    data: list[T]
    page: int
    limit: int
    total: int


class MessageBody(BaseModel):
    message: str


def get_request_id(request: Request) -> str:
    # Use existing request IDs when provided to preserve traceability.
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return request_id
    header_request_id = request.headers.get("X-Request-Id")
    if header_request_id:
        request.state.request_id = header_request_id
        return header_request_id
    generated = str(uuid4())
    request.state.request_id = generated
    return generated


def error_response(
    *,
    request: Request,
    code: str,
    message: str,
    errors: dict[str, str] | None = None,
) -> dict[str, Any]:
    body = ErrorBody(message=message, code=code, request_id=get_request_id(request), errors=errors)
    return body.model_dump(exclude_none=True)
