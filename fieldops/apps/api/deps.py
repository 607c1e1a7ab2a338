from __future__ import annotations

import logging
from typing import AsyncGenerator

import jwt
from fastapi import Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.config import get_settings
from fieldops.core.errors import Forbidden, Unauthenticated
from fieldops.domain.principal import Principal
from fieldops.persistence.db import get_session
from fieldops.services.permissions import authorize


logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    # One AsyncSession per request; context manager ensures close on success/error.
    async with get_session() as session:
        yield session


def _auth_error(message: str) -> Unauthenticated:
    # Normalize auth errors for clients without leaking token details.
    return Unauthenticated(message)


def _parse_bearer_token(header_value: str | None) -> str:
    # Enforce Bearer token format.
    if not header_value:
        raise _auth_error("Missing bearer token")
    parts = header_value.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _auth_error("Missing or invalid bearer token")
    return parts[1]


def _optional_str(value: object) -> str | None:
    return None if value in (None, "") else str(value)


def resolve_principal(token: str) -> Principal:
    # Verify signature and expiry, then map claims onto the request principal.
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise _auth_error("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _auth_error("Invalid token") from exc
    try:
        return Principal(
            id=str(claims.get("sub") or claims.get("id") or ""),
            role_slug=str(claims.get("role_slug") or ""),
            role_id=_optional_str(claims.get("role_id")),
            company_id=_optional_str(claims.get("company_id")),
        )
    except ValidationError as exc:
        raise _auth_error("Invalid token claims") from exc


async def get_current_principal(request: Request) -> Principal:
    cached = getattr(request.state, "principal", None)
    if cached is not None:
        return cached
    settings = get_settings()
    token = _parse_bearer_token(request.headers.get(settings.auth_header))
    principal = resolve_principal(token)
    if not principal.id or not principal.role_slug:
        raise _auth_error("Invalid token claims")
    request.state.principal = principal
    return principal


def require_permission(screen: str, action: str):
    # Dependency factory enforcing screen permissions before any data access.
    async def _dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        db: AsyncSession = Depends(get_db),
    ) -> Principal:
        decision = await authorize(db, principal, screen, action)
        if not decision.allowed:
            logger.info(
                "permission_denied screen=%s action=%s role=%s path=%s",
                screen,
                action,
                principal.role_slug,
                request.url.path,
            )
            raise Forbidden(decision.reason or "Forbidden")
        return principal

    return _dependency
