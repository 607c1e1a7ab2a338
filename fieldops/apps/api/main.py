from __future__ import annotations

from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fieldops.apps.api.errors import (
    api_error_handler,
    http_exception_handler,
    starlette_http_exception_handler,
    tenant_predicate_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from fieldops.apps.api.routes.admin import router as admin_router
from fieldops.apps.api.routes.health import router as health_router
from fieldops.apps.api.routes.jobs import router as jobs_router
from fieldops.apps.api.routes.masters import router as masters_router
from fieldops.core.config import get_settings
from fieldops.core.errors import ApiError
from fieldops.core.logging import configure_logging
from fieldops.persistence.guards import TenantPredicateError


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(title=settings.app_name)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):  # type: ignore[override]
        # Preserve incoming request IDs or assign a new one for traceability.
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers.setdefault("X-Request-Id", request_id)
        return response

    @app.exception_handler(ApiError)
    async def _api_error_handler(request: Request, exc: ApiError):
        return await api_error_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return await starlette_http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        return await unhandled_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return await validation_exception_handler(request, exc)

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        return await http_exception_handler(request, exc)

    @app.exception_handler(TenantPredicateError)
    async def _tenant_predicate_exception_handler(request: Request, exc: TenantPredicateError):
        return await tenant_predicate_exception_handler(request, exc)

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(health_router, prefix=prefix)
    # Tenant and staff administration.
    app.include_router(admin_router, prefix=prefix)
    # Reference data, roles and screen permissions.
    app.include_router(masters_router, prefix=prefix)
    app.include_router(jobs_router, prefix=prefix)
    return app


app = create_app()
