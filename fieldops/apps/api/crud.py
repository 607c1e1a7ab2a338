from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping

from fastapi import APIRouter, Body, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.apps.api.deps import get_db, require_permission
from fieldops.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from fieldops.apps.api.response import MessageBody, Page
from fieldops.core.errors import BadRequest, NotFound
from fieldops.domain.models import column_values
from fieldops.domain.principal import Principal
from fieldops.domain.resources import CrudContext, ResourceDescriptor
from fieldops.persistence.guards import enforce_ownership, scope_for_read
from fieldops.persistence.repos import records as records_repo
from fieldops.services.filters import build_where, coerce_bool
from fieldops.services.list_query import (
    order_clause,
    parse_list_query,
    primary_key_name,
    resolve_sort_column,
)
from fieldops.services.storage_errors import humanize_field, is_unique_violation, translate_storage_error


logger = logging.getLogger(__name__)

# Server-maintained columns that clients may never write.
_READ_ONLY_FIELDS = frozenset({"created_at", "updated_at"})


def serialize(row: Any) -> dict[str, Any]:
    return jsonable_encoder(column_values(row))


def _coerce_value(column_type: Any, raw: Any) -> Any:
    # Bind JSON values in the column's own type; raise TypeError/ValueError when impossible.
    if raw is None:
        return None
    if isinstance(column_type, Boolean):
        value = coerce_bool(raw) if isinstance(raw, (bool, str, int)) else None
        if value is None:
            raise ValueError("not a boolean")
        return value
    if isinstance(column_type, Integer):
        if isinstance(raw, bool):
            raise TypeError("boolean is not an integer")
        if isinstance(raw, float):
            if not raw.is_integer():
                raise ValueError("not an integer")
            return int(raw)
        return int(str(raw).strip())
    if isinstance(column_type, Numeric):
        if isinstance(raw, bool):
            raise TypeError("boolean is not a number")
        return Decimal(str(raw).strip())
    if isinstance(column_type, DateTime):
        if isinstance(raw, datetime):
            parsed = raw
        else:
            parsed = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    if isinstance(column_type, String):
        if isinstance(raw, (dict, list)):
            raise TypeError("structured value for a text column")
        return raw if isinstance(raw, str) else str(raw)
    return raw


def coerce_body(model, body: Mapping[str, Any]) -> dict[str, Any]:
    # Keep writable mapped columns only; the primary key is always server-assigned.
    mapper = inspect(model)
    pk_name = primary_key_name(model)
    writable = {
        attr.key: attr.columns[0]
        for attr in mapper.column_attrs
        if attr.key != pk_name and attr.key not in _READ_ONLY_FIELDS
    }
    values: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for key, raw in body.items():
        column = writable.get(key)
        if column is None:
            continue
        try:
            values[key] = _coerce_value(column.type, raw)
        except (TypeError, ValueError, ArithmeticError):
            errors[key] = f"Invalid {humanize_field(key).lower()}"
    if errors:
        raise BadRequest("Validation error", code="VALIDATION_ERROR", errors=errors)
    return values


async def _get_or_404(ctx: CrudContext, record_id: str) -> Any:
    # Rows outside the caller's tenant are reported exactly like missing rows.
    descriptor = ctx.descriptor
    scope = scope_for_read(ctx.principal, descriptor)
    try:
        row = await records_repo.get_scoped(ctx.session, descriptor.model, record_id, scope)
    except SQLAlchemyError as exc:
        raise translate_storage_error(exc, resource=descriptor.label, operation="read") from exc
    if row is None:
        raise NotFound("Not found")
    return row


async def list_resource(
    session: AsyncSession,
    principal: Principal,
    descriptor: ResourceDescriptor,
    raw_query: Mapping[str, Any],
) -> dict[str, Any]:
    model = descriptor.model
    query = parse_list_query(raw_query)
    ctx = CrudContext(principal=principal, session=session, descriptor=descriptor, query=raw_query)
    where = records_repo.combine(
        build_where(
            model,
            raw_query,
            descriptor.search_fields,
            descriptor.exact_fields,
            status_field=descriptor.status_field,
            case_insensitive=descriptor.case_insensitive,
        ),
        scope_for_read(principal, descriptor),
        await descriptor.policy.list_where(ctx),
    )
    sort_column = resolve_sort_column(model, query.sort_by, descriptor.default_sort)
    pk_column = getattr(model, primary_key_name(model))
    order_by = [order_clause(sort_column, query.order)]
    # Tie-break on the primary key so pages never overlap.
    if sort_column is not pk_column:
        order_by.append(order_clause(pk_column, query.order))
    try:
        rows, total = await records_repo.find_and_count(
            session,
            model,
            where=where,
            order_by=order_by,
            limit=query.limit,
            offset=query.offset,
        )
    except SQLAlchemyError as exc:
        raise translate_storage_error(exc, resource=descriptor.label, operation="list") from exc
    return {
        "data": [serialize(row) for row in rows],
        "page": query.page,
        "limit": query.limit,
        "total": total,
    }


async def get_resource(
    session: AsyncSession,
    principal: Principal,
    descriptor: ResourceDescriptor,
    record_id: str,
) -> dict[str, Any]:
    ctx = CrudContext(principal=principal, session=session, descriptor=descriptor)
    return serialize(await _get_or_404(ctx, record_id))


async def _find_duplicate(ctx: CrudContext, values: dict[str, Any]) -> Any | None:
    # Re-fetch the row that won the uniqueness race, still under the caller's scope.
    descriptor = ctx.descriptor
    lookup = descriptor.policy.duplicate_lookup(ctx, values)
    if not lookup:
        return None
    model = descriptor.model
    conditions = [getattr(model, name) == value for name, value in lookup.items()]
    where = records_repo.combine(*conditions, scope_for_read(ctx.principal, descriptor))
    return await records_repo.find_one(ctx.session, model, where)


async def create_resource(
    session: AsyncSession,
    principal: Principal,
    descriptor: ResourceDescriptor,
    body: Mapping[str, Any],
) -> tuple[Any, bool]:
    """Create a record, returning ``(row, created)``.

    ``created`` is False when a uniqueness conflict was resolved to an existing
    row through the resource's duplicate lookup.
    """
    model = descriptor.model
    ctx = CrudContext(principal=principal, session=session, descriptor=descriptor)
    owned = enforce_ownership(principal, descriptor, dict(body), "create")
    values = coerce_body(model, owned)
    descriptor.policy.normalize(values, "create")
    await descriptor.policy.pre_create(ctx, values)
    try:
        row = await records_repo.insert_row(session, model, values)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            existing = await _find_duplicate(ctx, values)
            if existing is not None:
                logger.info(
                    "crud_duplicate_recovered resource=%s id=%s",
                    descriptor.label,
                    getattr(existing, primary_key_name(model)),
                )
                return existing, False
        raise translate_storage_error(exc, resource=descriptor.label, operation="create") from exc
    await session.refresh(row)
    logger.info(
        "crud_created resource=%s id=%s actor=%s",
        descriptor.label,
        getattr(row, primary_key_name(model)),
        principal.id,
    )
    return row, True


async def update_resource(
    session: AsyncSession,
    principal: Principal,
    descriptor: ResourceDescriptor,
    record_id: str,
    body: Mapping[str, Any],
) -> Any:
    model = descriptor.model
    ctx = CrudContext(principal=principal, session=session, descriptor=descriptor)
    row = await _get_or_404(ctx, record_id)
    owned = enforce_ownership(principal, descriptor, dict(body), "update")
    values = coerce_body(model, owned)
    descriptor.policy.normalize(values, "update")
    await descriptor.policy.pre_update(ctx, values, row)
    if descriptor.tenant_field is not None:
        # Tenant ownership is fixed at creation, whatever the hooks did.
        values.pop(descriptor.tenant_field, None)
    try:
        await records_repo.update_row(session, row, values)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise translate_storage_error(exc, resource=descriptor.label, operation="update") from exc
    await session.refresh(row)
    logger.info("crud_updated resource=%s id=%s fields=%s", descriptor.label, record_id, sorted(values))
    return row


async def delete_resource(
    session: AsyncSession,
    principal: Principal,
    descriptor: ResourceDescriptor,
    record_id: str,
) -> None:
    ctx = CrudContext(principal=principal, session=session, descriptor=descriptor)
    row = await _get_or_404(ctx, record_id)
    try:
        # Cascaded dependents and the row share one transaction: all or nothing.
        await records_repo.delete_row(session, row, cascade=descriptor.cascade)
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise translate_storage_error(exc, resource=descriptor.label, operation="delete") from exc
    logger.info("crud_deleted resource=%s id=%s actor=%s", descriptor.label, record_id, principal.id)


def build_crud_router(descriptor: ResourceDescriptor) -> APIRouter:
    # Five uniform endpoints per resource, each guarded by its screen action.
    router = APIRouter(
        prefix=f"/{descriptor.path}",
        tags=[descriptor.path],
        responses=DEFAULT_ERROR_RESPONSES,
    )
    operation = descriptor.path.replace("-", "_")
    screen = descriptor.screen

    @router.get("", response_model=Page[dict[str, Any]], operation_id=f"{operation}_list")
    async def list_records(
        request: Request,
        principal: Principal = Depends(require_permission(screen, "view")),
        db: AsyncSession = Depends(get_db),
    ) -> dict[str, Any]:
        return await list_resource(db, principal, descriptor, request.query_params)

    @router.get("/{record_id}", response_model=dict[str, Any], operation_id=f"{operation}_get")
    async def get_record(
        record_id: str,
        principal: Principal = Depends(require_permission(screen, "view")),
        db: AsyncSession = Depends(get_db),
    ) -> dict[str, Any]:
        return await get_resource(db, principal, descriptor, record_id)

    @router.post(
        "",
        status_code=201,
        response_model=dict[str, Any],
        operation_id=f"{operation}_create",
    )
    async def create_record(
        body: dict[str, Any] = Body(...),
        principal: Principal = Depends(require_permission(screen, "add")),
        db: AsyncSession = Depends(get_db),
    ) -> JSONResponse:
        row, created = await create_resource(db, principal, descriptor, body)
        return JSONResponse(content=serialize(row), status_code=201 if created else 200)

    @router.put("/{record_id}", response_model=dict[str, Any], operation_id=f"{operation}_update")
    async def update_record(
        record_id: str,
        body: dict[str, Any] = Body(...),
        principal: Principal = Depends(require_permission(screen, "edit")),
        db: AsyncSession = Depends(get_db),
    ) -> dict[str, Any]:
        row = await update_resource(db, principal, descriptor, record_id, body)
        return serialize(row)

    @router.delete("/{record_id}", response_model=MessageBody, operation_id=f"{operation}_delete")
    async def delete_record(
        record_id: str,
        principal: Principal = Depends(require_permission(screen, "delete")),
        db: AsyncSession = Depends(get_db),
    ) -> dict[str, str]:
        await delete_resource(db, principal, descriptor, record_id)
        return {"message": "Deleted"}

    return router
