from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy.sql import ColumnElement

from fieldops.core.errors import BadRequest, Forbidden
from fieldops.domain.principal import Principal

if TYPE_CHECKING:
    from fieldops.domain.resources import ResourceDescriptor


@dataclass(frozen=True)
class TenantPredicateError(RuntimeError):
    # Surface missing tenant predicates on code paths that must always be scoped.
    message: str


def require_tenant_id(tenant_id: str | None) -> None:
    # Reject empty tenant identifiers before any scoped query is built.
    if not tenant_id:
        raise TenantPredicateError("Tenant predicate required but company_id is missing")


def tenant_predicate(model, tenant_id: str, *, field: str = "company_id") -> ColumnElement[bool]:
    # Build tenant predicates through a single helper to guarantee guard coverage.
    require_tenant_id(tenant_id)
    return getattr(model, field) == tenant_id


def scope_for_read(principal: Principal, descriptor: ResourceDescriptor) -> ColumnElement[bool] | None:
    # Super tenants and unscoped resources read across all companies.
    if not descriptor.tenant_scoped or descriptor.tenant_field is None:
        return None
    if principal.is_super_tenant:
        return None
    return tenant_predicate(descriptor.model, principal.company_id, field=descriptor.tenant_field)


def enforce_ownership(
    principal: Principal,
    descriptor: ResourceDescriptor,
    body: dict[str, Any],
    operation: str,
) -> dict[str, Any]:
    # Bind writes to the caller's company; the tenant key never changes after creation.
    field = descriptor.tenant_field
    if not descriptor.tenant_scoped or field is None:
        return body
    if not principal.is_super_tenant:
        require_tenant_id(principal.company_id)
    if operation == "update":
        # The tenant key is fixed after creation; any supplied value is dropped.
        body.pop(field, None)
        return body
    supplied = body.get(field)
    if not principal.is_super_tenant:
        if supplied not in (None, "") and supplied != principal.company_id:
            raise Forbidden("Cross-tenant write forbidden", code="CROSS_TENANT_WRITE")
        body[field] = principal.company_id
    elif supplied in (None, ""):
        raise BadRequest(f"{field} is required for super_admin", code="TENANT_REQUIRED")
    return body
