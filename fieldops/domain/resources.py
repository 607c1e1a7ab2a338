from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from fieldops.domain.principal import Principal


@dataclass(frozen=True)
class CrudContext:
    # Per-request view handed to policy hooks.
    principal: Principal
    session: AsyncSession
    descriptor: ResourceDescriptor
    query: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_super_tenant(self) -> bool:
        return self.principal.is_super_tenant


class ResourcePolicy:
    """Extension points for one resource type.

    Subclasses override only what they need; the base implementation accepts
    everything unchanged. Hooks raise ``ApiError`` subclasses (normally
    ``BadRequest``) to reject a request.
    """

    def normalize(self, body: dict[str, Any], operation: str) -> None:
        """Mutate ``body`` in place (trim, case-fold). Must not perform I/O."""

    async def pre_create(self, ctx: CrudContext, body: dict[str, Any]) -> None:
        """Business-rule validation before insert; may query storage."""

    async def pre_update(self, ctx: CrudContext, body: dict[str, Any], row: Any) -> None:
        """Business-rule validation before update, with the existing row."""

    def duplicate_lookup(self, ctx: CrudContext, body: dict[str, Any]) -> dict[str, Any] | None:
        """Column values identifying an existing row for idempotent creates."""
        return None

    async def list_where(self, ctx: CrudContext) -> ColumnElement[bool] | None:
        """Extra list predicate, ANDed with filters and tenant scope."""
        return None


@dataclass(frozen=True)
class ResourceDescriptor:
    # Static per-entity configuration shared by every request for that entity.
    model: type
    screen: str
    path: str
    search_fields: tuple[str, ...] = ()
    exact_fields: tuple[str, ...] = ()
    status_field: str | None = "status"
    tenant_scoped: bool = True
    tenant_field: str | None = "company_id"
    default_sort: str | None = None
    case_insensitive: bool = True
    # (dependent model, foreign key attribute) pairs deleted with the parent.
    cascade: tuple[tuple[type, str], ...] = ()
    policy: ResourcePolicy = field(default_factory=ResourcePolicy)

    def __post_init__(self) -> None:
        # Fail at startup rather than per request when a descriptor names unknown columns.
        mapped = {attr.key for attr in inspect(self.model).column_attrs}
        names = list(self.search_fields) + list(self.exact_fields)
        if self.status_field:
            names.append(self.status_field)
        if self.default_sort:
            names.append(self.default_sort)
        if self.tenant_scoped:
            if not self.tenant_field:
                raise ValueError(f"{self.model.__name__}: tenant_scoped requires tenant_field")
            names.append(self.tenant_field)
        unknown = [name for name in names if name not in mapped]
        if unknown:
            raise ValueError(f"{self.model.__name__}: unknown fields {unknown}")
        for dependent, foreign_key in self.cascade:
            if foreign_key not in {attr.key for attr in inspect(dependent).column_attrs}:
                raise ValueError(f"{dependent.__name__}: unknown cascade key {foreign_key}")

    @property
    def label(self) -> str:
        return self.model.__name__
