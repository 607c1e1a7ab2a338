from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import inspect
from sqlalchemy.sql import ColumnElement

from fieldops.core.config import get_settings


SORT_DIRECTIONS = ("asc", "desc")
# Largest row offset a signed 64-bit storage integer can carry.
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class ListQuery:
    # Bounded pagination/sort descriptor; sort_by is still unvalidated here.
    page: int
    limit: int
    sort_by: str | None
    order: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _positive_int(raw: Any, default: int) -> int:
    # Non-numeric, zero and negative inputs all fall back to the default.
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def parse_list_query(raw: Mapping[str, Any]) -> ListQuery:
    # Never raises: every field is defaulted or clamped into range.
    settings = get_settings()
    limit = min(_positive_int(raw.get("limit"), settings.list_default_limit), settings.list_max_limit)
    page = min(_positive_int(raw.get("page"), 1), MAX_OFFSET // limit + 1)
    order = str(raw.get("order") or "").strip().lower()
    if order not in SORT_DIRECTIONS:
        order = settings.list_default_order
    sort_by = raw.get("sortBy")
    return ListQuery(
        page=page,
        limit=limit,
        sort_by=str(sort_by) if sort_by not in (None, "") else None,
        order=order,
    )


def sortable_columns(model) -> dict[str, ColumnElement[Any]]:
    # Only mapped column attributes may be sorted on.
    mapper = inspect(model)
    return {attr.key: getattr(model, attr.key) for attr in mapper.column_attrs}


def primary_key_name(model) -> str:
    mapper = inspect(model)
    return mapper.get_property_by_column(mapper.primary_key[0]).key


def resolve_sort_column(model, sort_by: str | None, default: str | None = None) -> ColumnElement[Any]:
    # Unknown sort fields fall back to the default field, then the primary key.
    allowed = sortable_columns(model)
    if sort_by and sort_by in allowed:
        return allowed[sort_by]
    if default and default in allowed:
        return allowed[default]
    return allowed[primary_key_name(model)]


def order_clause(column: ColumnElement[Any], order: str) -> ColumnElement[Any]:
    return column.desc() if order == "desc" else column.asc()
