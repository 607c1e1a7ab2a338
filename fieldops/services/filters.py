from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy import Boolean, Integer, and_, inspect, or_, true
from sqlalchemy.sql import ColumnElement

from fieldops.core.errors import BadRequest


SEARCH_PARAM = "searchParam"
_LIKE_ESCAPE = "\\"
_TRUE_VALUES = {"true", "1"}
_FALSE_VALUES = {"false", "0"}


def _escape_like(term: str) -> str:
    # Treat user input literally inside LIKE patterns.
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


def coerce_bool(raw: Any) -> bool | None:
    # Map query-string booleans; None means the value is not a boolean.
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return None


def _coerce_exact(model, name: str, raw: Any) -> Any:
    # Query strings arrive untyped; bind values in the column's own type.
    column_type = getattr(model, name).type
    if isinstance(column_type, Boolean):
        value = coerce_bool(raw)
        if value is None:
            raise BadRequest(f"Invalid value for filter '{name}'", errors={name: "Expected true or false"})
        return value
    if isinstance(column_type, Integer):
        try:
            return int(str(raw).strip())
        except ValueError as exc:
            raise BadRequest(
                f"Invalid value for filter '{name}'", errors={name: "Expected an integer"}
            ) from exc
    return str(raw).strip()


def build_where(
    model,
    raw: Mapping[str, Any],
    search_fields: Iterable[str],
    exact_fields: Iterable[str],
    *,
    status_field: str | None = "status",
    case_insensitive: bool = True,
) -> ColumnElement[bool]:
    # Compile query parameters into (fuzzy OR-group) AND (exact matches).
    mapped = {attr.key for attr in inspect(model).column_attrs}
    conditions: list[ColumnElement[bool]] = []

    term = str(raw.get(SEARCH_PARAM) or "").strip()
    if term:
        pattern = f"%{_escape_like(term)}%"
        fuzzy = []
        for name in search_fields:
            if name not in mapped:
                continue
            column = getattr(model, name)
            if case_insensitive:
                fuzzy.append(column.ilike(pattern, escape=_LIKE_ESCAPE))
            else:
                fuzzy.append(column.like(pattern, escape=_LIKE_ESCAPE))
        if fuzzy:
            conditions.append(or_(*fuzzy))

    fields = list(exact_fields)
    if status_field and status_field not in fields:
        fields.append(status_field)
    for name in fields:
        if name not in mapped or name not in raw:
            continue
        value = raw.get(name)
        if value is None or (isinstance(value, str) and value.strip() == ""):
            continue
        conditions.append(getattr(model, name) == _coerce_exact(model, name, value))

    if not conditions:
        return true()
    return and_(*conditions)
