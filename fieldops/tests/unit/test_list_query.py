from __future__ import annotations

import pytest
from pydantic import ValidationError

from fieldops.core.config import Settings
from fieldops.domain.models import Job, WorkType
from fieldops.services.list_query import MAX_OFFSET, parse_list_query, resolve_sort_column


def test_parse_list_query_defaults() -> None:
    query = parse_list_query({})
    assert query.page == 1
    assert query.limit == 10
    assert query.sort_by is None
    assert query.order == "desc"
    assert query.offset == 0


def test_parse_list_query_clamps_and_falls_back() -> None:
    # Bad inputs never raise; they are replaced or clamped.
    assert parse_list_query({"limit": "1000"}).limit == 200
    assert parse_list_query({"limit": "0"}).limit == 10
    assert parse_list_query({"limit": "ten"}).limit == 10
    assert parse_list_query({"page": "-3"}).page == 1
    assert parse_list_query({"page": "abc"}).page == 1
    assert parse_list_query({"order": "ASC"}).order == "asc"
    assert parse_list_query({"order": "sideways"}).order == "desc"


def test_parse_list_query_offset_and_sort_passthrough() -> None:
    query = parse_list_query({"page": "3", "limit": "20", "sortBy": "worktype_name", "order": "asc"})
    assert query.offset == 40
    assert query.sort_by == "worktype_name"
    assert query.order == "asc"


def test_resolve_sort_column_uses_known_fields() -> None:
    assert resolve_sort_column(WorkType, "worktype_name").key == "worktype_name"


def test_resolve_sort_column_falls_back_to_default_then_primary_key() -> None:
    assert resolve_sort_column(Job, "nonexistent", "created_at").key == "created_at"
    assert resolve_sort_column(WorkType, "nonexistent").key == "worktype_id"
    assert resolve_sort_column(WorkType, "__class__").key == "worktype_id"
    assert resolve_sort_column(WorkType, None, "missing_default").key == "worktype_id"


def test_parse_list_query_bounds_huge_pages() -> None:
    query = parse_list_query({"page": "99999999999999999999", "limit": "10"})
    assert query.offset <= MAX_OFFSET
    assert query.page > 1


def test_default_order_setting_is_case_insensitive() -> None:
    assert Settings(list_default_order=" DESC ").list_default_order == "desc"
    assert Settings(list_default_order="Asc").list_default_order == "asc"
    with pytest.raises(ValidationError):
        Settings(list_default_order="sideways")
