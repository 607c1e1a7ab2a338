from __future__ import annotations

import pytest

from fieldops.apps.api.registry import COMPANIES, NATURE_OF_WORK, WORK_TYPES
from fieldops.core.errors import BadRequest, Forbidden
from fieldops.domain.principal import Principal
from fieldops.persistence.guards import TenantPredicateError, enforce_ownership, scope_for_read


ADMIN = Principal(id="u1", role_slug="company_admin", role_id="r1", company_id="c1")
SUPER = Principal(id="u0", role_slug="super_admin", role_id="r0")


def _sql(predicate) -> str:
    return str(predicate.compile(compile_kwargs={"literal_binds": True}))


def test_scope_for_read_binds_company_for_tenant_principals() -> None:
    predicate = scope_for_read(ADMIN, WORK_TYPES)
    assert _sql(predicate) == "work_types.company_id = 'c1'"


def test_scope_for_read_is_empty_for_super_tenant_and_global_resources() -> None:
    assert scope_for_read(SUPER, WORK_TYPES) is None
    assert scope_for_read(ADMIN, NATURE_OF_WORK) is None
    assert scope_for_read(ADMIN, COMPANIES) is None


def test_scope_for_read_fails_closed_without_company() -> None:
    orphan = Principal(id="u2", role_slug="technician", role_id="r2")
    with pytest.raises(TenantPredicateError):
        scope_for_read(orphan, WORK_TYPES)


def test_create_forces_caller_company() -> None:
    body = enforce_ownership(ADMIN, WORK_TYPES, {"worktype_name": "Plumbing"}, "create")
    assert body["company_id"] == "c1"
    body = enforce_ownership(ADMIN, WORK_TYPES, {"company_id": "c1"}, "create")
    assert body["company_id"] == "c1"


def test_create_rejects_foreign_company() -> None:
    with pytest.raises(Forbidden) as excinfo:
        enforce_ownership(ADMIN, WORK_TYPES, {"company_id": "c2"}, "create")
    assert excinfo.value.code == "CROSS_TENANT_WRITE"


def test_super_tenant_must_name_company_on_create() -> None:
    with pytest.raises(BadRequest) as excinfo:
        enforce_ownership(SUPER, WORK_TYPES, {"worktype_name": "Plumbing"}, "create")
    assert excinfo.value.code == "TENANT_REQUIRED"
    body = enforce_ownership(SUPER, WORK_TYPES, {"company_id": "c9"}, "create")
    assert body["company_id"] == "c9"


def test_update_drops_tenant_key_for_every_principal() -> None:
    assert enforce_ownership(ADMIN, WORK_TYPES, {"company_id": "c2", "status": False}, "update") == {
        "status": False
    }
    assert enforce_ownership(SUPER, WORK_TYPES, {"company_id": "c2"}, "update") == {}


def test_unscoped_resources_pass_through() -> None:
    body = {"now_name": "Repair", "company_id": "c2"}
    assert enforce_ownership(ADMIN, NATURE_OF_WORK, dict(body), "create") == body
