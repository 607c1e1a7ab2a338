from __future__ import annotations

import pytest

from fieldops.core.errors import Unauthenticated
from fieldops.domain.principal import Principal
from fieldops.persistence.db import SessionLocal
from fieldops.services.permissions import authorize
from fieldops.tests.utils.auth import seed_roles


def _principal(role_slug: str, role_id: str | None) -> Principal:
    return Principal(id="u1", role_slug=role_slug, role_id=role_id, company_id="c1")


@pytest.mark.asyncio
async def test_super_tenant_bypasses_the_matrix() -> None:
    async with SessionLocal() as session:
        decision = await authorize(session, Principal(id="u0", role_slug="super_admin"), "Nope", "delete")
    assert decision.allowed


@pytest.mark.asyncio
async def test_granted_and_missing_flags() -> None:
    roles = await seed_roles()
    technician = _principal("technician", roles["technician"])
    async with SessionLocal() as session:
        assert (await authorize(session, technician, "Manage Job", "view")).allowed
        assert (await authorize(session, technician, "Manage Job", "edit")).allowed
        denied = await authorize(session, technician, "Manage Job", "add")
    assert not denied.allowed
    assert denied.reason == "Forbidden: lacks add on 'Manage Job'"


@pytest.mark.asyncio
async def test_missing_screen_and_missing_grant_are_denied() -> None:
    roles = await seed_roles()
    technician = _principal("technician", roles["technician"])
    async with SessionLocal() as session:
        no_screen = await authorize(session, technician, "Payroll", "view")
        no_grant = await authorize(session, technician, "Region", "view")
        bad_action = await authorize(session, technician, "Manage Job", "publish")
    assert no_screen.reason == "Forbidden: screen 'Payroll' not found"
    assert no_grant.reason == "Forbidden: no permission for 'Region'"
    assert not bad_action.allowed


@pytest.mark.asyncio
async def test_missing_role_id_is_unauthenticated() -> None:
    async with SessionLocal() as session:
        with pytest.raises(Unauthenticated):
            await authorize(session, _principal("technician", None), "Manage Job", "view")
