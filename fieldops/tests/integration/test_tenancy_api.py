from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from fieldops.apps.api.main import create_app
from fieldops.tests.utils.auth import create_company, headers_for, seed_roles, super_admin_headers


WORK_TYPES = "/api/masters/work-types"


@pytest.mark.asyncio
async def test_records_of_other_tenants_look_absent() -> None:
    app = create_app()
    roles = await seed_roles()
    company_a = await create_company("Alpha")
    company_b = await create_company("Beta")
    alpha = await headers_for("company_admin", company_id=company_a, roles=roles)
    beta = await headers_for("company_admin", company_id=company_b, roles=roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        created = (await client.post(WORK_TYPES, json={"worktype_name": "Plumbing"}, headers=alpha)).json()
        record = f"{WORK_TYPES}/{created['worktype_id']}"

        assert (await client.get(record, headers=beta)).status_code == 404
        assert (await client.put(record, json={"worktype_name": "Mine"}, headers=beta)).status_code == 404
        assert (await client.delete(record, headers=beta)).status_code == 404
        assert (await client.get(WORK_TYPES, headers=beta)).json()["total"] == 0

        # Filtering on another company's id cannot widen the scope.
        response = await client.get(WORK_TYPES, params={"company_id": company_a}, headers=beta)
        assert response.json()["total"] == 0

        own = await client.get(record, headers=alpha)
        assert own.status_code == 200
        assert own.json()["worktype_name"] == "Plumbing"


@pytest.mark.asyncio
async def test_cross_tenant_create_is_forbidden() -> None:
    app = create_app()
    roles = await seed_roles()
    company_a = await create_company()
    company_b = await create_company()
    alpha = await headers_for("company_admin", company_id=company_a, roles=roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            WORK_TYPES, json={"worktype_name": "Plumbing", "company_id": company_b}, headers=alpha
        )
        assert response.status_code == 403
        assert response.json()["code"] == "CROSS_TENANT_WRITE"


@pytest.mark.asyncio
async def test_super_admin_reads_everything_and_must_name_a_company() -> None:
    app = create_app()
    roles = await seed_roles()
    company_a = await create_company()
    company_b = await create_company()
    admin = await super_admin_headers(roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(WORK_TYPES, json={"worktype_name": "Plumbing"}, headers=admin)
        assert response.status_code == 400
        assert response.json()["code"] == "TENANT_REQUIRED"

        for company_id in (company_a, company_b):
            response = await client.post(
                WORK_TYPES, json={"worktype_name": "Plumbing", "company_id": company_id}, headers=admin
            )
            assert response.status_code == 201
            assert response.json()["company_id"] == company_id

        assert (await client.get(WORK_TYPES, headers=admin)).json()["total"] == 2
        response = await client.get(WORK_TYPES, params={"company_id": company_b}, headers=admin)
        assert [item["company_id"] for item in response.json()["data"]] == [company_b]


@pytest.mark.asyncio
async def test_update_never_moves_a_record_between_tenants() -> None:
    app = create_app()
    roles = await seed_roles()
    company_a = await create_company()
    company_b = await create_company()
    alpha = await headers_for("company_admin", company_id=company_a, roles=roles)
    admin = await super_admin_headers(roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        created = (await client.post(WORK_TYPES, json={"worktype_name": "Plumbing"}, headers=alpha)).json()
        record = f"{WORK_TYPES}/{created['worktype_id']}"

        response = await client.put(
            record, json={"worktype_name": "Pipework", "company_id": company_b}, headers=alpha
        )
        assert response.status_code == 200
        assert response.json()["company_id"] == company_a
        assert response.json()["worktype_name"] == "Pipework"

        response = await client.put(record, json={"company_id": company_b}, headers=admin)
        assert response.status_code == 200
        assert response.json()["company_id"] == company_a


@pytest.mark.asyncio
async def test_roles_list_is_limited_to_assignable_roles() -> None:
    app = create_app()
    roles = await seed_roles()
    company_id = await create_company()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(
            "/api/masters/roles",
            params={"limit": 50},
            headers=await headers_for("company_admin", company_id=company_id, roles=roles),
        )
        assert response.status_code == 200
        slugs = {item["role_slug"] for item in response.json()["data"]}
        assert slugs == {"vendor", "supervisor", "technician"}

        response = await client.get(
            "/api/masters/roles",
            headers=await headers_for("supervisor", company_id=company_id, roles=roles),
        )
        assert [item["role_slug"] for item in response.json()["data"]] == ["technician"]

        response = await client.get("/api/masters/roles", headers=await super_admin_headers(roles))
        assert response.json()["total"] == 5


@pytest.mark.asyncio
async def test_global_masters_and_company_screen() -> None:
    app = create_app()
    roles = await seed_roles()
    company_id = await create_company()
    admin = await super_admin_headers(roles)
    tenant_admin = await headers_for("company_admin", company_id=company_id, roles=roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/masters/nature-of-work", json={"now_name": " Repair "}, headers=admin)
        assert response.status_code == 201
        assert response.json()["now_name"] == "Repair"

        # Settings is read-only for company admins.
        response = await client.get(
            "/api/masters/nature-of-work", params={"now_status": "true"}, headers=tenant_admin
        )
        assert response.json()["total"] == 1
        response = await client.post(
            "/api/masters/nature-of-work", json={"now_name": "Install"}, headers=tenant_admin
        )
        assert response.status_code == 403
        assert response.json()["message"] == "Forbidden: lacks add on 'Settings'"

        response = await client.post(
            "/api/admin/companies",
            json={"name": " Acme ", "email": "OPS@Acme.test", "phone": "+1 (555) 0100", "gst": "29abc"},
            headers=admin,
        )
        assert response.status_code == 201
        company = response.json()
        assert (company["name"], company["email"], company["phone"], company["gst"]) == (
            "Acme",
            "ops@acme.test",
            "15550100",
            "29ABC",
        )

        response = await client.get("/api/admin/companies", headers=tenant_admin)
        assert response.status_code == 403
        assert response.json()["message"] == "Forbidden: no permission for 'Company'"
