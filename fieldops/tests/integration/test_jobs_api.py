from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from fieldops.apps.api.main import create_app
from fieldops.domain.models import JobStatus, JobStatusHistory
from fieldops.persistence.db import SessionLocal
from fieldops.tests.utils.auth import create_company, headers_for, seed_roles


async def _create_client(client: AsyncClient, headers: dict[str, str], first_name: str = "Ada") -> str:
    response = await client.post("/api/admin/clients", json={"first_name": first_name}, headers=headers)
    assert response.status_code == 201
    return response.json()["client_id"]


async def _history_count(job_id: str) -> int:
    async with SessionLocal() as session:
        result = await session.execute(
            select(func.count()).select_from(JobStatusHistory).where(JobStatusHistory.job_id == job_id)
        )
        return int(result.scalar_one())


@pytest.mark.asyncio
async def test_job_create_derives_reference_and_duration() -> None:
    app = create_app()
    company_id = await create_company()
    headers = await headers_for("company_admin", company_id=company_id)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client_id = await _create_client(client, headers)
        response = await client.post(
            "/api/jobs",
            json={
                "client_id": client_id,
                "estimated_hours": 2,
                "estimated_minutes": "15",
                "scheduled_at": "2026-10-20T09:00:00Z",
                "job_description": "  Replace valve ",
            },
            headers=headers,
        )
        assert response.status_code == 201
        job = response.json()
        assert job["reference_number"].startswith("JOB-")
        assert job["estimated_duration"] == 135
        assert job["job_description"] == "Replace valve"
        assert job["company_id"] == company_id

        response = await client.post(
            "/api/jobs",
            json={"client_id": client_id, "reference_number": job["reference_number"].lower()},
            headers=headers,
        )
        assert response.status_code == 409

        response = await client.put(
            f"/api/jobs/{job['job_id']}", json={"estimated_days": 1}, headers=headers
        )
        assert response.json()["estimated_duration"] == 24 * 60 + 135


@pytest.mark.asyncio
async def test_job_requires_a_client_of_the_same_company() -> None:
    app = create_app()
    roles = await seed_roles()
    company_a = await create_company()
    company_b = await create_company()
    alpha = await headers_for("company_admin", company_id=company_a, roles=roles)
    beta = await headers_for("company_admin", company_id=company_b, roles=roles)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        foreign_client = await _create_client(client, beta)
        response = await client.post("/api/jobs", json={"client_id": foreign_client}, headers=alpha)
        assert response.status_code == 400
        assert response.json()["errors"] == {"client_id": "Client not found in this company"}

        response = await client.post("/api/jobs", json={}, headers=alpha)
        assert response.status_code == 400
        assert response.json()["errors"] == {"client_id": "Client is required"}


@pytest.mark.asyncio
async def test_scheduled_window_filter() -> None:
    app = create_app()
    company_id = await create_company()
    headers = await headers_for("company_admin", company_id=company_id)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client_id = await _create_client(client, headers)
        for day in ("2026-10-20T09:00:00Z", "2026-10-25T09:00:00Z"):
            response = await client.post(
                "/api/jobs", json={"client_id": client_id, "scheduled_at": day}, headers=headers
            )
            assert response.status_code == 201

        response = await client.get("/api/jobs", params={"from": "2026-10-21T00:00:00"}, headers=headers)
        assert response.json()["total"] == 1
        response = await client.get(
            "/api/jobs",
            params={"from": "2026-10-19T00:00:00", "to": "2026-10-26T00:00:00"},
            headers=headers,
        )
        assert response.json()["total"] == 2
        response = await client.get("/api/jobs", params={"from": "next tuesday"}, headers=headers)
        assert response.status_code == 400


@pytest.mark.asyncio
async def test_job_delete_cascades_status_history() -> None:
    app = create_app()
    company_id = await create_company()
    headers = await headers_for("company_admin", company_id=company_id)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client_id = await _create_client(client, headers)
        job = (await client.post("/api/jobs", json={"client_id": client_id}, headers=headers)).json()

        async with SessionLocal() as session:
            status = JobStatus(job_status_title="Scheduled")
            session.add(status)
            await session.flush()
            session.add_all(
                [
                    JobStatusHistory(job_id=job["job_id"], job_status_id=status.job_status_id),
                    JobStatusHistory(job_id=job["job_id"], job_status_id=status.job_status_id),
                ]
            )
            await session.commit()
        assert await _history_count(job["job_id"]) == 2

        response = await client.delete(f"/api/jobs/{job['job_id']}", headers=headers)
        assert response.status_code == 200
        assert await _history_count(job["job_id"]) == 0
        assert (await client.get(f"/api/jobs/{job['job_id']}", headers=headers)).status_code == 404


@pytest.mark.asyncio
async def test_referenced_client_cannot_be_deleted() -> None:
    app = create_app()
    company_id = await create_company()
    headers = await headers_for("company_admin", company_id=company_id)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client_id = await _create_client(client, headers)
        job = (await client.post("/api/jobs", json={"client_id": client_id}, headers=headers)).json()

        response = await client.delete(f"/api/admin/clients/{client_id}", headers=headers)
        assert response.status_code == 409
        assert response.json()["message"] == "Cannot delete: record is referenced by other data"

        assert (await client.get(f"/api/admin/clients/{client_id}", headers=headers)).status_code == 200
        assert (await client.get(f"/api/jobs/{job['job_id']}", headers=headers)).status_code == 200
