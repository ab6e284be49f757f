"""HTTP-level tests for the appeal and admin routes, backed by in-memory fakes."""

from __future__ import annotations

import httpx
import pytest

from appeal_engine.adapters.persistence.database import get_session
from appeal_engine.domain.value_objects.enums import AppealCategory
from appeal_engine.infrastructure.api.dependencies import get_expertise_repo, get_workload_repo
from appeal_engine.main import create_app


class FakeSession:
    def __init__(self):
        self.commits = 0

    async def commit(self):
        self.commits += 1


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(workload_repo, expertise_repo, session):
    app = create_app()

    async def _session():
        yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_workload_repo] = lambda: workload_repo
    app.dependency_overrides[get_expertise_repo] = lambda: expertise_repo
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


# ─── Appeals ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_assign_endpoint(client, workload_repo, session):
    workload_repo.add(1)

    async with client:
        resp = await client.post("/api/appeals/77/assign", json={"category": "scholarship"})

    assert resp.status_code == 200
    assert resp.json() == {
        "ticket_id": 77, "outcome": "assigned", "admin_id": 1, "degraded": False,
    }
    assert session.commits == 1


@pytest.mark.asyncio
async def test_assign_endpoint_no_candidate(client):
    async with client:
        resp = await client.post("/api/appeals/78/assign", json={"category": "events"})

    assert resp.status_code == 200
    assert resp.json()["outcome"] == "no_candidate"
    assert resp.json()["admin_id"] is None


@pytest.mark.asyncio
async def test_assign_endpoint_rejects_unknown_category(client):
    async with client:
        resp = await client.post("/api/appeals/79/assign", json={"category": "parking"})

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_close_endpoint(client, workload_repo):
    workload_repo.add(1, active=1)

    async with client:
        resp = await client.post(
            "/api/appeals/80/close",
            json={"admin_id": 1, "category": "dormitory", "outcome": "successful"},
        )

    assert resp.status_code == 200
    body = resp.json()
    assert body["successful_resolutions"] == 1
    assert body["total_resolutions"] == 1
    assert workload_repo.rows[1].active_appeals_count == 0


@pytest.mark.asyncio
async def test_close_endpoint_unknown_admin(client, session):
    async with client:
        resp = await client.post(
            "/api/appeals/81/close",
            json={"admin_id": 5, "category": "dormitory", "outcome": "unsuccessful"},
        )

    assert resp.status_code == 404
    assert session.commits == 0


@pytest.mark.asyncio
async def test_reassign_endpoint(client, workload_repo):
    workload_repo.add(1, active=1)
    workload_repo.add(2)

    async with client:
        resp = await client.post(
            "/api/appeals/82/reassign", json={"from_admin_id": 1, "to_admin_id": 2}
        )

    assert resp.json()["admin_id"] == 2
    assert workload_repo.rows[1].active_appeals_count == 0


@pytest.mark.asyncio
async def test_store_failure_maps_to_503(client, workload_repo):
    workload_repo.add(1, active=1)
    workload_repo.fail_reads = 1

    async with client:
        resp = await client.post(
            "/api/appeals/83/reassign", json={"from_admin_id": 1, "to_admin_id": 2}
        )

    assert resp.status_code == 503


# ─── Admins ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_register_and_read_admin(client, workload_repo):
    async with client:
        created = await client.post("/api/admins/9")
        fetched = await client.get("/api/admins/9")

    assert created.status_code == 200
    assert fetched.json()["active_appeals_count"] == 0
    assert 9 in workload_repo.rows


@pytest.mark.asyncio
async def test_unknown_admin_404(client):
    async with client:
        resp = await client.get("/api/admins/404")

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_set_experience_level_endpoint(client, workload_repo, expertise_repo):
    workload_repo.add(3)

    async with client:
        ok = await client.put("/api/admins/3/expertise/events", json={"experience_level": 4})
        bad = await client.put("/api/admins/3/expertise/events", json={"experience_level": 7})

    assert ok.status_code == 200
    assert ok.json()["experience_level"] == 4
    assert bad.status_code == 422
    assert expertise_repo.rows[(3, AppealCategory.EVENTS)].experience_level == 4


@pytest.mark.asyncio
async def test_stats_endpoint(client, workload_repo):
    workload_repo.add(1, active=3)
    workload_repo.add(2, active=1, available=False)

    async with client:
        resp = await client.get("/api/admins/stats")

    body = resp.json()
    assert body["total_admins"] == 2
    assert body["available_admins"] == 1
    assert body["total_active_appeals"] == 4
    assert body["most_loaded"]["admin_id"] == 1


@pytest.mark.asyncio
async def test_list_admins_by_category(client, workload_repo, expertise_repo):
    workload_repo.add(1)
    workload_repo.add(2)
    expertise_repo.add(2, AppealCategory.DORMITORY, level=3)

    async with client:
        resp = await client.get("/api/admins", params={"category": "dormitory"})
        everyone = await client.get("/api/admins")

    assert resp.json()["total"] == 1
    assert resp.json()["admins"][0]["admin_id"] == 2
    assert resp.json()["admins"][0]["experience_level"] == 3
    assert everyone.json()["total"] == 2
