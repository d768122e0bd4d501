"""
HTTP endpoint tests: status code mapping for every repository outcome,
for both backends, plus the health and metrics routes.
"""
import logging

import pytest
from httpx import ASGITransport, AsyncClient

from catalog.dependencies import get_repository
from catalog.errors import ServerError
from catalog.main import BACKENDS, app, build_repository, create_app
from catalog.repositories import InMemoryRepository, SharedRepository, SqlRepository

from tests.conftest import CONTACT_US, LOCATE_US


# ---------------------------------------------------------------------------
# GET /services
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_services(async_client: AsyncClient):
    resp = await async_client.get("/services")
    assert resp.status_code == 200
    assert resp.json() == [LOCATE_US.model_dump(), CONTACT_US.model_dump()]


@pytest.mark.asyncio
async def test_list_services_empty_catalog(client_for):
    async with client_for(InMemoryRepository()) as client:
        resp = await client.get("/services")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_list_services_sql_backend(client_for, seeded_sql_repo: SqlRepository):
    async with client_for(seeded_sql_repo) as client:
        resp = await client.get("/services")
    assert resp.status_code == 200
    assert {s["id"] for s in resp.json()} == {1, 2}
    assert int(resp.headers["x-query-count"]) >= 1


@pytest.mark.asyncio
async def test_list_services_unreachable_store_returns_500(client_for, unreachable_repo, caplog):
    async with client_for(unreachable_repo) as client:
        with caplog.at_level(logging.ERROR, logger="catalog.routers.services"):
            resp = await client.get("/services")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Service catalog unavailable"}
    assert any(r.name == "catalog.routers.services" for r in caplog.records)


# ---------------------------------------------------------------------------
# GET /service/{id}
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_get_service(async_client: AsyncClient):
    resp = await async_client.get("/service/1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Locate Us"
    assert body == LOCATE_US.model_dump()


@pytest.mark.asyncio
async def test_get_service_not_found(async_client: AsyncClient, caplog):
    """A missing id is a 404 and is not logged as a fault."""
    with caplog.at_level(logging.WARNING):
        resp = await async_client.get("/service/3")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Service not found"}
    assert not [r for r in caplog.records if r.name.startswith("catalog")]


@pytest.mark.asyncio
async def test_get_service_sql_backend(client_for, seeded_sql_repo: SqlRepository):
    async with client_for(seeded_sql_repo) as client:
        found = await client.get("/service/2")
        missing = await client.get("/service/3")
    assert found.status_code == 200
    assert found.json() == CONTACT_US.model_dump()
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_get_service_empty_table_is_404(client_for, sql_repo: SqlRepository):
    async with client_for(sql_repo) as client:
        resp = await client.get("/service/1")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_service_unreachable_store_is_500_not_404(client_for, unreachable_repo):
    async with client_for(unreachable_repo) as client:
        resp = await client.get("/service/1")
    assert resp.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/service/-1", "/service/abc", "/service/1.5", f"/service/{2**63}"])
async def test_get_service_rejects_non_unsigned_ids(async_client: AsyncClient, path: str):
    resp = await async_client.get(path)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_service_zero_is_a_valid_id(async_client: AsyncClient):
    resp = await async_client.get("/service/0")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Health, metrics, headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["backend"] == "custom"


@pytest.mark.asyncio
async def test_timing_headers(async_client: AsyncClient):
    resp = await async_client.get("/services")
    assert float(resp.headers["x-response-time-ms"]) >= 0
    assert resp.headers["x-query-count"] == "0"


@pytest.mark.asyncio
async def test_metrics_counts_requests_and_faults(client_for, unreachable_repo):
    async with client_for(unreachable_repo) as client:
        await client.get("/services")
        await client.get("/health")
        resp = await client.get("/metrics")
    assert resp.status_code == 200
    metrics = resp.json()
    assert metrics["total_requests"] == 2
    assert metrics["server_faults"] == 1
    assert metrics["status_counts"] == {"500": 1, "200": 1}
    assert metrics["cache_info"]["enabled"] is False


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------

def test_build_repository_memory():
    assert isinstance(build_repository("memory"), InMemoryRepository)


@pytest.mark.asyncio
async def test_build_repository_sql():
    repo = build_repository("SQL")
    assert isinstance(repo, SqlRepository)
    await repo.close()


def test_build_repository_unknown_backend():
    with pytest.raises(ValueError, match="unknown repository backend"):
        build_repository("mongo")
    assert BACKENDS == ("memory", "sql")


@pytest.mark.asyncio
async def test_default_app_serves_default_catalog():
    app = create_app(backend="memory")
    assert isinstance(app.state.repository, SharedRepository)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/service/1")
        health = await client.get("/health")
    assert resp.json()["name"] == "Locate Us"
    assert health.json()["backend"] == "memory"


@pytest.mark.asyncio
async def test_app_shutdown_leaves_borrowed_repository_open(seeded_sql_repo: SqlRepository):
    app = create_app(repository=seeded_sql_repo)
    await app.state.repository.close()
    assert await seeded_sql_repo.get(1) == LOCATE_US


@pytest.mark.asyncio
async def test_repository_dependency_override():
    """Any object with list/get coroutines can be injected."""
    class Failing:
        async def list(self):
            raise ServerError("boom")

        async def get(self, service_id):
            raise ServerError("boom")

    app.dependency_overrides[get_repository] = lambda: Failing()
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            resp = await client.get("/service/1")
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 500
