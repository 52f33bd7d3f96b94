"""Health check endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "specforge-api"
    assert data["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


@pytest.mark.asyncio
async def test_readiness_checks_database(client):
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert "X-Trace-Id" in response.headers


@pytest.mark.asyncio
async def test_trace_id_echoed_when_well_formed(client):
    response = await client.get("/api/v1/health", headers={"X-Trace-Id": "trc_from_caller"})
    assert response.headers["X-Trace-Id"] == "trc_from_caller"


@pytest.mark.asyncio
async def test_malformed_trace_id_replaced(client):
    response = await client.get("/api/v1/health", headers={"X-Trace-Id": "bad id with spaces"})
    assert response.headers["X-Trace-Id"].startswith("trc_")
