"""Health endpoint tests."""

import pytest

from sso.config import settings


@pytest.mark.asyncio
async def test_health_memory_storage(client, monkeypatch):
    """Nothing external to check with in-memory storage."""
    monkeypatch.setattr(settings, "storage", "memory")

    resp = await client.get("/api/v1/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["server"] == "ok"
    assert data["storage"] == "memory"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_reports_unreachable_redis(client, monkeypatch):
    """Redis was never initialised here, so the service is degraded."""
    import sso.api.health as health

    class _Conn:
        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

        async def execute(self, stmt):
            return None

    class _Engine:
        def connect(self):
            return _Conn()

    monkeypatch.setattr(settings, "storage", "sql")
    monkeypatch.setattr(health, "engine", _Engine())

    resp = await client.get("/api/v1/health")

    data = resp.json()
    assert resp.status_code == 200
    assert data["postgres"] == "ok"
    assert data["redis"].startswith("error:")
    assert data["status"] == "degraded"
