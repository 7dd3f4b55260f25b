"""Health endpoint tests."""

import pytest


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint should return server status, version and database check."""
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_health_needs_no_token(client):
    """Health is an open route — no cookie, no Authorization header."""
    resp = await client.get("/health")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_health_reports_backend(client, app):
    data = (await client.get("/health")).json()
    assert data["backend"] == app.state.engine.dialect.name


@pytest.mark.asyncio
async def test_health_degraded_when_database_down(app, client, monkeypatch):
    """An unreachable database is a 503 that names the error class only."""
    from sqlalchemy.exc import OperationalError

    class UnreachableEngine:
        dialect = app.state.engine.dialect

        def connect(self):
            raise OperationalError("SELECT 1", {}, Exception("password=hunter2"))

    monkeypatch.setattr(app.state, "engine", UnreachableEngine())
    resp = await client.get("/health")
    assert resp.status_code == 503
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["database"] == "error: OperationalError"
    assert "hunter2" not in resp.text
