"""Smoke tests for health and app wiring."""

import pytest
import uvicorn
from httpx import AsyncClient

from gatekeeper import main


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"


async def test_readiness_reports_backends(client: AsyncClient) -> None:
    """GET /api/v1/health/ready reports the memory backend and no distributed cache."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["database_backend"] == "memory"
    assert data["distributed_cache"] is False


async def test_unknown_route_returns_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"


def test_run_serves_the_app_with_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    main.run()
    assert len(calls) == 1
    target, kwargs = calls[0]
    assert target == "gatekeeper.main:app"
    assert set(kwargs) == {"host", "port"}
