"""Health endpoint tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from devwars.health import router as health_router


async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_readiness_without_redis(client: AsyncClient) -> None:
    """The database decides readiness; an unconfigured Redis is reported as disabled."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": "ok", "redis": "disabled"}


async def test_version(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": "0.1.0", "environment": "development"}


async def test_readiness_with_redis(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    redis = MagicMock()
    redis.ping = AsyncMock(return_value=True)
    monkeypatch.setattr(health_router, "current_redis", lambda: redis)

    response = await client.get("/ready")
    assert response.json()["checks"]["redis"] == "ok"


async def test_readiness_with_unreachable_redis(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """A Redis outage is reported but does not make the service unready."""
    redis = MagicMock()
    redis.ping = AsyncMock(side_effect=RedisConnectionError("connection refused"))
    monkeypatch.setattr(health_router, "current_redis", lambda: redis)

    response = await client.get("/ready")
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["redis"].startswith("error:")
