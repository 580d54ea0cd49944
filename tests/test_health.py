"""Health endpoint tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from rigrent import redis_client


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_readiness_without_redis(client: AsyncClient) -> None:
    """Redis is optional: the sweep only uses it for pushes."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["redis"] == "disabled"


@pytest.mark.asyncio
async def test_readiness_redis_down(client: AsyncClient) -> None:
    mock_redis = MagicMock()
    mock_redis.ping = AsyncMock(side_effect=ConnectionError("refused"))
    redis_client._client = mock_redis  # noqa: SLF001

    response = await client.get("/ready")
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["redis"].startswith("error:")


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns version and environment."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"
