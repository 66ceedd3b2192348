"""Liveness, readiness and version probes."""

import pytest
from httpx import AsyncClient


class TestProbes:
    """Probes need no token and are never rate limited."""

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_readiness_reports_each_dependency(self, client: AsyncClient) -> None:
        """The test app has a database but no Redis and no started collaborators."""
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["checks"]["database"] == "ok"
        assert data["checks"]["redis"].startswith("error")
        assert data["status"] == "degraded"
        assert data["collaborators"] == {"status": "not initialized"}

    @pytest.mark.asyncio
    async def test_version(self, client: AsyncClient) -> None:
        data = (await client.get("/version")).json()
        assert data["version"] == "0.1.0"
        assert data["environment"]
