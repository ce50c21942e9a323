"""Unit tests for System API routes.

GET /health, /ready, /metrics and /stats with the session patched at
the route module.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from tests.helpers.fakes import session_factory_for


def _make_test_app():
    """Create a minimal FastAPI app with the system router."""
    from fastapi import FastAPI

    from src.api.routes.system import router

    app = FastAPI()
    app.include_router(router, prefix="/api")
    return app


@pytest.fixture
async def system_client():
    async with AsyncClient(
        transport=ASGITransport(app=_make_test_app()),
        base_url="http://test",
    ) as client:
        yield client


@pytest.mark.asyncio
class TestHealthCheck:
    async def test_health_check_returns_healthy(self, system_client):
        response = await system_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))


@pytest.mark.asyncio
class TestReadinessCheck:
    async def test_ready_when_db_available(self, system_client, mock_db_session):
        with patch("src.api.routes.system.get_session", session_factory_for(mock_db_session)):
            response = await system_client.get("/api/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_503_when_db_unavailable(self, system_client):
        @asynccontextmanager
        async def _broken_session():
            session = AsyncMock()
            session.execute = AsyncMock(side_effect=OSError("Connection refused"))
            yield session

        with patch("src.api.routes.system.get_session", _broken_session):
            response = await system_client.get("/api/ready")

        assert response.status_code == 503
        assert "database unavailable" in response.json()["detail"].lower()


@pytest.mark.asyncio
class TestMetrics:
    async def test_returns_collector_snapshot(self, system_client):
        snapshot = {
            "requests": {"total": 3},
            "generations": {"by_agent": {"analyst": 2}, "by_outcome": {"completed": 2}},
        }
        collector = MagicMock()
        collector.get_metrics = MagicMock(return_value=snapshot)

        with patch("src.api.routes.system.get_metrics_collector", return_value=collector):
            response = await system_client.get("/api/metrics")

        assert response.status_code == 200
        assert response.json() == snapshot


@pytest.mark.asyncio
class TestStats:
    async def test_camel_case_counters(self, system_client, mock_db_session):
        with (
            patch("src.api.routes.system.get_session", session_factory_for(mock_db_session)),
            patch("src.api.routes.system.WorkflowRepository") as cls,
        ):
            cls.return_value.stats = AsyncMock(
                return_value={
                    "total_workflows": 5,
                    "completed_workflows": 2,
                    "documents_generated": 9,
                }
            )
            response = await system_client.get("/api/stats")

        assert response.json() == {
            "totalWorkflows": 5,
            "completedWorkflows": 2,
            "documentsGenerated": 9,
        }
