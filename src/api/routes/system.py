"""Liveness, readiness, metrics and the dashboard counters.

``/health`` never touches the database; ``/ready`` does. ``/metrics``
is exempt from rate limiting because monitors poll it.
"""

import asyncio
import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy import text

from src import __version__
from src.api.metrics import get_metrics_collector
from src.api.rate_limit import limiter
from src.api.schemas import (
    ComponentHealth,
    HealthResponse,
    HealthStatus,
    StatsResponse,
)
from src.dal import WorkflowRepository
from src.settings import get_settings
from src.storage import get_session

logger = logging.getLogger(__name__)

router = APIRouter()

DB_PING_TIMEOUT_S = 5.0


def _healthy() -> HealthResponse:
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(UTC),
        version=__version__,
    )


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    """200 while the process is serving requests."""
    return _healthy()


@router.get("/ready", response_model=HealthResponse, summary="Readiness probe")
async def readiness_check() -> HealthResponse:
    """200 once the workflow store answers, 503 otherwise."""
    database = await _ping_database()
    if database.status is HealthStatus.UNHEALTHY:
        raise HTTPException(status_code=503, detail=f"Not ready: {database.message}")
    return _healthy()


@router.get("/metrics", summary="Request and generation metrics")
@limiter.exempt
async def get_metrics(request: Request) -> dict:
    return get_metrics_collector().get_metrics()


@router.get("/stats", response_model=StatsResponse)
async def get_stats() -> StatsResponse:
    """Total workflows, completed workflows and generated documents."""
    async with get_session() as session:
        stats = await WorkflowRepository(session).stats()
    return StatsResponse(**stats)


async def _ping_database() -> ComponentHealth:
    """Run ``SELECT 1`` against the store, bounded by DB_PING_TIMEOUT_S."""
    started = time.perf_counter()
    status, message = HealthStatus.HEALTHY, "PostgreSQL connected"
    try:
        async with asyncio.timeout(DB_PING_TIMEOUT_S):
            async with get_session() as session:
                await session.execute(text("SELECT 1"))
    except TimeoutError:
        logger.error("Database ping timed out after %.1fs", DB_PING_TIMEOUT_S)
        status, message = HealthStatus.UNHEALTHY, "database unavailable (timeout)"
    except Exception as e:
        logger.error("Database ping failed: %s", e, exc_info=True)
        status = HealthStatus.UNHEALTHY
        message = f"database unavailable ({e})" if get_settings().debug else "database unavailable"

    return ComponentHealth(
        name="database",
        status=status,
        message=message,
        latency_ms=(time.perf_counter() - started) * 1000,
    )
