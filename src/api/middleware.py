"""Request tracing middleware.

Logs one structured line per request (method, path, status, duration,
correlation ID) and feeds the in-memory metrics collector. Resource
IDs in the path are collapsed to ``{id}`` so per-path counters stay
bounded.
"""

import re
import time
from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.metrics import get_metrics_collector

logger = structlog.get_logger()

_UUID_SEGMENT = re.compile(
    r"/[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}(?=/|$)"
)


def route_key(path: str) -> str:
    """Metrics key for a request path.

    ``/api/workflows/<uuid>/execute`` -> ``/api/workflows/{id}/execute``
    """
    return _UUID_SEGMENT.sub("/{id}", path)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Structured request logging and metrics.

    For streaming responses the recorded duration covers the time to
    response headers, not the full stream.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Lazy import: src.api.main imports this module
        from src.api.main import get_correlation_id

        start = time.perf_counter()
        metrics = get_metrics_collector()
        metrics.increment_active_requests()
        path = route_key(request.url.path)

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            metrics.record_error(type(e).__name__)
            logger.error(
                "request_error",
                method=request.method,
                path=path,
                duration_ms=round(duration_ms, 2),
                correlation_id=get_correlation_id(),
                error_type=type(e).__name__,
                exc_info=e,
            )
            raise
        finally:
            metrics.decrement_active_requests()

        duration_ms = (time.perf_counter() - start) * 1000
        metrics.record_request(
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        logger.info(
            "request",
            method=request.method,
            path=path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
            correlation_id=get_correlation_id(),
        )
        return response
