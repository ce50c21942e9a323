"""In-process request and generation metrics served at ``/api/metrics``.

Counters live in memory and start from zero on every restart. Latency
percentiles are computed over a sliding window of recent requests.
"""

import time
from collections import Counter, deque
from threading import Lock
from typing import Any

_PERCENTILES = {"p50_ms": 0.50, "p95_ms": 0.95, "p99_ms": 0.99}
_TOP_PATHS = 20

_started_at = time.time()


def _latency_summary(samples: list[float]) -> dict[str, float]:
    if not samples:
        return {key: 0.0 for key in (*_PERCENTILES, "min_ms", "max_ms", "avg_ms")}
    ordered = sorted(samples)
    summary = {key: round(ordered[int(len(ordered) * q)], 2) for key, q in _PERCENTILES.items()}
    summary["min_ms"] = round(ordered[0], 2)
    summary["max_ms"] = round(ordered[-1], 2)
    summary["avg_ms"] = round(sum(ordered) / len(ordered), 2)
    return summary


class MetricsCollector:
    """Thread-safe counters for requests and execution streams.

    A generation is one execution stream; its outcome is ``completed``,
    ``error`` or ``disconnected``.
    """

    def __init__(self, window_size: int = 1000):
        self._lock = Lock()
        self._latencies: deque[float] = deque(maxlen=window_size)
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._requests = 0
            self._by_status: Counter[str] = Counter()
            self._by_path: Counter[str] = Counter()
            self._by_route: Counter[str] = Counter()
            self._latencies.clear()
            self._errors = 0
            self._errors_by_type: Counter[str] = Counter()
            self._active = 0
            self._generations_by_agent: Counter[str] = Counter()
            self._generations_by_outcome: Counter[str] = Counter()

    def record_request(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        """Count a finished request; 4xx and 5xx also count as errors."""
        with self._lock:
            self._requests += 1
            self._by_status[str(status_code)] += 1
            self._by_path[path] += 1
            self._by_route[f"{method} {path}"] += 1
            self._latencies.append(duration_ms)
            if status_code >= 400:
                self._errors += 1

    def record_error(self, error_type: str) -> None:
        """Count an exception that escaped the route."""
        with self._lock:
            self._errors += 1
            self._errors_by_type[error_type] += 1

    def increment_active_requests(self) -> None:
        with self._lock:
            self._active += 1

    def decrement_active_requests(self) -> None:
        with self._lock:
            self._active = max(0, self._active - 1)

    def record_generation(self, agent_type: str, outcome: str) -> None:
        with self._lock:
            self._generations_by_agent[agent_type] += 1
            self._generations_by_outcome[outcome] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Snapshot of every counter as plain JSON-ready data."""
        with self._lock:
            return {
                "requests": {
                    "total": self._requests,
                    "by_status": dict(self._by_status),
                    "by_path": dict(self._by_path.most_common(_TOP_PATHS)),
                    "by_method_path": dict(self._by_route.most_common(_TOP_PATHS)),
                },
                "latency": _latency_summary(list(self._latencies)),
                "errors": {
                    "total": self._errors,
                    "by_type": dict(self._errors_by_type),
                },
                "active_requests": self._active,
                "generations": {
                    "by_agent": dict(self._generations_by_agent),
                    "by_outcome": dict(self._generations_by_outcome),
                },
                "uptime_seconds": round(time.time() - _started_at, 2),
            }


_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Process-wide collector shared by the middleware and the SSE relay."""
    global _collector
    if _collector is None:
        _collector = MetricsCollector()
    return _collector
