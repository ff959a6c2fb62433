from __future__ import annotations

from dataclasses import dataclass
from threading import Lock


@dataclass
class EndpointMetric:
    total_requests: int = 0
    total_duration_ms: float = 0.0
    error_count: int = 0


class InMemoryRequestMetrics:
    def __init__(self) -> None:
        self._metrics: dict[tuple[str, str], EndpointMetric] = {}
        self._page_metrics: dict[str, EndpointMetric] = {}
        self._lock = Lock()

    def observe(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        duration_ms: float,
        page_id: str | None = None,
    ) -> None:
        key = (endpoint, method)
        with self._lock:
            metric = self._metrics.setdefault(key, EndpointMetric())
            _record(metric, status_code, duration_ms)
            if page_id:
                _record(self._page_metrics.setdefault(page_id, EndpointMetric()), status_code, duration_ms)

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                f"{method} {endpoint}": _summarize(metric)
                for (endpoint, method), metric in self._metrics.items()
            }

    def snapshot_per_page(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {page_id: _summarize(metric) for page_id, metric in self._page_metrics.items()}

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()
            self._page_metrics.clear()


def _record(metric: EndpointMetric, status_code: int, duration_ms: float) -> None:
    metric.total_requests += 1
    metric.total_duration_ms += duration_ms
    if status_code >= 400:
        metric.error_count += 1


def _summarize(metric: EndpointMetric) -> dict[str, float | int]:
    avg = metric.total_duration_ms / metric.total_requests if metric.total_requests else 0.0
    return {
        "total_requests": metric.total_requests,
        "total_duration_ms": round(metric.total_duration_ms, 2),
        "avg_duration_ms": round(avg, 2),
        "error_count": metric.error_count,
    }


request_metrics = InMemoryRequestMetrics()
