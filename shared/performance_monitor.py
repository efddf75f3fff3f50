"""
Request performance monitoring.
Per-endpoint counters and timings fed by the HTTP middleware.
"""
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ERROR_RATE_UNHEALTHY = 0.1
AVERAGE_RESPONSE_DEGRADED_MS = 100.0


class EndpointMetrics:
    """Counters for a single endpoint."""

    def __init__(self):
        self.request_count = 0
        self.error_count = 0
        self.total_time_ms = 0.0
        self.min_time_ms: Optional[float] = None
        self.max_time_ms = 0.0
        self.last_request: Optional[datetime] = None

    def record(self, duration_ms: float, is_error: bool, now: datetime):
        self.request_count += 1
        self.total_time_ms += duration_ms
        if self.min_time_ms is None or duration_ms < self.min_time_ms:
            self.min_time_ms = duration_ms
        if duration_ms > self.max_time_ms:
            self.max_time_ms = duration_ms
        if is_error:
            self.error_count += 1
        self.last_request = now

    def to_dict(self) -> Dict[str, Any]:
        average = self.total_time_ms / self.request_count if self.request_count else 0.0
        error_rate = self.error_count / self.request_count if self.request_count else 0.0
        return {
            "request_count": self.request_count,
            "average_time_ms": average,
            "min_time_ms": self.min_time_ms or 0.0,
            "max_time_ms": self.max_time_ms,
            "error_count": self.error_count,
            "error_rate": error_rate,
            "last_request": self.last_request.isoformat().replace("+00:00", "Z") if self.last_request else None,
        }


class PerformanceMonitor:
    """
    Thread-safe request metrics.

    Health levels:
    - unhealthy: error rate above 10%
    - degraded: average response time above 100 ms
    - healthy otherwise
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._start_time = time.monotonic()
        self._endpoints: Dict[str, EndpointMetrics] = {}
        self._total_requests = 0
        self._total_errors = 0
        self._total_time_ms = 0.0

    def record_request(self, endpoint: str, duration_ms: float, is_error: bool = False):
        now = datetime.now(timezone.utc)
        with self._lock:
            metrics = self._endpoints.get(endpoint)
            if metrics is None:
                metrics = self._endpoints[endpoint] = EndpointMetrics()
            metrics.record(duration_ms, is_error, now)

            self._total_requests += 1
            self._total_time_ms += duration_ms
            if is_error:
                self._total_errors += 1

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self._start_time

    def average_response_ms(self) -> float:
        with self._lock:
            return self._total_time_ms / self._total_requests if self._total_requests else 0.0

    def error_rate(self) -> float:
        with self._lock:
            return self._total_errors / self._total_requests if self._total_requests else 0.0

    def get_metrics(self) -> Dict[str, Any]:
        uptime = self.uptime_seconds
        with self._lock:
            total = self._total_requests
            average = self._total_time_ms / total if total else 0.0
            error_rate = self._total_errors / total if total else 0.0
            endpoints = {name: m.to_dict() for name, m in self._endpoints.items()}

        requests_per_minute = total / (uptime / 60) if uptime > 0 else 0.0

        return {
            "uptime_seconds": uptime,
            "total_requests": total,
            "average_response_ms": average,
            "error_rate": error_rate,
            "requests_per_minute": requests_per_minute,
            "endpoints": endpoints,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    def get_health_status(self) -> str:
        if self.error_rate() > ERROR_RATE_UNHEALTHY:
            return "unhealthy"
        if self.average_response_ms() > AVERAGE_RESPONSE_DEGRADED_MS:
            return "degraded"
        return "healthy"

    def reset(self):
        with self._lock:
            self._start_time = time.monotonic()
            self._endpoints.clear()
            self._total_requests = 0
            self._total_errors = 0
            self._total_time_ms = 0.0
