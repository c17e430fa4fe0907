"""Prometheus metrics for the cache and upstream forecast requests."""

import logging

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

DURATION_BUCKETS = [0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, 30]


class HubMetrics:
    """Counters and histogram on a registry owned by this instance.

    Recording never raises; metrics must not change returned data.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()
        self.cache_hit = Counter(
            "weatherhub_cache_hit",
            "Cache lookups served from memory",
            ["entry"],
            registry=self.registry,
        )
        self.cache_miss = Counter(
            "weatherhub_cache_miss",
            "Cache lookups that populated from upstream",
            ["entry"],
            registry=self.registry,
        )
        self.forecast_requests = Counter(
            "weatherhub_forecast_requests",
            "Upstream forecast requests issued",
            registry=self.registry,
        )
        self.forecast_failures = Counter(
            "weatherhub_forecast_failures",
            "Upstream forecast requests that failed",
            registry=self.registry,
        )
        self.forecast_request_duration = Histogram(
            "weatherhub_forecast_request_duration_seconds",
            "Duration of successful upstream forecast requests",
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )

    def record_hit(self, entry: str) -> None:
        self._safely(lambda: self.cache_hit.labels(entry=entry).inc())

    def record_miss(self, entry: str) -> None:
        self._safely(lambda: self.cache_miss.labels(entry=entry).inc())

    def record_request(self) -> None:
        self._safely(self.forecast_requests.inc)

    def record_failure(self) -> None:
        self._safely(self.forecast_failures.inc)

    def record_duration(self, seconds: float) -> None:
        self._safely(lambda: self.forecast_request_duration.observe(seconds))

    def value(self, name: str, labels: dict[str, str] | None = None) -> float:
        """Current sample value, 0.0 when the series has not been touched."""
        return self.registry.get_sample_value(name, labels or {}) or 0.0

    def render(self) -> bytes:
        return generate_latest(self.registry)

    @staticmethod
    def _safely(record) -> None:
        try:
            record()
        except Exception:
            logger.warning("Failed to record metric", exc_info=True)
