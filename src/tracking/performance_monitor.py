# src/tracking/performance_monitor.py - v1
"""Rolling performance statistics, tuning recommendations and health.

The monitor only observes: it never changes what the service returns.
Latencies are kept in a bounded window; counters cover the whole lifetime
since construction or the last reset().
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from typing import Callable, Sequence

from postguard.tracking.models import HealthStatus, PerformanceMetrics, Recommendation

logger = logging.getLogger(__name__)

LATENCY_WINDOW = 1000
SLOW_REQUEST_MS = 100.0
TARGET_AVERAGE_MS = 50.0
TARGET_CACHE_HIT_RATE = 0.6
MIN_REQUESTS_FOR_HIT_RATE = 50
MEMORY_LIMIT_BYTES = 100 * 1024 * 1024
MAX_SLOW_REQUEST_SHARE = 0.1
MAX_ERROR_RATE = 0.01
MAX_MEDIUM_RECOMMENDATIONS = 2


class PerformanceMonitor:
    """Collects per-request latency, cache outcome and error counts.

    Args:
        window: Number of most recent latencies kept for percentiles.
        clock: Time source in seconds used for uptime (injectable for tests).
    """

    def __init__(
        self,
        window: int = LATENCY_WINDOW,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._latencies: deque[float] = deque(maxlen=window)
        self._start = clock()
        self._request_count = 0
        self._error_count = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._slow_requests = 0

    # --- Recording ---

    def record_processing_time(self, elapsed_ms: float) -> None:
        """Record the latency of one completed request."""
        self._latencies.append(elapsed_ms)
        self._request_count += 1
        if elapsed_ms > SLOW_REQUEST_MS:
            self._slow_requests += 1
            logger.debug("Slow request: %.1fms", elapsed_ms)

    def record_cache_hit(self) -> None:
        self._cache_hits += 1

    def record_cache_miss(self) -> None:
        self._cache_misses += 1

    def record_error(self) -> None:
        self._error_count += 1

    # --- Reporting ---

    def get_metrics(self, memory_usage: int = 0) -> PerformanceMetrics:
        """Current metrics.

        Args:
            memory_usage: Bytes held by the result cache, supplied by the caller.
        """
        latencies = list(self._latencies)
        lookups = self._cache_hits + self._cache_misses
        return PerformanceMetrics(
            request_count=self._request_count,
            average_processing_time=(
                sum(latencies) / len(latencies) if latencies else 0.0
            ),
            p95_processing_time=percentile(latencies, 0.95),
            p99_processing_time=percentile(latencies, 0.99),
            cache_hit_rate=self._cache_hits / lookups if lookups else 0.0,
            memory_usage=memory_usage,
            slow_request_count=self._slow_requests,
            error_rate=(
                self._error_count / self._request_count if self._request_count else 0.0
            ),
        )

    def recommendations(self, memory_usage: int = 0) -> list[Recommendation]:
        """Tuning suggestions derived from the current metrics."""
        metrics = self.get_metrics(memory_usage)
        recs: list[Recommendation] = []

        if (
            metrics.request_count > MIN_REQUESTS_FOR_HIT_RATE
            and metrics.cache_hit_rate < TARGET_CACHE_HIT_RATE
        ):
            recs.append(Recommendation(
                category="cache",
                severity="medium",
                message=f"Low cache hit rate: {metrics.cache_hit_rate:.1%}",
                action="Increase CACHE_MAX_ENTRIES or CACHE_DEFAULT_TTL_SECONDS",
            ))

        if metrics.memory_usage > MEMORY_LIMIT_BYTES:
            recs.append(Recommendation(
                category="memory",
                severity="high",
                message=(
                    f"High cache memory usage: "
                    f"{metrics.memory_usage / 1024 / 1024:.1f}MB"
                ),
                action="Reduce the cache size or run perform_maintenance() more often",
            ))

        if metrics.average_processing_time > TARGET_AVERAGE_MS:
            recs.append(Recommendation(
                category="rules",
                severity="medium",
                message=(
                    f"Slow average processing: {metrics.average_processing_time:.1f}ms "
                    f"(target {TARGET_AVERAGE_MS:.0f}ms)"
                ),
                action="Disable expensive rules via DISABLED_RULES",
            ))

        if (
            metrics.request_count
            and metrics.slow_request_count / metrics.request_count > MAX_SLOW_REQUEST_SHARE
        ):
            recs.append(Recommendation(
                category="preprocessing",
                severity="medium",
                message=(
                    f"{metrics.slow_request_count} slow requests "
                    f"(>{SLOW_REQUEST_MS:.0f}ms)"
                ),
                action="Check input sizes reaching the normalizer",
            ))

        if metrics.error_rate > MAX_ERROR_RATE:
            recs.append(Recommendation(
                category="rules",
                severity="high",
                message=f"High error rate: {metrics.error_rate:.1%}",
                action="Inspect rule failures in the WARNING logs",
            ))

        return recs

    def health_status(self, memory_usage: int = 0) -> HealthStatus:
        """Summarize recommendations into a single health state."""
        return health_from_recommendations(self.recommendations(memory_usage))

    def uptime(self) -> float:
        """Seconds since construction or the last reset()."""
        return self._clock() - self._start

    def summary(self, memory_usage: int = 0) -> str:
        """One-line human-readable summary."""
        m = self.get_metrics(memory_usage)
        return (
            f"requests={m.request_count} avg={m.average_processing_time:.1f}ms "
            f"p95={m.p95_processing_time:.1f}ms p99={m.p99_processing_time:.1f}ms "
            f"cache_hit_rate={m.cache_hit_rate:.1%} errors={m.error_rate:.1%} "
            f"uptime={self.uptime():.0f}s"
        )

    def reset(self) -> None:
        """Drop all samples and counters and restart the uptime clock."""
        self._latencies.clear()
        self._start = self._clock()
        self._request_count = 0
        self._error_count = 0
        self._cache_hits = 0
        self._cache_misses = 0
        self._slow_requests = 0


def percentile(values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: sorted[ceil(n * p) - 1], 0 for no values."""
    if not values:
        return 0.0
    ordered = sorted(values)
    index = min(max(math.ceil(len(ordered) * p) - 1, 0), len(ordered) - 1)
    return ordered[index]


def health_from_recommendations(recs: Sequence[Recommendation]) -> HealthStatus:
    """unhealthy on any high severity, degraded on more than two medium."""
    if any(r.severity == "high" for r in recs):
        return "unhealthy"
    if sum(1 for r in recs if r.severity == "medium") > MAX_MEDIUM_RECOMMENDATIONS:
        return "degraded"
    return "healthy"
