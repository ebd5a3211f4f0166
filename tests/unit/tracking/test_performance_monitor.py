# tests/unit/tracking/test_performance_monitor.py - v1
"""Tests for tracking/performance_monitor.py."""

from __future__ import annotations

import pytest

from postguard.tracking.models import Recommendation
from postguard.tracking.performance_monitor import (
    MEMORY_LIMIT_BYTES,
    PerformanceMonitor,
    health_from_recommendations,
    percentile,
)


@pytest.fixture
def monitor(clock) -> PerformanceMonitor:
    return PerformanceMonitor(clock=clock)


def _rec(severity: str) -> Recommendation:
    return Recommendation(category="rules", severity=severity, message="x", action="y")


class TestPercentile:
    def test_empty(self):
        assert percentile([], 0.95) == 0.0

    def test_nearest_rank(self):
        values = [float(v) for v in range(1, 11)]
        assert percentile(values, 0.5) == 5.0
        assert percentile(values, 0.95) == 10.0
        assert percentile(values, 0.99) == 10.0

    def test_single_value(self):
        assert percentile([7.0], 0.99) == 7.0

    def test_unsorted_input(self):
        assert percentile([5.0, 1.0, 3.0], 0.5) == 3.0


class TestMetrics:
    def test_empty(self, monitor):
        metrics = monitor.get_metrics()
        assert metrics.request_count == 0
        assert metrics.average_processing_time == 0.0
        assert metrics.error_rate == 0.0
        assert metrics.cache_hit_rate == 0.0

    def test_counters(self, monitor):
        for ms in (10.0, 20.0, 150.0):
            monitor.record_processing_time(ms)
        monitor.record_cache_hit()
        monitor.record_cache_miss()
        monitor.record_cache_miss()
        monitor.record_error()
        metrics = monitor.get_metrics(memory_usage=2048)
        assert metrics.request_count == 3
        assert metrics.average_processing_time == pytest.approx(60.0)
        assert metrics.slow_request_count == 1
        assert metrics.cache_hit_rate == pytest.approx(1 / 3)
        assert metrics.error_rate == pytest.approx(1 / 3)
        assert metrics.memory_usage == 2048
        assert metrics.p99_processing_time == 150.0

    def test_window_bounded(self, clock):
        monitor = PerformanceMonitor(window=10, clock=clock)
        for _ in range(10):
            monitor.record_processing_time(1000.0)
        for _ in range(10):
            monitor.record_processing_time(1.0)
        metrics = monitor.get_metrics()
        assert metrics.request_count == 20
        assert metrics.average_processing_time == 1.0


class TestRecommendations:
    def test_healthy_when_idle(self, monitor):
        assert monitor.recommendations() == []
        assert monitor.health_status() == "healthy"

    def test_low_hit_rate_needs_volume(self, monitor):
        for _ in range(50):
            monitor.record_processing_time(1.0)
            monitor.record_cache_miss()
        assert monitor.recommendations() == []
        monitor.record_processing_time(1.0)
        recs = monitor.recommendations()
        assert [(r.category, r.severity) for r in recs] == [("cache", "medium")]

    def test_memory_pressure_is_unhealthy(self, monitor):
        recs = monitor.recommendations(memory_usage=MEMORY_LIMIT_BYTES + 1)
        assert [(r.category, r.severity) for r in recs] == [("memory", "high")]
        assert monitor.health_status(memory_usage=MEMORY_LIMIT_BYTES + 1) == "unhealthy"

    def test_slow_and_errors(self, monitor):
        for _ in range(5):
            monitor.record_processing_time(200.0)
        monitor.record_error()
        recs = {(r.category, r.severity) for r in monitor.recommendations()}
        assert recs == {
            ("rules", "medium"), ("preprocessing", "medium"), ("rules", "high"),
        }
        assert monitor.health_status() == "unhealthy"


class TestHealthFromRecommendations:
    def test_two_medium_still_healthy(self):
        assert health_from_recommendations([_rec("medium"), _rec("medium")]) == "healthy"

    def test_three_medium_degraded(self):
        assert health_from_recommendations([_rec("medium")] * 3) == "degraded"

    def test_any_high_unhealthy(self):
        assert health_from_recommendations([_rec("low"), _rec("high")]) == "unhealthy"


class TestLifecycle:
    def test_uptime_and_reset(self, monitor, clock):
        monitor.record_processing_time(5.0)
        clock.advance(30)
        assert monitor.uptime() == pytest.approx(30)
        monitor.reset()
        assert monitor.uptime() == 0
        assert monitor.get_metrics().request_count == 0

    def test_summary(self, monitor):
        monitor.record_processing_time(12.0)
        summary = monitor.summary()
        assert "requests=1" in summary
        assert "avg=12.0ms" in summary


class TestRecommendationContent:
    def test_every_recommendation_carries_an_action(self, monitor):
        for _ in range(5):
            monitor.record_processing_time(200.0)
        monitor.record_error()
        recs = monitor.recommendations(memory_usage=MEMORY_LIMIT_BYTES + 1)
        assert len(recs) == 4
        assert all(r.action and r.message for r in recs)
