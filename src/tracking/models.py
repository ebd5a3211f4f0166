# src/tracking/models.py - v1
"""Tracking domain models: PerformanceMetrics, Recommendation, HealthStatus."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from postguard.core.models import Severity

RecommendationCategory = Literal["cache", "memory", "rules", "preprocessing"]
HealthStatus = Literal["healthy", "degraded", "unhealthy"]


class PerformanceMetrics(BaseModel):
    """Snapshot of the rolling performance counters."""

    request_count: int = 0
    average_processing_time: float = 0.0
    p95_processing_time: float = 0.0
    p99_processing_time: float = 0.0
    cache_hit_rate: float = 0.0
    memory_usage: int = 0
    slow_request_count: int = 0
    error_rate: float = 0.0


class Recommendation(BaseModel):
    """One tuning suggestion derived from the current metrics.

    ``message`` states what was observed; ``action`` says what to change.
    """

    category: RecommendationCategory
    severity: Severity
    message: str
    action: str
