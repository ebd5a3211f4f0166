# src/api/models.py - v1
"""API-level models: ServiceStats, ServiceHealth, MaintenanceReport."""

from __future__ import annotations

from pydantic import BaseModel, Field

from postguard.cache.models import CacheStats, StorageStats
from postguard.engine.detection_engine import EngineStats
from postguard.tracking.models import HealthStatus, PerformanceMetrics, Recommendation

MAX_STATS_RECOMMENDATIONS = 5


class ServiceHealth(BaseModel):
    """Health block of ServiceStats."""

    status: HealthStatus = "healthy"
    recommendations: list[Recommendation] = Field(
        default_factory=list, max_length=MAX_STATS_RECOMMENDATIONS,
    )
    uptime_seconds: float = 0.0


class ServiceStats(BaseModel):
    """Return value of SpamDetectionService.stats()."""

    cache: CacheStats = Field(default_factory=CacheStats)
    storage: StorageStats | None = None
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    engine: EngineStats
    health: ServiceHealth = Field(default_factory=ServiceHealth)
    summary: str = ""


class MaintenanceReport(BaseModel):
    """Return value of SpamDetectionService.perform_maintenance()."""

    cache_cleanup: int = 0
    storage_cleanup: int = 0
    recommendations: list[Recommendation] = Field(default_factory=list)
    health_status: HealthStatus = "healthy"
