# src/cache/models.py - v1
"""Cache domain models: CacheEntry, CacheStats, StorageStats."""

from __future__ import annotations

from pydantic import BaseModel

from postguard.core.models import Verdict

SECONDS_PER_HOUR = 3600.0
# Floor on entry age so freshly inserted entries do not divide by ~0.
MIN_AGE_HOURS = 0.1


class CacheEntry(BaseModel):
    """One cached verdict plus the bookkeeping used for expiry and eviction."""

    verdict: Verdict
    created_at: float
    hits: int = 0
    ttl_seconds: float | None = None

    def is_expired(self, now: float) -> bool:
        """True once ``now`` is strictly past creation + ttl."""
        if self.ttl_seconds is None:
            return False
        return now > self.created_at + self.ttl_seconds

    def eviction_score(self, now: float) -> float:
        """Hits per hour of age; the lowest-scoring entry is evicted first."""
        age_hours = (now - self.created_at) / SECONDS_PER_HOUR
        return self.hits / max(age_hours, MIN_AGE_HOURS)


class CacheStats(BaseModel):
    """Counters reported by a cache store."""

    hits: int = 0
    misses: int = 0
    hit_rate: float = 0.0
    total_entries: int = 0
    memory_usage: int = 0


class StorageStats(BaseModel):
    """Size report of an optional persistent store."""

    total_records: int = 0
    size_bytes: int = 0
