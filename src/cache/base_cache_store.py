# src/cache/base_cache_store.py - v1
"""Abstract result cache interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from postguard.cache.models import CacheStats
from postguard.core.models import Verdict


class BaseCacheStore(ABC):
    """Unified interface for fingerprint -> Verdict caches."""

    @abstractmethod
    async def get(self, key: str) -> Verdict | None:
        """Return the cached verdict, or None if absent or expired."""

    @abstractmethod
    async def set(
        self, key: str, verdict: Verdict, ttl_seconds: float | None = None,
    ) -> None:
        """Store a verdict, evicting if the store is full."""

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Whether a live entry exists. Does not count as a hit or miss."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if one was removed."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry and reset hit/miss counters."""

    @abstractmethod
    async def cleanup(self) -> int:
        """Remove expired entries and return how many were removed."""

    @abstractmethod
    async def stats(self) -> CacheStats:
        """Hit/miss counters, entry count and approximate memory usage."""

    @abstractmethod
    async def size(self) -> int:
        """Number of stored entries, expired or not."""
