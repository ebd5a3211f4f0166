# src/cache/base_persistent_store.py - v1
"""Optional durable store for verdicts.

The analysis service works without one. When supplied, it is consulted after
an in-memory miss and written after every full computation; its failures
are logged and treated as misses.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from postguard.cache.models import StorageStats
from postguard.core.models import Verdict


class BasePersistentStore(ABC):
    """Interface for durable verdict storage backends."""

    @abstractmethod
    async def save_result(self, key: str, verdict: Verdict) -> None:
        """Persist a verdict under its fingerprint."""

    @abstractmethod
    async def load_result(self, key: str) -> Verdict | None:
        """Load a previously persisted verdict."""

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """Remove expired records and return how many were removed."""

    @abstractmethod
    async def storage_stats(self) -> StorageStats:
        """Record count and approximate on-disk size."""
