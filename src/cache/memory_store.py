# src/cache/memory_store.py - v1
"""In-memory result cache with hits-per-age eviction and per-entry expiry.

All reads and writes of the entry map and the hit/miss counters happen under
a single asyncio.Lock, so a read that deletes an expired entry and a write
that evicts for capacity can never act on the same entry twice. No await
happens while the lock is held.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Callable

from postguard.cache.base_cache_store import BaseCacheStore
from postguard.cache.models import CacheEntry, CacheStats
from postguard.core.models import Verdict

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10_000
DEFAULT_TTL_SECONDS = 3600.0


class MemoryCacheStore(BaseCacheStore):
    """Fingerprint -> Verdict map bounded by entry count.

    Args:
        max_entries: Capacity; inserting a new key at capacity evicts one entry.
        default_ttl_seconds: TTL applied when set() is called without one.
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0")
        if default_ttl_seconds <= 0:
            raise ValueError("default_ttl_seconds must be > 0")
        self._max_entries = max_entries
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._lock = asyncio.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    async def get(self, key: str) -> Verdict | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Expired cache entry dropped on read: %s", key)
                return None

            self._hits += 1
            entry.hits += 1
            return entry.verdict

    async def set(
        self, key: str, verdict: Verdict, ttl_seconds: float | None = None,
    ) -> None:
        async with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._max_entries:
                self._evict_lowest_score(now)

            self._entries[key] = CacheEntry(
                verdict=verdict,
                created_at=now,
                hits=0,
                ttl_seconds=ttl_seconds if ttl_seconds is not None else self._default_ttl,
            )

    async def has(self, key: str) -> bool:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    async def cleanup(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info("Cache cleanup removed %d expired entries", len(expired))
        return len(expired)

    async def stats(self) -> CacheStats:
        async with self._lock:
            total_requests = self._hits + self._misses
            memory_usage = sum(
                _approximate_size(entry) for entry in self._entries.values()
            )
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                hit_rate=self._hits / total_requests if total_requests else 0.0,
                total_entries=len(self._entries),
                memory_usage=memory_usage,
            )

    async def size(self) -> int:
        async with self._lock:
            return len(self._entries)

    async def entries(self) -> list[tuple[str, CacheEntry]]:
        """Snapshot of (key, entry) pairs for debugging."""
        async with self._lock:
            return [(k, e.model_copy()) for k, e in self._entries.items()]

    def _evict_lowest_score(self, now: float) -> None:
        """Drop the entry with the lowest hits-per-age score.

        Caller holds the lock. Ties go to the earliest inserted entry.
        """
        victim: str | None = None
        lowest = float("inf")
        for key, entry in self._entries.items():
            score = entry.eviction_score(now)
            if score < lowest:
                lowest = score
                victim = key

        if victim is not None:
            del self._entries[victim]
            logger.debug("Evicted cache entry %s (score=%.3f)", victim, lowest)


def _approximate_size(entry: CacheEntry) -> int:
    """Serialized JSON size of an entry, in bytes.

    Evidence may quote post text, and post text may hold lone surrogates,
    which pydantic's JSON serializer refuses; json.dumps passes them through.
    """
    payload = json.dumps(
        entry.model_dump(mode="json"), separators=(",", ":"), ensure_ascii=False,
    )
    return len(payload.encode("utf-8", errors="surrogatepass"))
