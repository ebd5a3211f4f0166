# src/cache/cache_factory.py - v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from postguard.cache.base_cache_store import BaseCacheStore
from postguard.cache.memory_store import MemoryCacheStore
from postguard.config.settings import Settings


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the in-memory cache sized from settings.

    Args:
        settings: Application settings. Defaults to store defaults.

    Returns:
        Configured BaseCacheStore implementation.
    """
    if settings is None:
        return MemoryCacheStore()
    return MemoryCacheStore(
        max_entries=settings.cache_max_entries,
        default_ttl_seconds=settings.cache_default_ttl_seconds,
    )
