# tests/unit/cache/test_memory_store.py - v1
"""Tests for cache/memory_store.py - expiry, eviction and counters."""

from __future__ import annotations

import asyncio

import pytest

from postguard.cache.memory_store import MemoryCacheStore


class TestConstruction:
    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError, match="max_entries"):
            MemoryCacheStore(max_entries=0)

    def test_rejects_zero_ttl(self):
        with pytest.raises(ValueError, match="ttl"):
            MemoryCacheStore(default_ttl_seconds=0)


class TestGetSet:
    @pytest.mark.asyncio
    async def test_round_trip(self, memory_store, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        assert await memory_store.get("k1") == sample_verdict

    @pytest.mark.asyncio
    async def test_miss(self, memory_store):
        assert await memory_store.get("nope") is None
        stats = await memory_store.stats()
        assert stats.misses == 1
        assert stats.hits == 0

    @pytest.mark.asyncio
    async def test_hit_counters(self, memory_store, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        await memory_store.get("k1")
        await memory_store.get("k1")
        await memory_store.get("k2")
        stats = await memory_store.stats()
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.hit_rate == pytest.approx(2 / 3)
        entries = dict(await memory_store.entries())
        assert entries["k1"].hits == 2


class TestExpiry:
    @pytest.mark.asyncio
    async def test_expired_entry_is_miss_and_deleted(self, memory_store, clock, sample_verdict):
        await memory_store.set("k1", sample_verdict, ttl_seconds=10)
        clock.advance(10)
        assert await memory_store.get("k1") is not None
        clock.advance(0.5)
        assert await memory_store.get("k1") is None
        assert await memory_store.size() == 0
        stats = await memory_store.stats()
        assert stats.misses == 1

    @pytest.mark.asyncio
    async def test_default_ttl_applied(self, memory_store, clock, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        clock.advance(61)
        assert await memory_store.has("k1") is False

    @pytest.mark.asyncio
    async def test_cleanup_removes_only_expired(self, memory_store, clock, sample_verdict):
        await memory_store.set("short", sample_verdict, ttl_seconds=5)
        await memory_store.set("long", sample_verdict, ttl_seconds=500)
        clock.advance(10)
        assert await memory_store.cleanup() == 1
        assert await memory_store.has("long") is True
        assert await memory_store.size() == 1


class TestEviction:
    @pytest.mark.asyncio
    async def test_n_plus_one_inserts_keep_n(self, memory_store, sample_verdict):
        for i in range(4):
            await memory_store.set(f"k{i}", sample_verdict)
        assert await memory_store.size() == 3

    @pytest.mark.asyncio
    async def test_evicts_lowest_hits_per_age(self, memory_store, clock, sample_verdict):
        await memory_store.set("a", sample_verdict)
        await memory_store.set("b", sample_verdict)
        await memory_store.set("c", sample_verdict)
        await memory_store.get("a")
        await memory_store.get("c")
        clock.advance(1)
        await memory_store.set("d", sample_verdict)
        keys = {k for k, _ in await memory_store.entries()}
        assert keys == {"a", "c", "d"}

    @pytest.mark.asyncio
    async def test_tie_evicts_first_inserted(self, memory_store, sample_verdict):
        for key in ("a", "b", "c"):
            await memory_store.set(key, sample_verdict)
        await memory_store.set("d", sample_verdict)
        keys = [k for k, _ in await memory_store.entries()]
        assert keys == ["b", "c", "d"]

    @pytest.mark.asyncio
    async def test_overwrite_does_not_evict(self, memory_store, sample_verdict):
        for key in ("a", "b", "c"):
            await memory_store.set(key, sample_verdict)
        await memory_store.set("b", sample_verdict)
        assert await memory_store.size() == 3


class TestMaintenance:
    @pytest.mark.asyncio
    async def test_delete(self, memory_store, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        assert await memory_store.delete("k1") is True
        assert await memory_store.delete("k1") is False

    @pytest.mark.asyncio
    async def test_has_does_not_count(self, memory_store, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        assert await memory_store.has("k1") is True
        assert await memory_store.has("k2") is False
        stats = await memory_store.stats()
        assert stats.hits == 0
        assert stats.misses == 0

    @pytest.mark.asyncio
    async def test_clear_resets_counters(self, memory_store, sample_verdict):
        await memory_store.set("k1", sample_verdict)
        await memory_store.get("k1")
        await memory_store.get("k2")
        await memory_store.clear()
        stats = await memory_store.stats()
        assert (stats.hits, stats.misses, stats.total_entries) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_memory_usage_is_json_size(self, memory_store, sample_verdict):
        assert (await memory_store.stats()).memory_usage == 0
        await memory_store.set("k1", sample_verdict)
        entry = dict(await memory_store.entries())["k1"]
        stats = await memory_store.stats()
        assert stats.memory_usage == len(entry.model_dump_json().encode("utf-8"))


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_sets_respect_capacity(self, memory_store, sample_verdict):
        await asyncio.gather(
            *(memory_store.set(f"k{i}", sample_verdict) for i in range(20))
        )
        assert await memory_store.size() == 3


class TestUnusualText:
    @pytest.mark.asyncio
    async def test_memory_usage_with_lone_surrogate(self, memory_store, sample_signal, sample_verdict):
        signal = sample_signal.model_copy(
            update={"evidence": ('Repeated character "\ud83d" 5 times in a row',)},
        )
        verdict = sample_verdict.model_copy(update={"signals": (signal,)})
        await memory_store.set("k1", verdict)
        assert (await memory_store.stats()).memory_usage > 0
