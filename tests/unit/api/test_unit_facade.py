# tests/unit/api/test_unit_facade.py - v1
"""Tests for api/facade.py - SpamDetectionService orchestration."""

from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from postguard.api.facade import InputError, SpamDetectionService
from postguard.cache.base_persistent_store import BasePersistentStore
from postguard.cache.fingerprint import compute_fingerprint
from postguard.cache.memory_store import MemoryCacheStore
from postguard.cache.models import StorageStats
from postguard.config.settings import Settings
from postguard.rules.base_rule import BaseRule

SPAM = "Limited time offer! Buy now and get it today"
CLEAN = "Just had coffee today, lovely weather."
# JSON decoding of a truncated emoji yields a lone high surrogate
TRUNCATED_EMOJI = "Great deal today, lovely weather and fresh coffee \ud83d"
SURROGATE_RUN = "Sooo \ud83d\ud83d\ud83d\ud83d\ud83d so happy today with all my friends"


class _SlowRule(BaseRule):
    name = "slow"
    kind = "word_patterns"

    def __init__(self) -> None:
        super().__init__(weight=0.2)
        self.calls = 0

    async def extract(self, content):
        self.calls += 1
        await asyncio.sleep(0.02)
        return None


class _DictStore(BasePersistentStore):
    def __init__(self) -> None:
        self.records: dict = {}
        self.loads = 0

    async def save_result(self, key, verdict):
        self.records[key] = verdict

    async def load_result(self, key):
        self.loads += 1
        return self.records.get(key)

    async def cleanup_expired(self):
        return 0

    async def storage_stats(self):
        return StorageStats(total_records=len(self.records), size_bytes=0)


class _BrokenStore(BasePersistentStore):
    async def save_result(self, key, verdict):
        raise OSError("disk full")

    async def load_result(self, key):
        raise OSError("disk gone")

    async def cleanup_expired(self):
        raise OSError("disk gone")

    async def storage_stats(self):
        return StorageStats()


class _BrokenCache(MemoryCacheStore):
    async def get(self, key):
        raise RuntimeError("cache down")

    async def set(self, key, verdict, ttl_seconds=None):
        raise RuntimeError("cache down")


class TestInputValidation:
    @pytest.mark.asyncio
    async def test_empty_string(self, service):
        with pytest.raises(InputError):
            await service.analyze("")

    @pytest.mark.asyncio
    async def test_non_string(self, service):
        with pytest.raises(InputError):
            await service.analyze(None)  # type: ignore[arg-type]

    def test_input_error_is_value_error(self):
        assert issubclass(InputError, ValueError)


class TestCaching:
    @pytest.mark.asyncio
    async def test_second_call_is_cache_hit(self, service):
        first = await service.analyze(SPAM)
        second = await service.analyze(SPAM)
        stats = await service.stats()
        assert stats.cache.hits == 1
        assert stats.cache.misses == 1
        assert second.fingerprint == first.fingerprint
        assert second.decision == first.decision
        assert second.overall_score == first.overall_score
        assert second.signals == first.signals

    @pytest.mark.asyncio
    async def test_cache_hit_reports_retrieval_time(self, settings):
        rule = _SlowRule()
        service = SpamDetectionService(settings=settings, rules=[rule])
        first = await service.analyze(CLEAN)
        second = await service.analyze(CLEAN)

        assert rule.calls == 1
        assert first.processing_time_ms >= 20.0
        assert second.processing_time_ms < first.processing_time_ms
        assert second.model_dump(exclude={"processing_time_ms"}) == first.model_dump(
            exclude={"processing_time_ms"},
        )

    @pytest.mark.asyncio
    async def test_case_variants_share_entry(self, service):
        await service.analyze(SPAM)
        await service.analyze(SPAM.upper() + "  ")
        stats = await service.stats()
        assert stats.cache.total_entries == 1
        assert stats.cache.hits == 1

    @pytest.mark.asyncio
    async def test_edge_case_verdicts_not_cached(self, service):
        verdict = await service.analyze("   ")
        assert verdict.decision == "reject"
        assert (await service.stats()).cache.total_entries == 0

    @pytest.mark.asyncio
    async def test_cache_disabled(self):
        service = SpamDetectionService(settings=Settings(_env_file=None, cache_enabled=False))
        await service.analyze(SPAM)
        await service.analyze(SPAM)
        stats = await service.stats()
        assert stats.cache.hits == 0
        assert stats.cache.total_entries == 0

    @pytest.mark.asyncio
    async def test_cache_failure_degrades_to_miss(self, settings):
        service = SpamDetectionService(settings=settings, cache_store=_BrokenCache())
        verdict = await service.analyze(SPAM)
        assert verdict.decision != "allow"
        assert service.monitor.get_metrics().cache_hit_rate == 0.0


class TestPersistentStore:
    @pytest.mark.asyncio
    async def test_saved_and_reloaded(self, settings):
        store = _DictStore()
        first = SpamDetectionService(settings=settings, persistent_store=store)
        verdict = await first.analyze(SPAM)
        assert store.records[compute_fingerprint(SPAM)].decision == verdict.decision

        second = SpamDetectionService(settings=settings, persistent_store=store, rules=[])
        reloaded = await second.analyze(SPAM)
        # With no rules a fresh computation would allow; the stored verdict wins
        assert reloaded.decision == verdict.decision
        assert (await second.stats()).storage.total_records == 1

    @pytest.mark.asyncio
    async def test_store_failure_is_ignored(self, settings):
        service = SpamDetectionService(settings=settings, persistent_store=_BrokenStore())
        verdict = await service.analyze(SPAM)
        assert verdict.signals
        report = await service.perform_maintenance()
        assert report.storage_cleanup == 0


class TestFailures:
    @pytest.mark.asyncio
    async def test_aggregation_failure_gives_fallback(self, service):
        with patch(
            "postguard.engine.detection_engine.aggregate",
            side_effect=ZeroDivisionError("bad math"),
        ):
            verdict = await service.analyze(SPAM)
        assert (verdict.decision, verdict.overall_score, verdict.confidence) == (
            "under_review", 0.5, 0.1,
        )
        assert verdict.fingerprint == compute_fingerprint(SPAM)
        stats = await service.stats()
        assert stats.performance.error_rate == 1.0
        assert stats.cache.total_entries == 0


class TestLoneSurrogates:
    @pytest.mark.asyncio
    async def test_analyze_returns_verdict(self, service):
        verdict = await service.analyze(TRUNCATED_EMOJI)
        assert verdict.fingerprint == compute_fingerprint(TRUNCATED_EMOJI)
        assert 0.0 <= verdict.overall_score <= 1.0
        assert service.monitor.get_metrics().error_rate == 0.0

    @pytest.mark.asyncio
    async def test_batch_keeps_every_item(self, service):
        verdicts = await service.analyze_batch([CLEAN, TRUNCATED_EMOJI])
        assert [v.fingerprint for v in verdicts] == [
            compute_fingerprint(CLEAN), compute_fingerprint(TRUNCATED_EMOJI),
        ]
        assert verdicts[0].decision == "allow"

    @pytest.mark.asyncio
    async def test_surrogates_in_evidence_survive_stats(self, service):
        verdict = await service.analyze(SURROGATE_RUN)
        assert "repetitive_content" in verdict.signal_kinds
        stats = await service.stats()
        assert stats.cache.total_entries == 1
        assert stats.cache.memory_usage > 0


class TestBatch:
    @pytest.mark.asyncio
    async def test_empty(self, service):
        assert await service.analyze_batch([]) == []

    @pytest.mark.asyncio
    async def test_order_preserved(self, service):
        texts = ["Just had coffee today, lovely weather.", "   ", SPAM]
        verdicts = await service.analyze_batch(texts)
        assert [v.fingerprint for v in verdicts] == [compute_fingerprint(t) for t in texts]
        assert verdicts[0].decision == "allow"
        assert verdicts[1].decision == "reject"

    @pytest.mark.asyncio
    async def test_bad_item_gets_fallback(self, service):
        verdicts = await service.analyze_batch(["", SPAM])
        assert verdicts[0].decision == "under_review"
        assert verdicts[0].confidence == 0.1
        assert verdicts[1].signals

    @pytest.mark.asyncio
    async def test_concurrency_bound(self):
        service = SpamDetectionService(
            settings=Settings(_env_file=None, batch_max_concurrency=1),
        )
        verdicts = await service.analyze_batch([f"post number {i} is here" for i in range(5)])
        assert len(verdicts) == 5


class TestOperations:
    @pytest.mark.asyncio
    async def test_stats_shape(self, service):
        await service.analyze(SPAM)
        stats = await service.stats()
        assert stats.engine.total_rules == 6
        assert stats.engine.enabled_rules == 6
        assert stats.performance.request_count == 1
        assert stats.cache.memory_usage > 0
        assert stats.storage is None
        assert stats.health.status == "healthy"
        assert len(stats.health.recommendations) <= 5
        assert stats.health.uptime_seconds >= 0.0
        assert stats.summary.startswith("requests=1 ")

    @pytest.mark.asyncio
    async def test_stats_health_carries_recommendations(self, service):
        await service.analyze(SPAM)
        service.monitor.record_error()
        stats = await service.stats()
        assert stats.health.status == "unhealthy"
        assert ("rules", "high") in {
            (r.category, r.severity) for r in stats.health.recommendations
        }
        assert "errors=100.0%" in stats.summary

    @pytest.mark.asyncio
    async def test_clear_cache(self, service):
        await service.analyze(SPAM)
        await service.clear_cache()
        stats = await service.stats()
        assert stats.cache.total_entries == 0
        assert stats.cache.misses == 0

    @pytest.mark.asyncio
    async def test_cleanup_cache(self, settings, clock):
        cache = MemoryCacheStore(default_ttl_seconds=10, clock=clock)
        service = SpamDetectionService(settings=settings, cache_store=cache)
        await service.analyze(SPAM)
        clock.advance(11)
        assert await service.cleanup_cache() == 1

    @pytest.mark.asyncio
    async def test_perform_maintenance(self, service):
        await service.analyze(SPAM)
        report = await service.perform_maintenance()
        assert report.cache_cleanup == 0
        assert report.health_status == "healthy"
        assert service.health_status() == "healthy"
        assert service.recommendations() == report.recommendations

    @pytest.mark.asyncio
    async def test_reset_metrics_keeps_cache(self, service):
        await service.analyze(SPAM)
        service.reset_metrics()
        stats = await service.stats()
        assert stats.performance.request_count == 0
        assert stats.cache.total_entries == 1
