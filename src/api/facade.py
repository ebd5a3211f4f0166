# src/api/facade.py - v1
"""Public API facade: single entry point for post analysis.

Usage:
    from postguard.api.facade import SpamDetectionService
    service = SpamDetectionService()
    verdict = await service.analyze("Buy now!!!")

Per call:
  1. Reject empty input (InputError)
  2. Normalize and run the edge-case chain (may short-circuit)
  3. Look up the fingerprint in the result cache, then the persistent store
  4. Run the rule catalogue and aggregate
  5. Store the verdict in the cache and the persistent store
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Sequence

from postguard.api.models import (
    MAX_STATS_RECOMMENDATIONS,
    MaintenanceReport,
    ServiceHealth,
    ServiceStats,
)
from postguard.cache.cache_factory import create_cache_store
from postguard.cache.fingerprint import compute_fingerprint
from postguard.cache.models import CacheStats
from postguard.config.detection import DetectionConfig
from postguard.config.settings import Settings
from postguard.core.models import Verdict, fallback_verdict
from postguard.edge_cases.classifier import EdgeCaseClassifier
from postguard.engine.detection_engine import DetectionEngine
from postguard.logging.context import clear_context, set_request_context, set_stage
from postguard.preprocessing.normalizer import normalize
from postguard.rules.rule_factory import create_default_rules
from postguard.tracking.models import HealthStatus, Recommendation
from postguard.tracking.performance_monitor import (
    PerformanceMonitor,
    health_from_recommendations,
)

if TYPE_CHECKING:
    from postguard.cache.base_cache_store import BaseCacheStore
    from postguard.cache.base_persistent_store import BasePersistentStore
    from postguard.rules.base_rule import BaseRule

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """Raised when the post to analyze is not a non-empty string."""


class SpamDetectionService:
    """Analyze posts for spam and abuse.

    Args:
        settings: Application settings. Loaded from .env if None.
        config: Detection configuration. Derived from settings if None.
        cache_store: Result cache. Built from settings if None; no cache
            is used when settings disable caching.
        persistent_store: Optional durable store consulted after a cache miss.
        rules: Rule catalogue. The default catalogue if None.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        config: DetectionConfig | None = None,
        cache_store: BaseCacheStore | None = None,
        persistent_store: BasePersistentStore | None = None,
        rules: Sequence[BaseRule] | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._config = config or DetectionConfig.from_settings(self._settings)

        if cache_store is None and self._settings.cache_enabled:
            cache_store = create_cache_store(self._settings)
        self._cache = cache_store
        self._persistent = persistent_store

        if rules is None:
            rules = create_default_rules(self._config)
        self._engine = DetectionEngine(rules, self._config)
        self._classifier = EdgeCaseClassifier(
            character_pattern_weight=self._config.weight_for("character_patterns"),
        )
        self._monitor = PerformanceMonitor()
        # Refreshed by stats() and perform_maintenance()
        self._last_memory_usage = 0

    @property
    def engine(self) -> DetectionEngine:
        return self._engine

    @property
    def monitor(self) -> PerformanceMonitor:
        return self._monitor

    # --- Analysis ---

    async def analyze(self, text: str) -> Verdict:
        """Classify one post.

        Args:
            text: Raw post text.

        Returns:
            Verdict for the post. Internal failures yield the fallback verdict.

        Raises:
            InputError: If ``text`` is not a string or is zero-length.
        """
        if not isinstance(text, str) or len(text) == 0:
            raise InputError("Content must be a non-empty string")

        start = time.perf_counter()
        fingerprint = ""
        try:
            fingerprint = compute_fingerprint(text)
            set_request_context(fingerprint, stage="preprocessing")
            verdict = await self._analyze(text, fingerprint, start)
        except Exception as exc:
            logger.error("Analysis failed: %s", exc, exc_info=True)
            self._monitor.record_error()
            verdict = fallback_verdict(fingerprint, processing_time_ms=_elapsed_ms(start))
        finally:
            self._monitor.record_processing_time(_elapsed_ms(start))
            clear_context()
        return verdict

    async def _analyze(self, text: str, fingerprint: str, start: float) -> Verdict:
        content = normalize(text)

        set_stage("edge_cases")
        outcome = self._classifier.classify(content)
        if outcome.handled and outcome.verdict is not None:
            logger.debug("Short-circuited: %s", outcome.reason)
            return outcome.verdict

        set_stage("cache")
        cached = await self._cache_get(fingerprint)
        if cached is not None:
            return cached.with_processing_time(_elapsed_ms(start))

        persisted = await self._load_persisted(fingerprint)
        if persisted is not None:
            await self._cache_set(fingerprint, persisted)
            return persisted.with_processing_time(_elapsed_ms(start))

        verdict = await self._engine.evaluate(content, fingerprint)
        verdict = verdict.with_processing_time(_elapsed_ms(start))

        set_stage("store")
        await self._cache_set(fingerprint, verdict)
        await self._save_persisted(fingerprint, verdict)

        logger.debug(
            "Analyzed: decision=%s score=%.3f signals=%s",
            verdict.decision, verdict.overall_score, verdict.signal_kinds,
        )
        return verdict

    async def analyze_batch(self, texts: Sequence[str]) -> list[Verdict]:
        """Classify many posts concurrently, results in input order.

        A failing item (including empty input) yields the fallback verdict.
        """
        if not texts:
            return []

        semaphore = asyncio.Semaphore(self._settings.batch_max_concurrency)

        async def _one(text: str) -> Verdict:
            async with semaphore:
                try:
                    return await self.analyze(text)
                except Exception as exc:
                    logger.warning("Batch item failed: %s", exc)
                    return fallback_verdict(compute_fingerprint(text))

        start = time.perf_counter()
        verdicts = await asyncio.gather(*(_one(t) for t in texts))
        logger.info(
            "Batch of %d analyzed in %.1fms", len(verdicts), _elapsed_ms(start),
        )
        return list(verdicts)

    # --- Cache and persistence (failures degrade to misses) ---

    async def _cache_get(self, fingerprint: str) -> Verdict | None:
        if self._cache is None:
            return None
        try:
            verdict = await self._cache.get(fingerprint)
        except Exception as exc:
            logger.warning("Cache read failed: %s", exc, exc_info=True)
            verdict = None
        if verdict is None:
            self._monitor.record_cache_miss()
        else:
            self._monitor.record_cache_hit()
        return verdict

    async def _cache_set(self, fingerprint: str, verdict: Verdict) -> None:
        if self._cache is None:
            return
        try:
            await self._cache.set(fingerprint, verdict)
        except Exception as exc:
            logger.warning("Cache write failed: %s", exc, exc_info=True)

    async def _load_persisted(self, fingerprint: str) -> Verdict | None:
        if self._persistent is None:
            return None
        try:
            return await self._persistent.load_result(fingerprint)
        except Exception as exc:
            logger.warning("Persistent store read failed: %s", exc, exc_info=True)
            return None

    async def _save_persisted(self, fingerprint: str, verdict: Verdict) -> None:
        if self._persistent is None:
            return
        try:
            await self._persistent.save_result(fingerprint, verdict)
        except Exception as exc:
            logger.warning("Persistent store write failed: %s", exc, exc_info=True)

    # --- Operations ---

    async def stats(self) -> ServiceStats:
        """Cache, storage, performance, engine and health statistics."""
        cache_stats = await self._cache.stats() if self._cache else CacheStats()
        memory_usage = cache_stats.memory_usage
        self._last_memory_usage = memory_usage
        storage = await self._persistent.storage_stats() if self._persistent else None
        recs = self._monitor.recommendations(memory_usage)
        return ServiceStats(
            cache=cache_stats,
            storage=storage,
            performance=self._monitor.get_metrics(memory_usage),
            engine=self._engine.stats(),
            health=ServiceHealth(
                status=health_from_recommendations(recs),
                recommendations=recs[:MAX_STATS_RECOMMENDATIONS],
                uptime_seconds=self._monitor.uptime(),
            ),
            summary=self._monitor.summary(memory_usage),
        )

    async def clear_cache(self) -> None:
        """Drop every cached verdict and reset the cache counters."""
        if self._cache is not None:
            await self._cache.clear()
            logger.info("Result cache cleared")

    async def cleanup_cache(self) -> int:
        """Remove expired cache entries; return how many were removed."""
        if self._cache is None:
            return 0
        return await self._cache.cleanup()

    async def perform_maintenance(self) -> MaintenanceReport:
        """Expire stale entries and report recommendations and health."""
        removed = await self.cleanup_cache()
        storage_removed = 0
        if self._persistent is not None:
            try:
                storage_removed = await self._persistent.cleanup_expired()
            except Exception as exc:
                logger.warning("Persistent store cleanup failed: %s", exc, exc_info=True)

        if self._cache is not None:
            self._last_memory_usage = (await self._cache.stats()).memory_usage

        recs = self.recommendations()
        report = MaintenanceReport(
            cache_cleanup=removed,
            storage_cleanup=storage_removed,
            recommendations=recs,
            health_status=self.health_status(),
        )
        logger.info(
            "Maintenance: removed=%d health=%s recommendations=%d",
            removed, report.health_status, len(recs),
        )
        return report

    def health_status(self) -> HealthStatus:
        """Health derived from the current recommendations."""
        return self._monitor.health_status(self._last_memory_usage)

    def recommendations(self) -> list[Recommendation]:
        """Tuning recommendations from the performance monitor."""
        return self._monitor.recommendations(self._last_memory_usage)

    def reset_metrics(self) -> None:
        """Reset performance counters without touching the cache."""
        self._monitor.reset()


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
