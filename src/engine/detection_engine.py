# src/engine/detection_engine.py - v1
"""Detection engine: run the rule catalogue concurrently and aggregate.

Each enabled rule runs as its own task under asyncio.gather. A rule that
raises is logged and contributes no signal; its siblings are unaffected.
Anything that goes wrong outside a rule yields the fallback verdict.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

from pydantic import BaseModel

from postguard.config.detection import DetectionConfig
from postguard.core.models import Signal, Verdict, fallback_verdict
from postguard.engine.aggregator import aggregate
from postguard.logging.context import set_rule_context, set_stage
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule

logger = logging.getLogger(__name__)


class EngineStats(BaseModel):
    """Static description of the engine's rule catalogue."""

    total_rules: int
    enabled_rules: int
    performance_target_ms: float


class DetectionEngine:
    """Turn normalized content into a Verdict.

    Args:
        rules: Rule instances; disabled ones are skipped.
        config: Detection configuration (thresholds, performance target).
    """

    def __init__(
        self,
        rules: Sequence[BaseRule],
        config: DetectionConfig | None = None,
    ) -> None:
        self._rules = tuple(rules)
        self._config = config or DetectionConfig()

    @property
    def rules(self) -> tuple[BaseRule, ...]:
        return self._rules

    @property
    def enabled_rules(self) -> list[BaseRule]:
        return [r for r in self._rules if r.enabled]

    async def analyze(self, content: NormalizedContent, fingerprint: str) -> Verdict:
        """Extract signals and aggregate them, never raising.

        Any failure outside an individual rule returns the fallback verdict.
        """
        start = time.perf_counter()
        try:
            return await self.evaluate(content, fingerprint)
        except Exception as exc:
            logger.error("Analysis failed, returning fallback: %s", exc, exc_info=True)
            return fallback_verdict(
                fingerprint, processing_time_ms=(time.perf_counter() - start) * 1000,
            )

    async def evaluate(self, content: NormalizedContent, fingerprint: str) -> Verdict:
        """Extract signals from every enabled rule and aggregate them.

        Unlike analyze(), aggregation errors propagate to the caller.
        """
        start = time.perf_counter()
        set_stage("rules")
        signals = await self.extract_signals(content)

        set_stage("aggregation")
        result = aggregate(signals, self._config.thresholds)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if elapsed_ms > self._config.performance_target_ms:
            logger.warning(
                "Analysis took %.1fms (target %.0fms)",
                elapsed_ms, self._config.performance_target_ms,
            )

        return Verdict(
            decision=result.decision,
            overall_score=result.overall_score,
            confidence=result.confidence,
            signals=tuple(signals),
            processing_time_ms=elapsed_ms,
            fingerprint=fingerprint,
        )

    async def extract_signals(self, content: NormalizedContent) -> list[Signal]:
        """Run enabled rules concurrently; keep signals in catalogue order."""
        results = await asyncio.gather(
            *(self._run_rule(rule, content) for rule in self.enabled_rules)
        )
        return [signal for signal in results if signal is not None]

    async def _run_rule(
        self, rule: BaseRule, content: NormalizedContent,
    ) -> Signal | None:
        set_rule_context(rule.name)
        try:
            return await rule.extract(content)
        except Exception as exc:
            logger.warning("Rule '%s' failed: %s", rule.name, exc, exc_info=True)
            return None

    def stats(self) -> EngineStats:
        """Rule counts and performance target."""
        return EngineStats(
            total_rules=len(self._rules),
            enabled_rules=len(self.enabled_rules),
            performance_target_ms=self._config.performance_target_ms,
        )
