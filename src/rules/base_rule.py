# src/rules/base_rule.py - v1
"""Abstract detection rule interface plus small matching helpers.

A rule inspects one normalized post and emits at most one Signal. Rules are
stateless after construction: lexicons are immutable class-level tables and
the weight comes from DetectionConfig, so one instance can serve any number
of concurrent analyses.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from functools import lru_cache

from postguard.config.detection import AnalysisLimits
from postguard.core.models import Severity, Signal, SignalKind
from postguard.preprocessing.models import NormalizedContent


class BaseRule(ABC):
    """Unified interface for signal extractors.

    Args:
        weight: Importance of this rule's signal in aggregation (> 0).
        limits: Tuning constants shared by the rule catalogue.
        enabled: Disabled rules are skipped by the engine.
    """

    name: str
    kind: SignalKind

    def __init__(
        self,
        weight: float,
        limits: AnalysisLimits | None = None,
        enabled: bool = True,
    ) -> None:
        if weight <= 0:
            raise ValueError(f"{type(self).__name__}: weight must be > 0")
        self.weight = weight
        self.limits = limits or AnalysisLimits()
        self.enabled = enabled

    @abstractmethod
    async def extract(self, content: NormalizedContent) -> Signal | None:
        """Inspect a post and return a Signal, or None if nothing fired."""

    def _signal(
        self, severity: Severity, confidence: float, evidence: list[str],
    ) -> Signal:
        return Signal(
            kind=self.kind,
            severity=severity,
            confidence=min(max(confidence, 0.0), 1.0),
            evidence=tuple(evidence),
            weight=self.weight,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weight={self.weight}, enabled={self.enabled})"


def severity_from_confidence(
    confidence: float, high_above: float, medium_above: float,
) -> Severity:
    """Map a confidence onto a severity band."""
    if confidence > high_above:
        return "high"
    if confidence > medium_above:
        return "medium"
    return "low"


@lru_cache(maxsize=1024)
def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Case-insensitive pattern matching a phrase not embedded in a longer word."""
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)


def contains_phrase(text: str, phrase: str) -> bool:
    """Whether ``phrase`` occurs in ``text`` on word boundaries."""
    return phrase_pattern(phrase).search(text) is not None
