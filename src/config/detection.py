# src/config/detection.py - v1
"""Immutable detection configuration handed to the engine and rules.

Built once from Settings (or defaults) at service construction and never
mutated afterwards. Tests that need different weights or thresholds build a
new DetectionConfig rather than patching module state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from postguard.config.settings import ConfigurationError

if TYPE_CHECKING:
    from postguard.config.settings import Settings

DEFAULT_RULE_WEIGHTS: dict[str, float] = {
    "profanity": 0.3,
    "repetitive_content": 0.2,
    "promotional": 0.25,
    "suspicious_links": 0.35,
    "caps_abuse": 0.15,
    "fake_engagement": 0.25,
    "character_patterns": 0.1,
    "word_patterns": 0.2,
    "sentence_structure": 0.15,
}


class DecisionThresholds(BaseModel):
    """Inclusive upper bounds of each decision band."""

    model_config = ConfigDict(frozen=True)

    allow: float = 0.2
    flag: float = 0.5
    under_review: float = 0.7


class AnalysisLimits(BaseModel):
    """Per-rule tuning constants."""

    model_config = ConfigDict(frozen=True)

    max_caps_ratio: float = 0.7
    max_repetitive_chars: int = 3
    max_repetitive_words: int = 2
    max_urls_per_post: int = 2


class DetectionConfig(BaseModel):
    """Everything the detection core is allowed to know about configuration."""

    model_config = ConfigDict(frozen=True)

    thresholds: DecisionThresholds = Field(default_factory=DecisionThresholds)
    limits: AnalysisLimits = Field(default_factory=AnalysisLimits)
    rule_weights: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_RULE_WEIGHTS)
    )
    disabled_rules: frozenset[str] = frozenset()
    performance_target_ms: float = 50.0

    def weight_for(self, kind: str) -> float:
        """Return the configured weight for a signal kind.

        Raises:
            ConfigurationError: If the kind has no weight or a non-positive one.
        """
        weight = self.rule_weights.get(kind)
        if weight is None or weight <= 0:
            raise ConfigurationError(f"No positive weight configured for {kind!r}")
        return weight

    def with_weights(self, **weights: float) -> DetectionConfig:
        """Return a copy with some rule weights replaced."""
        merged = {**self.rule_weights, **weights}
        return self.model_copy(update={"rule_weights": merged})

    @classmethod
    def from_settings(cls, settings: Settings) -> DetectionConfig:
        """Derive the detection config from validated settings."""
        return cls(
            thresholds=DecisionThresholds(
                allow=settings.threshold_allow,
                flag=settings.threshold_flag,
                under_review=settings.threshold_under_review,
            ),
            limits=AnalysisLimits(
                max_caps_ratio=settings.max_caps_ratio,
                max_repetitive_chars=settings.max_repetitive_chars,
                max_repetitive_words=settings.max_repetitive_words,
                max_urls_per_post=settings.max_urls_per_post,
            ),
            rule_weights=settings.rule_weights,
            disabled_rules=frozenset(settings.disabled_rules_list),
            performance_target_ms=settings.performance_target_ms,
        )
