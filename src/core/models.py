# src/core/models.py - v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
Signal and Verdict are frozen: once produced they are never mutated, and a
cached Verdict is handed out through model_copy().
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SignalKind = Literal[
    "profanity",
    "repetitive_content",
    "promotional",
    "suspicious_links",
    "caps_abuse",
    "fake_engagement",
    "character_patterns",
    "word_patterns",
    "sentence_structure",
]

Severity = Literal["low", "medium", "high"]

Decision = Literal["allow", "flag", "under_review", "reject"]

RecommendedAction = Literal["allow", "flag", "reject", "manual_review"]


# === SIGNALS ===


class Signal(BaseModel):
    """One rule's typed, weighted observation about a post."""

    model_config = ConfigDict(frozen=True)

    kind: SignalKind
    severity: Severity
    confidence: float = Field(ge=0.0, le=1.0)
    evidence: tuple[str, ...] = ()
    weight: float = Field(gt=0.0)


# === VERDICTS ===


class Verdict(BaseModel):
    """Final classification of one post."""

    model_config = ConfigDict(frozen=True)

    decision: Decision
    overall_score: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    signals: tuple[Signal, ...] = ()
    processing_time_ms: float = 0.0
    fingerprint: str

    def with_processing_time(self, processing_time_ms: float) -> Verdict:
        """Copy of this verdict reporting a different processing time."""
        return self.model_copy(update={"processing_time_ms": processing_time_ms})

    @property
    def signal_kinds(self) -> list[str]:
        """Kinds of the attached signals, in order."""
        return [s.kind for s in self.signals]


class AggregateScore(BaseModel):
    """Output of signal aggregation, before it is wrapped in a Verdict."""

    model_config = ConfigDict(frozen=True)

    overall_score: float
    confidence: float
    decision: Decision


# Returned whenever extraction or aggregation fails unexpectedly.
FALLBACK_DECISION: Decision = "under_review"
FALLBACK_SCORE = 0.5
FALLBACK_CONFIDENCE = 0.1


def fallback_verdict(fingerprint: str, processing_time_ms: float = 0.0) -> Verdict:
    """Safe degraded verdict used when analysis cannot complete."""
    return Verdict(
        decision=FALLBACK_DECISION,
        overall_score=FALLBACK_SCORE,
        confidence=FALLBACK_CONFIDENCE,
        signals=(),
        processing_time_ms=processing_time_ms,
        fingerprint=fingerprint,
    )
