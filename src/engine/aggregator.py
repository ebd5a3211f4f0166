# src/engine/aggregator.py - v1
"""Signal aggregation: weighted score, confidence and threshold decision.

    overall    = sum(confidence * weight) / sum(weight)        (0 if no signals)
    confidence = min(n / 3, 1) * clarity * mean(confidence)    (1 if no signals)

where clarity is 1.0 when the score sits clearly at either end of the scale
(< 0.2 or > 0.8) and 0.7 in the ambiguous middle.
"""

from __future__ import annotations

from typing import Sequence

from postguard.config.detection import DecisionThresholds
from postguard.core.models import AggregateScore, Decision, Signal

FULL_AGREEMENT_SIGNALS = 3
CLEAR_LOW_SCORE = 0.2
CLEAR_HIGH_SCORE = 0.8
AMBIGUOUS_SCORE_FACTOR = 0.7


def aggregate(
    signals: Sequence[Signal],
    thresholds: DecisionThresholds | None = None,
) -> AggregateScore:
    """Combine signals into an AggregateScore.

    Args:
        signals: Signals emitted by the rules for one post.
        thresholds: Decision band bounds. Defaults to DecisionThresholds().

    Returns:
        AggregateScore with score and confidence clamped to [0, 1].
    """
    thresholds = thresholds or DecisionThresholds()
    score = overall_score(signals)
    return AggregateScore(
        overall_score=score,
        confidence=aggregate_confidence(signals, score),
        decision=decide(score, thresholds),
    )


def overall_score(signals: Sequence[Signal]) -> float:
    """Weighted mean of signal confidences."""
    if not signals:
        return 0.0
    total_weight = sum(s.weight for s in signals)
    if total_weight <= 0:
        return 0.0
    weighted = sum(s.confidence * s.weight for s in signals)
    return _clamp(weighted / total_weight)


def aggregate_confidence(signals: Sequence[Signal], score: float) -> float:
    """How much to trust ``score``: more, agreeing, decisive signals raise it."""
    if not signals:
        return 1.0
    count_factor = min(len(signals) / FULL_AGREEMENT_SIGNALS, 1.0)
    clarity = (
        1.0 if score < CLEAR_LOW_SCORE or score > CLEAR_HIGH_SCORE
        else AMBIGUOUS_SCORE_FACTOR
    )
    mean_confidence = sum(s.confidence for s in signals) / len(signals)
    return _clamp(count_factor * clarity * mean_confidence)


def decide(score: float, thresholds: DecisionThresholds | None = None) -> Decision:
    """Map a score onto a decision band (upper bounds inclusive)."""
    thresholds = thresholds or DecisionThresholds()
    if score <= thresholds.allow:
        return "allow"
    if score <= thresholds.flag:
        return "flag"
    if score <= thresholds.under_review:
        return "under_review"
    return "reject"


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)
