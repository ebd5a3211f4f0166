# src/edge_cases/models.py - v1
"""Edge-case classifier outcome."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from postguard.core.models import Decision, RecommendedAction, Verdict

ACTION_TO_DECISION: dict[str, Decision] = {
    "allow": "allow",
    "flag": "flag",
    "reject": "reject",
    "manual_review": "under_review",
}


class EdgeCaseOutcome(BaseModel):
    """Result of the edge-case chain. Produced and consumed within one call."""

    model_config = ConfigDict(frozen=True)

    handled: bool
    reason: str = ""
    recommended_action: RecommendedAction = "allow"
    verdict: Verdict | None = None


NOT_HANDLED = EdgeCaseOutcome(
    handled=False, reason="No edge cases detected", recommended_action="allow",
)
