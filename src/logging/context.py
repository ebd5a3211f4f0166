# src/logging/context.py - v1
"""Contextual logging support: attach fingerprint, stage and rule to log records.

Each analysis runs in its own asyncio task, so context variables set for one
request never leak into a concurrently running one.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)
_rule: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "rule", default=None
)


@dataclass(frozen=True)
class LogContext:
    """Immutable snapshot of current logging context."""

    fingerprint: str | None = None
    stage: str | None = None
    rule: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        fingerprint=_fingerprint.get(),
        stage=_stage.get(),
        rule=_rule.get(),
    )


def set_request_context(fingerprint: str, stage: str | None = None) -> None:
    """Set request-level context (called once per analysis)."""
    _fingerprint.set(fingerprint)
    _stage.set(stage)


def set_stage(stage: str) -> None:
    """Record which pipeline stage is running."""
    _stage.set(stage)


def set_rule_context(rule: str | None) -> None:
    """Set rule-level context (called inside each rule task)."""
    _rule.set(rule)


def clear_context() -> None:
    """Reset all context variables."""
    _fingerprint.set(None)
    _stage.set(None)
    _rule.set(None)
