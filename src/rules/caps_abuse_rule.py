# src/rules/caps_abuse_rule.py - v1
"""Caps abuse detection: excessive capitalization."""

from __future__ import annotations

import re

from postguard.core.models import Severity, Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule

_LETTERS = re.compile(r"[a-zA-Z]")
_UPPER = re.compile(r"[A-Z]")
_CAPS_HASHTAG = re.compile(r"#[A-Z]+")
_ACRONYM = re.compile(r"\b[A-Z]{2,5}\b")


class CapsAbuseRule(BaseRule):
    """Flag posts whose uppercase-letter ratio exceeds ``limits.max_caps_ratio``."""

    name = "caps_abuse"
    kind = "caps_abuse"

    MIN_LENGTH = 3
    LEGITIMATE_CAPS_DISCOUNT = 0.7

    async def extract(self, content: NormalizedContent) -> Signal | None:
        text = content.original.strip()
        if len(text) < self.MIN_LENGTH:
            return None

        letters = len(_LETTERS.findall(text))
        if letters == 0:
            return None

        caps_ratio = len(_UPPER.findall(text)) / letters
        if caps_ratio <= self.limits.max_caps_ratio:
            return None

        severity: Severity = "low"
        confidence = 0.6
        if caps_ratio > 0.9:
            severity, confidence = "high", 0.9
        elif caps_ratio > 0.8:
            severity, confidence = "medium", 0.75

        # Hashtags and acronyms explain some capitalization
        if _CAPS_HASHTAG.search(text) or _ACRONYM.search(text):
            confidence *= self.LEGITIMATE_CAPS_DISCOUNT
            if severity == "high":
                severity = "medium"

        evidence = [
            f"{caps_ratio * 100:.1f}% of letters are capitalized",
            f"Threshold: {self.limits.max_caps_ratio * 100:.1f}%",
        ]
        return self._signal(severity, confidence, evidence)
