# src/rules/promotional_rule.py - v1
"""Promotional and get-rich-quick content detection."""

from __future__ import annotations

import re

from postguard.core.models import Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule, contains_phrase, severity_from_confidence

_CAPS_WORD = re.compile(r"\b[A-Z]{3,}\b")
_MONEY = re.compile(
    r"[$\u20ac\u00a3\u00a5\u20b9][\d,]+|\d+\s*(?:dollars?|euros?|pounds?|USD|EUR|GBP)\b",
    re.IGNORECASE,
)


class PromotionalRule(BaseRule):
    """Score promotional language; every contribution is summed and capped at 1."""

    name = "promotional"
    kind = "promotional"

    PROMOTIONAL_KEYWORDS: tuple[str, ...] = (
        # Money / financial
        "buy now", "limited time", "discount", "sale", "offer", "deal", "free",
        "win", "prize", "money", "cash", "earn", "income", "profit", "rich",
        "wealth", "investment",
        # Urgency
        "urgent", "hurry", "act now", "don't miss", "last chance", "expires",
        "limited",
        # Call to action
        "click here", "visit", "call now", "order now", "subscribe", "sign up",
        "register",
        # Superlatives
        "amazing", "incredible", "unbelievable", "guaranteed", "exclusive",
        "special", "best", "top", "premium", "ultimate", "perfect",
        "revolutionary",
    )
    SPAM_PHRASES: tuple[str, ...] = (
        "get rich quick", "work from home", "make money fast",
        "no experience needed", "guaranteed income", "financial freedom",
        "be your own boss", "easy money", "risk free", "100% guaranteed",
        "no questions asked", "limited time offer", "act now", "don't wait",
        "this won't last", "once in a lifetime",
    )

    # Single words of the keyword list, for spotting promotional ALL-CAPS words
    CAPS_KEYWORD_WORDS = frozenset(
        word.upper() for kw in PROMOTIONAL_KEYWORDS for word in kw.split()
    )

    SPAM_PHRASE_SCORE = 0.4
    KEYWORD_SCORE = 0.1
    KEYWORD_CAP = 0.6
    EXCLAMATION_THRESHOLD = 3
    EXCLAMATION_SCORE = 0.05
    EXCLAMATION_CAP = 0.3
    CAPS_WORD_SCORE = 0.15
    MONEY_SCORE = 0.2

    async def extract(self, content: NormalizedContent) -> Signal | None:
        text = content.original
        evidence: list[str] = []
        score = 0.0

        for phrase in self.SPAM_PHRASES:
            if contains_phrase(text, phrase):
                score += self.SPAM_PHRASE_SCORE
                evidence.append(f'Spam phrase detected: "{phrase}"')

        keywords = [kw for kw in self.PROMOTIONAL_KEYWORDS if contains_phrase(text, kw)]
        if keywords:
            score += min(len(keywords) * self.KEYWORD_SCORE, self.KEYWORD_CAP)
            evidence.append(
                f"{len(keywords)} promotional keywords: {', '.join(keywords[:5])}"
            )

        exclamations = text.count("!")
        if exclamations > self.EXCLAMATION_THRESHOLD:
            score += min(exclamations * self.EXCLAMATION_SCORE, self.EXCLAMATION_CAP)
            evidence.append(f"Excessive exclamation marks: {exclamations}")

        caps_words = [w for w in _CAPS_WORD.findall(text) if w in self.CAPS_KEYWORD_WORDS]
        if caps_words:
            score += len(caps_words) * self.CAPS_WORD_SCORE
            evidence.append(f"Promotional words in caps: {', '.join(caps_words)}")

        money = [m.group(0) for m in _MONEY.finditer(text)]
        if money:
            score += self.MONEY_SCORE
            evidence.append(f"Money amounts mentioned: {', '.join(money)}")

        if score == 0:
            return None

        confidence = min(score, 1.0)
        severity = severity_from_confidence(confidence, high_above=0.7, medium_above=0.4)
        return self._signal(severity, confidence, evidence)
