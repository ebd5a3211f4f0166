# src/rules/profanity_rule.py - v1
"""Profanity and insult detection."""

from __future__ import annotations

import re

from postguard.core.models import Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule, severity_from_confidence

_TOKEN_EDGES = re.compile(r"^[^\w]+|[^\w]+$")


class ProfanityRule(BaseRule):
    """Flag posts containing profane or insulting words.

    Words are checked in the original text and, for obfuscated posts, in the
    de-leeted normalized text. confidence = min(0.8 + 0.2 * ratio, 1.0) where
    ratio is the share of profane words among all words.
    """

    name = "profanity"
    kind = "profanity"

    PROFANE_WORDS = frozenset({
        "arse", "arsehole", "ass", "asshole", "bastard", "bitch", "bitches",
        "bollocks", "bullshit", "crap", "cunt", "damn", "dick", "dickhead",
        "douche", "douchebag", "fag", "faggot", "fuck", "fucked", "fucker",
        "fucking", "jackass", "motherfucker", "piss", "pissed", "prick",
        "pussy", "retard", "shit", "shitty", "slut", "twat", "wanker", "whore",
    })
    INSULT_WORDS = frozenset({
        "hate", "loser", "losers", "stupid", "idiot", "idiots", "moron", "morons", "dumb",
    })
    LEXICON = PROFANE_WORDS | INSULT_WORDS

    BASE_CONFIDENCE = 0.8
    RATIO_BONUS = 0.2

    async def extract(self, content: NormalizedContent) -> Signal | None:
        words = content.original.lower().split()
        if not words:
            return None

        profane = [w for w in words if self._is_profane(w)]
        if not profane and content.normalized != content.original:
            words = content.normalized.lower().split()
            profane = [w for w in words if self._is_profane(w)]
        if not profane:
            return None

        ratio = len(profane) / len(words)
        confidence = min(self.BASE_CONFIDENCE + ratio * self.RATIO_BONUS, 1.0)
        severity = severity_from_confidence(ratio, high_above=0.3, medium_above=0.1)

        return self._signal(
            severity, confidence, [f'Profane word: "{w}"' for w in profane],
        )

    def _is_profane(self, token: str) -> bool:
        return _TOKEN_EDGES.sub("", token) in self.LEXICON
