# src/rules/repetitive_content_rule.py - v1
"""Repetitive content detection: character runs, repeated words and sentences."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field

from postguard.core.models import Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule, severity_from_confidence

_CHAR_RUN = re.compile(r"(\S)\1{3,}")
_NON_WORD = re.compile(r"[^\w\s]")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class _SubScore:
    score: float = 0.0
    evidence: list[str] = field(default_factory=list)


class RepetitiveContentRule(BaseRule):
    """Combine three repetition checks into one weighted confidence.

    Only checks that fire contribute, and the confidence is their weighted
    average, so a single strong check can still produce a high confidence.
    """

    name = "repetitive_content"
    kind = "repetitive_content"

    CHAR_WEIGHT = 0.3
    WORD_WEIGHT = 0.4
    SENTENCE_WEIGHT = 0.3
    MIN_WORD_LENGTH = 3
    MIN_SENTENCE_LENGTH = 11

    async def extract(self, content: NormalizedContent) -> Signal | None:
        text = content.original
        evidence: list[str] = []
        total = 0.0
        fired_weight = 0.0

        for sub, weight in (
            (self._check_characters(text), self.CHAR_WEIGHT),
            (self._check_words(text), self.WORD_WEIGHT),
            (self._check_sentences(text), self.SENTENCE_WEIGHT),
        ):
            if sub.score > 0:
                evidence.extend(sub.evidence)
                total += sub.score * weight
                fired_weight += weight

        if not evidence:
            return None

        confidence = total / fired_weight if fired_weight else 0.0
        severity = severity_from_confidence(confidence, high_above=0.7, medium_above=0.4)
        return self._signal(severity, confidence, evidence)

    def _check_characters(self, text: str) -> _SubScore:
        result = _SubScore()
        max_run = self.limits.max_repetitive_chars
        for match in _CHAR_RUN.finditer(text):
            count = len(match.group(0))
            if count > max_run:
                result.score += min((count - max_run) * 0.2, 1.0)
                result.evidence.append(
                    f'Repeated character "{match.group(1)}" {count} times in a row'
                )
        result.score = min(result.score, 1.0)
        return result

    def _check_words(self, text: str) -> _SubScore:
        result = _SubScore()
        max_repeats = self.limits.max_repetitive_words
        words = [
            w for w in _NON_WORD.sub(" ", text.lower()).split()
            if len(w) >= self.MIN_WORD_LENGTH
        ]
        for word, count in Counter(words).items():
            if count > max_repeats:
                result.score += min((count - max_repeats) * 0.3, 1.0)
                result.evidence.append(f'Word "{word}" repeated {count} times')
        result.score = min(result.score, 1.0)
        return result

    def _check_sentences(self, text: str) -> _SubScore:
        result = _SubScore()
        sentences = [
            s.strip() for s in _SENTENCE_SPLIT.split(text)
            if len(s.strip()) >= self.MIN_SENTENCE_LENGTH
        ]
        if len(sentences) < 2:
            return result

        keys = [
            _WHITESPACE.sub(" ", _NON_WORD.sub("", s.lower())).strip()
            for s in sentences
        ]
        for _, count in Counter(k for k in keys if k).items():
            if count > 1:
                result.score += count * 0.5
                result.evidence.append(f"Similar phrase repeated {count} times")
        result.score = min(result.score, 1.0)
        return result
