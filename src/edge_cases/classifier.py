# src/edge_cases/classifier.py - v1
"""Fast edge-case checks that can decide a post before any rule runs.

The checks form a fixed, ordered chain; the first one that fires wins and
the rest are not evaluated:
  1. Empty or meaningless content           -> reject
  2. Extremely short or long content        -> flag
  3. Encoding anomalies                     -> manual_review
  4. Obfuscation (zero-width, homograph,
     symbol substitution)                   -> reject / flag
  5. Unknown language at suspicious length  -> flag
  6. Special-character density              -> flag
  7. Link/hashtag-only posts, mention spam  -> flag

Short-circuit verdicts carry fixed literal scores per decision and a fixed
confidence; they are not derived from evidence.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from postguard.cache.fingerprint import compute_fingerprint
from postguard.core.models import Decision, RecommendedAction, Signal, Verdict
from postguard.edge_cases.models import ACTION_TO_DECISION, NOT_HANDLED, EdgeCaseOutcome
from postguard.preprocessing.models import NormalizedContent
from postguard.preprocessing.normalizer import MENTION_PATTERN, ZERO_WIDTH_CHARS

logger = logging.getLogger(__name__)

SHORT_CIRCUIT_SCORES: dict[Decision, float] = {
    "reject": 0.9,
    "flag": 0.5,
    "under_review": 0.3,
    "allow": 0.0,
}
SHORT_CIRCUIT_CONFIDENCE = 0.8
SHORT_CIRCUIT_PROCESSING_MS = 1.0

MIN_CHARACTERS = 3
MAX_CHARACTERS = 2000
MAX_SHRINKAGE_RATIO = 0.5
SHRINKAGE_MIN_LENGTH = 20
MAX_CONTROL_CHARS = 5
MAX_ZERO_WIDTH_CHARS = 10
MAX_SYMBOL_RATIO = 0.3
UNKNOWN_LANGUAGE_WORDS = range(5, 20)
MAX_SPECIAL_CHAR_RATIO = 0.4
SPECIAL_CHAR_MIN_LENGTH = 50
MIN_WORDS_WITH_LINKS = 3
MAX_MENTIONS = 5

# Tab, newline and carriage return are ordinary formatting in posts.
_CONTROL_CHARS = re.compile(r"[\ufffd\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_ZERO_WIDTH = re.compile(f"[{ZERO_WIDTH_CHARS}]")
_CYRILLIC = re.compile(r"[\u0400-\u04ff]")
_LATIN = re.compile(r"[A-Za-z]")
_SUBSTITUTION_SYMBOLS = re.compile(r"[0-9@$!]")
_SPECIAL_CHARS = re.compile(r"[^\w\s.,!?@#-]")

OBFUSCATION_SIGNAL_CONFIDENCE = 0.9


class EdgeCaseClassifier:
    """Ordered chain of edge-case predicates over normalized content.

    Args:
        character_pattern_weight: Weight of the character_patterns signal
            attached to obfuscation verdicts.
    """

    def __init__(self, character_pattern_weight: float = 0.1) -> None:
        self._character_pattern_weight = character_pattern_weight
        self._checks: tuple[Callable[[NormalizedContent], EdgeCaseOutcome], ...] = (
            self._check_empty,
            self._check_extreme_length,
            self._check_encoding,
            self._check_obfuscation,
            self._check_language,
            self._check_special_characters,
            self._check_context,
        )

    def classify(self, content: NormalizedContent) -> EdgeCaseOutcome:
        """Run the chain; return the first outcome that handles the post.

        A failing check is absorbed into a manual_review outcome.
        """
        try:
            for check in self._checks:
                outcome = check(content)
                if outcome.handled:
                    logger.debug(
                        "Edge case %s: %s", check.__name__, outcome.reason,
                    )
                    return outcome
        except Exception as e:
            logger.warning("Edge-case classification failed: %s", e, exc_info=True)
            return self._handled(
                content, f"Preprocessing error: {e}", "manual_review",
            )
        return NOT_HANDLED

    # --- Checks ---

    def _check_empty(self, content: NormalizedContent) -> EdgeCaseOutcome:
        if not content.normalized.strip():
            return self._handled(content, "Empty content after preprocessing", "reject")
        if content.metadata.word_count == 0:
            return self._handled(content, "No meaningful words found", "reject")
        return NOT_HANDLED

    def _check_extreme_length(self, content: NormalizedContent) -> EdgeCaseOutcome:
        chars = content.metadata.character_count
        if chars < MIN_CHARACTERS and content.metadata.word_count == 1:
            return self._handled(content, "Extremely short content", "flag")
        if chars > MAX_CHARACTERS:
            return self._handled(content, "Content exceeds reasonable length", "flag")
        return NOT_HANDLED

    def _check_encoding(self, content: NormalizedContent) -> EdgeCaseOutcome:
        original_length = len(content.original)
        if original_length > SHRINKAGE_MIN_LENGTH:
            shrinkage = (original_length - len(content.normalized)) / original_length
            if shrinkage > MAX_SHRINKAGE_RATIO:
                return self._handled(
                    content,
                    "Significant character loss during preprocessing - possible encoding issues",
                    "manual_review",
                )

        issues = len(_CONTROL_CHARS.findall(content.original))
        if issues > MAX_CONTROL_CHARS:
            return self._handled(
                content, "Multiple Unicode encoding issues detected", "manual_review",
            )
        return NOT_HANDLED

    def _check_obfuscation(self, content: NormalizedContent) -> EdgeCaseOutcome:
        original = content.original

        zero_width = len(_ZERO_WIDTH.findall(original))
        if zero_width > MAX_ZERO_WIDTH_CHARS:
            return self._obfuscation(
                content,
                "Excessive zero-width characters detected (obfuscation attempt)",
                "reject",
                "zero_width_abuse",
            )

        if _CYRILLIC.search(original) and _LATIN.search(original):
            return self._obfuscation(
                content, "Potential homograph attack detected", "flag", "homograph_attack",
            )

        letters = len(_LATIN.findall(original))
        symbols = len(_SUBSTITUTION_SYMBOLS.findall(original))
        if letters > 0 and symbols / letters > MAX_SYMBOL_RATIO:
            return self._obfuscation(
                content,
                "Excessive symbol substitution detected",
                "flag",
                "symbol_substitution",
            )
        return NOT_HANDLED

    def _check_language(self, content: NormalizedContent) -> EdgeCaseOutcome:
        meta = content.metadata
        if meta.language == "unknown" and meta.word_count in UNKNOWN_LANGUAGE_WORDS:
            return self._handled(
                content, "Unknown language with suspicious length", "flag",
            )
        return NOT_HANDLED

    def _check_special_characters(self, content: NormalizedContent) -> EdgeCaseOutcome:
        original = content.original
        if len(original) > SPECIAL_CHAR_MIN_LENGTH:
            ratio = len(_SPECIAL_CHARS.findall(original)) / len(original)
            if ratio > MAX_SPECIAL_CHAR_RATIO:
                return self._handled(
                    content, "Excessive special characters detected", "flag",
                )
        return NOT_HANDLED

    def _check_context(self, content: NormalizedContent) -> EdgeCaseOutcome:
        meta = content.metadata
        if (meta.has_urls or meta.has_hashtags) and meta.word_count < MIN_WORDS_WITH_LINKS:
            return self._handled(content, "Minimal text with URLs/hashtags", "flag")

        mentions = len(MENTION_PATTERN.findall(content.original))
        if mentions > MAX_MENTIONS:
            return self._handled(content, f"Excessive mentions: {mentions}", "flag")
        return NOT_HANDLED

    # --- Outcome builders ---

    def _obfuscation(
        self,
        content: NormalizedContent,
        reason: str,
        action: RecommendedAction,
        technique: str,
    ) -> EdgeCaseOutcome:
        signal = Signal(
            kind="character_patterns",
            severity="high",
            confidence=OBFUSCATION_SIGNAL_CONFIDENCE,
            evidence=(f"Obfuscation detected: {technique}",),
            weight=self._character_pattern_weight,
        )
        return self._handled(content, reason, action, signals=(signal,))

    @staticmethod
    def _handled(
        content: NormalizedContent,
        reason: str,
        action: RecommendedAction,
        signals: tuple[Signal, ...] = (),
    ) -> EdgeCaseOutcome:
        decision = ACTION_TO_DECISION[action]
        verdict = Verdict(
            decision=decision,
            overall_score=SHORT_CIRCUIT_SCORES[decision],
            confidence=SHORT_CIRCUIT_CONFIDENCE,
            signals=signals,
            processing_time_ms=SHORT_CIRCUIT_PROCESSING_MS,
            fingerprint=compute_fingerprint(content.original),
        )
        return EdgeCaseOutcome(
            handled=True, reason=reason, recommended_action=action, verdict=verdict,
        )
