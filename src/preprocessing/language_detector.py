# src/preprocessing/language_detector.py - v1
"""Coarse English / unknown language guess.

Counts occurrences of high-frequency English words. Function words alone
miss short colloquial posts ("Just had coffee today"), so the lexicon also
carries the most frequent verbs, adverbs and time words.
"""

from __future__ import annotations

import re
from typing import Literal

MIN_ENGLISH_MATCHES = 3

_COMMON_ENGLISH_WORDS = frozenset({
    # Function words
    "the", "a", "an", "and", "or", "but", "if", "of", "to", "in", "on", "at",
    "by", "for", "with", "from", "as", "into", "about", "over", "after",
    "than", "then", "so", "because", "that", "this", "these", "those",
    "which", "who", "what", "when", "where", "how", "why",
    "i", "me", "my", "we", "us", "our", "you", "your", "he", "him", "his",
    "she", "her", "it", "its", "they", "them", "their",
    "is", "are", "was", "were", "be", "been", "am",
    "have", "has", "had", "do", "does", "did",
    "will", "would", "can", "could", "should", "may", "might", "must",
    "not", "no", "all", "any", "some", "only", "also", "very", "just",
    # Frequent verbs, adverbs and time words
    "get", "got", "go", "going", "make", "know", "think", "take", "see",
    "come", "want", "look", "use", "find", "give", "tell", "say", "said",
    "like", "love", "need", "feel", "try", "work",
    "here", "there", "now", "today", "tonight", "tomorrow", "yesterday",
    "again", "still", "really", "always", "never", "well", "good", "great",
    "new", "time", "day", "people", "one", "out", "up",
})

_WORD_PATTERN = re.compile(r"\b[a-z']+\b", re.IGNORECASE)


def count_english_markers(text: str) -> int:
    """Number of word occurrences found in the common-English lexicon."""
    return sum(
        1 for word in _WORD_PATTERN.findall(text)
        if word.lower() in _COMMON_ENGLISH_WORDS
    )


def detect_basic_language(text: str) -> Literal["en", "unknown"]:
    """Return "en" when enough common English words occur, else "unknown"."""
    if count_english_markers(text[:3000]) >= MIN_ENGLISH_MATCHES:
        return "en"
    return "unknown"
