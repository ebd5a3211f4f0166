# src/cache/fingerprint.py - v1
"""Content fingerprinting for cache keys and log correlation.

The fingerprint is the first 16 hex characters of SHA-256 over the trimmed,
case-folded post text. Whitespace inside the text and punctuation are kept,
so "Buy now!" and "buy now" are different posts.
"""

from __future__ import annotations

import hashlib

FINGERPRINT_LENGTH = 16


def compute_fingerprint(text: str) -> str:
    """Deterministic fixed-length identifier for a post.

    Args:
        text: Raw post text. Non-string input fingerprints as empty text.

    Returns:
        16-character lowercase hex string.
    """
    if not isinstance(text, str):
        text = ""
    # Lone surrogates (e.g. a truncated emoji from JSON) are valid str content
    data = _normalize_text(text).encode("utf-8", errors="surrogatepass")
    digest = hashlib.sha256(data).hexdigest()
    return digest[:FINGERPRINT_LENGTH]


def _normalize_text(text: str) -> str:
    """Trim surrounding whitespace and case-fold."""
    return text.strip().casefold()
