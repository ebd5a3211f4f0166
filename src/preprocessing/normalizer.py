# src/preprocessing/normalizer.py - v1
"""Post normalization: encoding repair, Unicode cleanup, de-obfuscation.

Stages run in order, each on the previous stage's output:
  1. Decode HTML entities and typographic punctuation to ASCII
  2. NFC composition, strip zero-width characters and soft hyphens
  3. If the text looks deliberately obfuscated, undo leet substitutions
     and fold camel-mixed words to lowercase
  4. Collapse whitespace and cap repeated terminal punctuation at three

URLs are swapped for placeholders during stages 3-4 so they come out
verbatim. normalize() never raises.
"""

from __future__ import annotations

import re
import unicodedata

from postguard.preprocessing.language_detector import detect_basic_language
from postguard.preprocessing.models import ContentMetadata, NormalizedContent

_ENCODING_FIXES: tuple[tuple[str, str], ...] = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
    ("\u00a0", " "),
    ("\u2019", "'"),
    ("\u201c", '"'),
    ("\u201d", '"'),
    ("\u2013", "-"),
    ("\u2014", "--"),
    ("\u2026", "..."),
)

ZERO_WIDTH_CHARS = "\u200b\u200c\u200d\u2060\ufeff"
SOFT_HYPHEN = "\u00ad"
_INVISIBLE = re.compile(f"[{ZERO_WIDTH_CHARS}{SOFT_HYPHEN}]")

URL_PATTERN = re.compile(r"https?://\S+", re.IGNORECASE)
HASHTAG_PATTERN = re.compile(r"#\w+")
MENTION_PATTERN = re.compile(r"@\w+")
EMOJI_PATTERN = re.compile("[\U0001F300-\U0001F8FF\u2600-\u27bf]")

_SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b[fF]r[3e]{2,}"),               # free
    re.compile(r"\b[mM][0o]n[3e]y"),              # money
    re.compile(r"\b[wW][1i]n"),                   # win
    re.compile(r"\$\d+"),                         # money amounts
    re.compile(r"\b\d{3,}-?\d{3,}-?\d{4,}\b"),    # phone numbers
    re.compile(r"[A-Z]{3,}.*!{2,}"),              # CAPS with exclamation
)

_LEET_TABLE = str.maketrans({
    "0": "o", "1": "i", "3": "e", "4": "a", "5": "s",
    "7": "t", "8": "b", "@": "a", "$": "s", "!": "i",
})

_MIXED_CASE_WORD = re.compile(r"\b[A-Za-z]*[A-Z][a-z]+[A-Z][A-Za-z]*\b")
_WIDE_WHITESPACE = re.compile(r"\s{3,}")
_ANY_WHITESPACE = re.compile(r"\s+")
_REPEATED_TERMINAL = re.compile(r"([.!?])\1{3,}")

# A private-use code point not already in the post stands in for every URL.
# It is not a word character or whitespace, and the leet table leaves it alone.
_SENTINEL_RANGE = (0xE000, 0xF900)


def normalize(raw: object) -> NormalizedContent:
    """Normalize a post and derive its metadata.

    Args:
        raw: Post text. Anything other than a str is treated as "".

    Returns:
        NormalizedContent with original text, normalized text and metadata.
    """
    original = raw if isinstance(raw, str) else ""

    text = fix_encoding(original)
    text = normalize_unicode(text)
    text, sentinel, urls = _protect_urls(text)
    text = neutralize_obfuscation(text)
    text = collapse_whitespace_and_punctuation(text)
    text = _restore_urls(text, sentinel, urls)

    return NormalizedContent(
        original=original,
        normalized=text,
        metadata=build_metadata(original, text),
    )


def fix_encoding(text: str) -> str:
    """Decode common HTML entities and typographic punctuation."""
    for encoded, plain in _ENCODING_FIXES:
        text = text.replace(encoded, plain)
    return text


def normalize_unicode(text: str) -> str:
    """NFC-compose and remove zero-width characters and soft hyphens."""
    return _INVISIBLE.sub("", unicodedata.normalize("NFC", text))


def has_suspicious_patterns(text: str) -> bool:
    """Whether the text shows signs of deliberate obfuscation."""
    return any(pattern.search(text) for pattern in _SUSPICIOUS_PATTERNS)


def neutralize_obfuscation(text: str) -> str:
    """Undo leet substitutions and mixed-case tricks in suspicious text only."""
    if has_suspicious_patterns(text):
        text = text.translate(_LEET_TABLE)
        if has_suspicious_patterns(text):
            text = _MIXED_CASE_WORD.sub(lambda m: m.group(0).lower(), text)
    return _WIDE_WHITESPACE.sub(" ", text)


def collapse_whitespace_and_punctuation(text: str) -> str:
    """Single-space the text and cap runs of . ! ? at three."""
    text = _ANY_WHITESPACE.sub(" ", text.strip())
    return _REPEATED_TERMINAL.sub(lambda m: m.group(1) * 3, text)


def build_metadata(original: str, normalized: str) -> ContentMetadata:
    """Derive metadata; URL, tag and emoji flags come from the original."""
    return ContentMetadata(
        has_emoji=bool(EMOJI_PATTERN.search(original)),
        has_urls=bool(URL_PATTERN.search(original)),
        has_hashtags=bool(HASHTAG_PATTERN.search(original)),
        has_mentions=bool(MENTION_PATTERN.search(original)),
        word_count=len(normalized.split()),
        character_count=len(normalized),
        # Leet folding mangles words ("NOW!!!" -> "NOWiii"), so guess on the original
        language=detect_basic_language(original),
    )


def _protect_urls(text: str) -> tuple[str, str, list[str]]:
    """Swap each URL for one sentinel code point absent from the text."""
    sentinel = next(
        (chr(cp) for cp in range(*_SENTINEL_RANGE) if chr(cp) not in text), "",
    )
    if not sentinel:
        return text, "", []

    urls: list[str] = []

    def _swap(match: re.Match[str]) -> str:
        urls.append(match.group(0))
        return sentinel

    return URL_PATTERN.sub(_swap, text), sentinel, urls


def _restore_urls(text: str, sentinel: str, urls: list[str]) -> str:
    """Put URLs back in order; every sentinel in the text is one of ours."""
    if not urls:
        return text
    pending = iter(urls)
    return re.sub(re.escape(sentinel), lambda _: next(pending), text)
