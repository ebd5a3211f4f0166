# src/rules/suspicious_links_rule.py - v1
"""Suspicious link detection: shorteners, risky hosts, misleading link text."""

from __future__ import annotations

import re
from collections import Counter
from urllib.parse import urlsplit

from postguard.core.models import Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule, severity_from_confidence

_URL = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
_URL_TRAILING = ").,;:!?]"
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


class SuspiciousLinksRule(BaseRule):
    """Score the URLs in a post. No URL, no signal."""

    name = "suspicious_links"
    kind = "suspicious_links"

    SHORTENER_DOMAINS = frozenset({
        "bit.ly", "tinyurl.com", "short.link", "rb.gy", "t.co",
        "goo.gl", "ow.ly", "buff.ly", "tiny.cc", "is.gd",
    })
    RISKY_HOST_PATTERNS: tuple[re.Pattern[str], ...] = (
        re.compile(r"\b\w+\.tk\b", re.IGNORECASE),
        re.compile(r"\b\w+\.ml\b", re.IGNORECASE),
        re.compile(r"\b\w+\.ga\b", re.IGNORECASE),
        re.compile(r"\b\w+\.cf\b", re.IGNORECASE),
        re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b"),
        re.compile(r"\b[a-z0-9-]+\.(?:biz|info|click|download|top)\b", re.IGNORECASE),
    )
    MALICIOUS_KEYWORDS: tuple[str, ...] = (
        "phishing", "malware", "virus", "hack", "crack", "keygen",
        "download-now", "click-here", "get-free", "no-survey",
    )

    EXCESS_URL_SCORE = 0.3
    SHORTENER_SCORE = 0.4
    RISKY_HOST_SCORE = 0.5
    MALICIOUS_SCORE = 0.6
    MISLEADING_TEXT_SCORE = 0.3
    SAME_DOMAIN_LIMIT = 2
    SAME_DOMAIN_SCORE = 0.2

    async def extract(self, content: NormalizedContent) -> Signal | None:
        text = content.original
        urls = extract_urls(text)
        if not urls:
            return None

        evidence: list[str] = []
        score = 0.0
        max_urls = self.limits.max_urls_per_post

        if len(urls) > max_urls:
            score += (len(urls) - max_urls) * self.EXCESS_URL_SCORE
            evidence.append(
                f"Too many URLs: {len(urls)} (max recommended: {max_urls})"
            )

        hosts = [_hostname(url) for url in urls]

        shortened = [h for h in hosts if h and self._is_shortener(h)]
        if shortened:
            score += len(shortened) * self.SHORTENER_SCORE
            evidence.append(f"Shortened URLs detected: {len(shortened)}")

        for pattern in self.RISKY_HOST_PATTERNS:
            matches = [m.group(0) for m in pattern.finditer(" ".join(urls))]
            if matches:
                score += len(matches) * self.RISKY_HOST_SCORE
                evidence.append(f"Suspicious domain pattern: {matches[0]}")

        malicious = [
            url for url in urls
            if any(kw in url.lower() for kw in self.MALICIOUS_KEYWORDS)
        ]
        if malicious:
            score += len(malicious) * self.MALICIOUS_SCORE
            evidence.append(f"URLs with suspicious keywords: {len(malicious)}")

        for match in _MARKDOWN_LINK.finditer(text):
            label, target = match.group(1), match.group(2)
            lowered = label.lower()
            if "click here" in lowered or "download" in lowered or lowered != target.lower():
                score += self.MISLEADING_TEXT_SCORE
                evidence.append(f'Misleading link text: "{label}"')

        for host, count in Counter(h for h in hosts if h).items():
            if count > self.SAME_DOMAIN_LIMIT:
                score += (count - self.SAME_DOMAIN_LIMIT) * self.SAME_DOMAIN_SCORE
                evidence.append(f"Multiple links to same domain: {host} ({count} times)")

        if score == 0:
            return None

        confidence = min(score, 1.0)
        severity = severity_from_confidence(confidence, high_above=0.8, medium_above=0.5)
        return self._signal(severity, confidence, evidence)

    def _is_shortener(self, host: str) -> bool:
        return any(
            host == domain or host.endswith(f".{domain}")
            for domain in self.SHORTENER_DOMAINS
        )


def extract_urls(text: str) -> list[str]:
    """All http(s) URLs in order of appearance, trailing punctuation removed."""
    return [m.group(0).rstrip(_URL_TRAILING) for m in _URL.finditer(text)]


def _hostname(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None
