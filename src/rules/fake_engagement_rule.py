# src/rules/fake_engagement_rule.py - v1
"""Fake engagement detection: follow/like/retweet exchanges and follower bait."""

from __future__ import annotations

import re

from postguard.core.models import Signal
from postguard.preprocessing.models import NormalizedContent
from postguard.rules.base_rule import BaseRule, contains_phrase, severity_from_confidence

_ENGAGEMENT_HASHTAG = re.compile(r"#(?:follow|like|rt)\w*", re.IGNORECASE)


class FakeEngagementRule(BaseRule):
    """Score engagement-farming language; contributions are summed and capped."""

    name = "fake_engagement"
    kind = "fake_engagement"

    ENGAGEMENT_PHRASES: tuple[str, ...] = (
        # Follow for follow
        "follow for follow", "f4f", "follow4follow", "followforfollow",
        "follow back", "follow me", "followback", "follow train",
        # Like for like
        "like for like", "l4l", "like4like", "likeforlike",
        "like back", "like this", "likeback",
        # Retweet for retweet
        "rt for rt", "r4r", "rt4rt", "retweet for retweet",
        "retweet back", "rt back", "rtback",
        # General engagement bait
        "engagement", "boost this", "help me grow", "grow my account",
        "need followers", "gain followers", "get followers",
        "mutual follow", "mutual following", "follow everyone back",
    )
    ENGAGEMENT_HASHTAGS: tuple[str, ...] = (
        "#followback", "#f4f", "#follow4follow", "#followforfollow",
        "#like4like", "#l4l", "#likeforlike", "#likeback",
        "#rt4rt", "#retweet4retweet", "#rtback", "#followtrain",
        "#gainfollow", "#needfollowers", "#followme", "#followeveryone",
    )
    FOLLOWER_COUNT_PATTERNS: tuple[re.Pattern[str], ...] = (
        re.compile(r"follow.*(?:\d{1,3}k|\d{4,})", re.IGNORECASE),   # follow me to 10k
        re.compile(r"(?:\d{1,3}k|\d{4,}).*follow", re.IGNORECASE),   # 10k followers
        re.compile(r"\d+\s*%.*follow", re.IGNORECASE),               # 100% follow back
        re.compile(r"follow.*\d+\s*%", re.IGNORECASE),               # follow back 100%
    )
    PROMISE_PATTERNS: tuple[re.Pattern[str], ...] = (
        re.compile(r"i(?:'ll| will)? follow.*back", re.IGNORECASE),
        re.compile(r"follow.*everyone.*back", re.IGNORECASE),
        re.compile(r"100%.*follow", re.IGNORECASE),
        re.compile(r"always follow back", re.IGNORECASE),
        re.compile(r"instant follow back", re.IGNORECASE),
    )
    ACTION_WORDS: tuple[str, ...] = ("follow", "like", "rt", "retweet", "share", "comment")

    PHRASE_SCORE = 0.4
    HASHTAG_SCORE = 0.3
    FOLLOWER_COUNT_SCORE = 0.25
    HASHTAG_DENSITY_THRESHOLD = 3
    HASHTAG_DENSITY_SCORE = 0.1
    PROMISE_SCORE = 0.35
    ACTION_THRESHOLD = 2
    ACTION_SCORE = 0.1

    async def extract(self, content: NormalizedContent) -> Signal | None:
        text = content.original
        evidence: list[str] = []
        score = 0.0

        phrases = [p for p in self.ENGAGEMENT_PHRASES if contains_phrase(text, p)]
        if phrases:
            score += len(phrases) * self.PHRASE_SCORE
            evidence.append(f"Fake engagement phrases: {', '.join(phrases[:3])}")

        hashtags = [h for h in self.ENGAGEMENT_HASHTAGS if contains_phrase(text, h)]
        if hashtags:
            score += len(hashtags) * self.HASHTAG_SCORE
            evidence.append(f"Fake engagement hashtags: {', '.join(hashtags[:3])}")

        for pattern in self.FOLLOWER_COUNT_PATTERNS:
            match = pattern.search(text)
            if match:
                score += self.FOLLOWER_COUNT_SCORE
                evidence.append(f'Suspicious follower mention: "{match.group(0)}"')

        engagement_tags = len(_ENGAGEMENT_HASHTAG.findall(text))
        if engagement_tags > self.HASHTAG_DENSITY_THRESHOLD:
            score += engagement_tags * self.HASHTAG_DENSITY_SCORE
            evidence.append(f"Excessive engagement hashtags: {engagement_tags}")

        if any(p.search(text) for p in self.PROMISE_PATTERNS):
            score += self.PROMISE_SCORE
            evidence.append("Contains follow-back promise")

        actions = [a for a in self.ACTION_WORDS if contains_phrase(text, a)]
        if len(actions) > self.ACTION_THRESHOLD:
            score += len(actions) * self.ACTION_SCORE
            evidence.append(f"Multiple engagement actions: {', '.join(actions)}")

        if score == 0:
            return None

        confidence = min(score, 1.0)
        severity = severity_from_confidence(confidence, high_above=0.8, medium_above=0.5)
        return self._signal(severity, confidence, evidence)
