# src/preprocessing/models.py - v1
"""Normalizer output models: NormalizedContent and ContentMetadata."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict


class ContentMetadata(BaseModel):
    """Lightweight facts about a post, derived during normalization."""

    model_config = ConfigDict(frozen=True)

    has_emoji: bool = False
    has_urls: bool = False
    has_hashtags: bool = False
    has_mentions: bool = False
    word_count: int = 0
    character_count: int = 0
    language: Literal["en", "unknown"] = "unknown"
    encoding: str = "utf-8"


class NormalizedContent(BaseModel):
    """A post as received plus its normalized form."""

    model_config = ConfigDict(frozen=True)

    original: str
    normalized: str
    metadata: ContentMetadata

    @property
    def words(self) -> list[str]:
        """Whitespace tokens of the normalized text."""
        return self.normalized.split()
