# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: decision thresholds,
rule weights, analysis limits, cache sizing and logging. The detection core
never reads Settings directly; it receives an immutable DetectionConfig
derived from it (see config/detection.py).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Decision thresholds (upper bounds, evaluated low -> high) ===
    threshold_allow: float = 0.2
    threshold_flag: float = 0.5
    threshold_under_review: float = 0.7

    # === Rule weights ===
    weight_profanity: float = 0.3
    weight_repetitive_content: float = 0.2
    weight_promotional: float = 0.25
    weight_suspicious_links: float = 0.35
    weight_caps_abuse: float = 0.15
    weight_fake_engagement: float = 0.25
    weight_character_patterns: float = 0.1
    weight_word_patterns: float = 0.2
    weight_sentence_structure: float = 0.15

    # === Analysis limits ===
    max_caps_ratio: float = 0.7
    max_repetitive_chars: int = 3
    max_repetitive_words: int = 2
    max_urls_per_post: int = 2

    # === Engine ===
    performance_target_ms: float = 50.0
    batch_max_concurrency: int = 32
    disabled_rules: str = ""

    # === Cache ===
    cache_enabled: bool = True
    cache_max_entries: int = 10_000
    cache_default_ttl_seconds: float = 3600.0

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        thresholds = (
            self.threshold_allow, self.threshold_flag, self.threshold_under_review,
        )
        if any(t < 0.0 or t > 1.0 for t in thresholds):
            errors.append("THRESHOLD_* values must lie in [0, 1]")
        if not (thresholds[0] < thresholds[1] < thresholds[2]):
            errors.append(
                "THRESHOLD_ALLOW < THRESHOLD_FLAG < THRESHOLD_UNDER_REVIEW must hold"
            )

        for name, weight in self.rule_weights.items():
            if weight <= 0:
                errors.append(f"WEIGHT_{name.upper()} must be > 0")

        if not 0.0 < self.max_caps_ratio < 1.0:
            errors.append("MAX_CAPS_RATIO must lie in (0, 1)")

        for name in ("cache_max_entries", "batch_max_concurrency", "max_urls_per_post"):
            if getattr(self, name) <= 0:
                errors.append(f"{name.upper()} must be > 0")

        if self.cache_default_ttl_seconds <= 0:
            errors.append("CACHE_DEFAULT_TTL_SECONDS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def rule_weights(self) -> dict[str, float]:
        """Weights keyed by signal kind."""
        return {
            "profanity": self.weight_profanity,
            "repetitive_content": self.weight_repetitive_content,
            "promotional": self.weight_promotional,
            "suspicious_links": self.weight_suspicious_links,
            "caps_abuse": self.weight_caps_abuse,
            "fake_engagement": self.weight_fake_engagement,
            "character_patterns": self.weight_character_patterns,
            "word_patterns": self.weight_word_patterns,
            "sentence_structure": self.weight_sentence_structure,
        }

    @property
    def disabled_rules_list(self) -> list[str]:
        """Parse comma-separated disabled rule names."""
        return [r.strip() for r in self.disabled_rules.split(",") if r.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-deployment config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
