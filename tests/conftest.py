# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides detection config, a controllable clock, cache stores, sample
content and a ready-to-use service. Nothing touches the network or disk.
"""

from __future__ import annotations

import pytest

from postguard.api.facade import SpamDetectionService
from postguard.cache.memory_store import MemoryCacheStore
from postguard.config.detection import DetectionConfig
from postguard.config.settings import Settings
from postguard.core.models import Signal, Verdict
from postguard.preprocessing.models import NormalizedContent
from postguard.preprocessing.normalizer import normalize


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# === FIXTURES: Configuration ===


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def detection_config() -> DetectionConfig:
    return DetectionConfig()


# === FIXTURES: Cache ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryCacheStore:
    return MemoryCacheStore(max_entries=3, default_ttl_seconds=60.0, clock=clock)


# === FIXTURES: Sample data ===


@pytest.fixture
def sample_signal() -> Signal:
    return Signal(
        kind="promotional",
        severity="medium",
        confidence=0.6,
        evidence=("2 promotional keywords: free, offer",),
        weight=0.25,
    )


@pytest.fixture
def sample_verdict(sample_signal: Signal) -> Verdict:
    return Verdict(
        decision="under_review",
        overall_score=0.6,
        confidence=0.42,
        signals=(sample_signal,),
        processing_time_ms=3.2,
        fingerprint="0123456789abcdef",
    )


@pytest.fixture
def content_factory():
    """Build NormalizedContent from raw text."""

    def _make(text: str) -> NormalizedContent:
        return normalize(text)

    return _make


# === FIXTURES: Service ===


@pytest.fixture
def service(settings: Settings) -> SpamDetectionService:
    return SpamDetectionService(settings=settings)
