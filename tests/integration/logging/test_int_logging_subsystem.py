# tests/integration/logging/test_int_logging_subsystem.py - v1
"""Integration tests for the logging subsystem driven by real analyses.

Covers: logging/logger.py, logging/handlers.py, logging/context.py
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from postguard.api.facade import SpamDetectionService
from postguard.cache.fingerprint import compute_fingerprint
from postguard.config.settings import Settings
from postguard.logging.context import get_context
from postguard.logging.logger import ROOT_LOGGER_NAME, setup_logging
from postguard.rules.base_rule import BaseRule

POST = "Just had coffee today, lovely weather."


class _ExplodingRule(BaseRule):
    name = "exploding"
    kind = "word_patterns"

    async def extract(self, content):
        raise RuntimeError("lexicon missing")


@pytest.fixture(autouse=True)
def _reset_root_logger():
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


def _json_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


class TestRuleFailureLogging:
    @pytest.mark.asyncio
    async def test_failure_logged_with_request_context(self):
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)
        service = SpamDetectionService(
            settings=Settings(_env_file=None), rules=[_ExplodingRule(weight=0.2)],
        )

        verdict = await service.analyze(POST)

        assert verdict.decision == "allow"
        warnings = [e for e in _json_lines(stream) if e["level"] == "WARNING"]
        assert warnings
        entry = warnings[0]
        assert "exploding" in entry["message"]
        assert entry["context"]["fingerprint"] == compute_fingerprint(POST)
        assert entry["context"]["rule"] == "exploding"
        assert entry["context"]["stage"] == "rules"
        assert "RuntimeError" in entry["exception"]

    @pytest.mark.asyncio
    async def test_context_cleared_after_analysis(self):
        service = SpamDetectionService(settings=Settings(_env_file=None))
        await service.analyze(POST)
        ctx = get_context()
        assert ctx.fingerprint is None and ctx.stage is None


class TestTextAndFileOutput:
    @pytest.mark.asyncio
    async def test_text_format_includes_rule(self):
        stream = io.StringIO()
        setup_logging(level="WARNING", log_format="text", stream=stream)
        service = SpamDetectionService(
            settings=Settings(_env_file=None), rules=[_ExplodingRule(weight=0.2)],
        )
        await service.analyze(POST)
        output = stream.getvalue()
        assert "[WARNING ]" in output
        assert "[exploding]" in output
        assert "(rules)" in output

    def test_file_handler_writes_json(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "postguard.log"
        setup_logging(
            level="INFO", log_format="json", log_file=log_file, stream=io.StringIO(),
        )
        logging.getLogger(f"{ROOT_LOGGER_NAME}.test").info(
            "hello", extra={"data": {"posts": 3}},
        )
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["message"] == "hello"
        assert entry["data"] == {"posts": 3}
