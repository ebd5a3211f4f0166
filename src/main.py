# src/main.py - v1
"""CLI entry point: analyze, batch, stats commands.

Usage:
    postguard analyze "<post text>"
    postguard batch <file>          (one post per line)
    postguard stats

Verdicts and statistics are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from postguard.version import __version__

if TYPE_CHECKING:
    from postguard.config.settings import Settings

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings()
        _setup_logging(args.verbose, settings)
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="postguard",
        description=f"postguard v{__version__} - spam and abuse risk scoring for short posts",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- analyze ---
    p_analyze = subparsers.add_parser("analyze", help="Analyze a single post")
    p_analyze.add_argument("text", help="Post text")
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", help="Analyze every non-empty line of a file",
    )
    p_batch.add_argument("file", type=Path, help="UTF-8 text file, one post per line")
    p_batch.set_defaults(func=_cmd_batch)

    # --- stats ---
    p_stats = subparsers.add_parser("stats", help="Show service statistics")
    p_stats.set_defaults(func=_cmd_stats)

    return parser


async def _cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    """Analyze one post and print its verdict."""
    from postguard.api.facade import InputError, SpamDetectionService

    service = SpamDetectionService(settings=settings)
    try:
        verdict = await service.analyze(args.text)
    except InputError as exc:
        logger.error("%s", exc)
        return 2

    _print_json(verdict.model_dump(mode="json"))
    return 0


async def _cmd_batch(args: argparse.Namespace, settings: Settings) -> int:
    """Analyze a file of posts and print one verdict per line."""
    from postguard.api.facade import SpamDetectionService

    file_path: Path = args.file
    if not file_path.is_file():
        logger.error("File not found: %s", file_path)
        return 1

    posts = [
        line for line in file_path.read_text(encoding="utf-8").splitlines()
        if line.strip()
    ]
    service = SpamDetectionService(settings=settings)
    verdicts = await service.analyze_batch(posts)

    for verdict in verdicts:
        print(json.dumps(verdict.model_dump(mode="json")))

    counts: dict[str, int] = {}
    for verdict in verdicts:
        counts[verdict.decision] = counts.get(verdict.decision, 0) + 1
    logger.info("Batch complete: %d posts, %s", len(verdicts), counts)
    return 0


async def _cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    """Print the statistics of a freshly constructed service."""
    from postguard.api.facade import SpamDetectionService

    service = SpamDetectionService(settings=settings)
    stats = await service.stats()
    _print_json(stats.model_dump(mode="json"))
    return 0


def _load_settings() -> Settings:
    from postguard.config.settings import load_settings

    return load_settings()


def _print_json(data: dict) -> None:
    print(json.dumps(data, indent=2))


def _setup_logging(verbose: bool, settings: Settings) -> None:
    """Configure logging for CLI usage: text to stderr unless a file is set."""
    from postguard.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else "WARNING",
        log_format="text",
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
