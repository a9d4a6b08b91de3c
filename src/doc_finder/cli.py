"""Command line front end for the doc-finder engine."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson
from pydantic import ValidationError

from doc_finder.config import Settings
from doc_finder.engine import DocFinder
from doc_finder.errors import DocFinderError
from doc_finder.observability.logging import configure_logging
from doc_finder.observability.tracing import init_tracing
from doc_finder.search.models import Result


logger = logging.getLogger(__name__)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doc-finder",
        description="Index text documents and search them by word",
    )
    parser.add_argument(
        "--store",
        help="Store URL: sqlite:///path, memory:// or a SQLite file path (default: DOC_FINDER_STORE_URL)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        help="Override DOC_FINDER_LOG_LEVEL",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON log lines on stderr",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    noise = commands.add_parser("noise", help="Register every word of FILE as a noise word")
    noise.add_argument("files", nargs="+", type=Path, metavar="FILE")

    add = commands.add_parser("add", help="Index FILE under its base name")
    add.add_argument("files", nargs="+", type=Path, metavar="FILE")

    show = commands.add_parser("show", help="Print the stored content of a document")
    show.add_argument("name", metavar="NAME")

    find = commands.add_parser("find", help="Search documents and print ranked results")
    find.add_argument("query", nargs="+", metavar="QUERY")
    find.add_argument("--json", action="store_true", help="Print results as JSON")
    find.add_argument("--start", type=int, default=0, help="Index of the first result to print")
    find.add_argument("--count", type=int, help="Maximum number of results to print")

    complete = commands.add_parser("complete", help="Print completions of the last word of TEXT")
    complete.add_argument("text", metavar="TEXT")
    complete.add_argument("--json", action="store_true", help="Print completions as a JSON array")

    commands.add_parser("clear", help="Erase all documents, noise words and completions")
    return parser


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "find":
        if args.start < 0:
            raise ValueError("--start must be >= 0")
        if args.count is not None and args.count < 0:
            raise ValueError("--count must be >= 0")


def _write(text: str) -> None:
    sys.stdout.write(text)


def _write_json(payload: object) -> None:
    _write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")


def _page(results: list[Result], start: int, count: int | None) -> list[Result]:
    end = None if count is None else start + count
    return results[start:end]


def _run_command(finder: DocFinder, args: argparse.Namespace) -> None:
    command = args.command
    if command == "noise":
        for path in args.files:
            finder.add_noise_words(path.read_text(encoding="utf-8"))
        logger.info("Noise words now: %d", len(finder.noise_words))
    elif command == "add":
        for path in args.files:
            finder.add_content(path.name, path.read_text(encoding="utf-8"))
    elif command == "show":
        _write(finder.doc_content(args.name))
    elif command == "find":
        results = _page(finder.find(" ".join(args.query)), args.start, args.count)
        if args.json:
            _write_json([result.to_dict() for result in results])
        else:
            for result in results:
                _write(f"{result}\n")
    elif command == "complete":
        completions = finder.complete(args.text)
        if args.json:
            _write_json(completions)
        else:
            for word in completions:
                _write(f"{word}\n")
    elif command == "clear":
        finder.clear()
        logger.info("Store cleared")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return 1

    configure_logging(
        level=args.log_level or settings.log_level,
        json_output=args.json_logs or settings.log_json,
    )
    if settings.tracing_enabled:
        init_tracing(settings.service_name, span_stream=sys.stderr)

    try:
        _validate_args(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return 1

    try:
        with DocFinder.create(args.store, settings=settings) as finder:
            _run_command(finder, args)
    except DocFinderError as exc:
        logger.error("%s failed [%s]: %s", args.command, exc.code, exc)
        return 1
    except ValueError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    except OSError as exc:
        logger.error("Cannot read input: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
