"""Command-line interface for consolefix."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from lint.runner import SourceParseError, fix_path, lint_path
from rules.config import ConfigError, ConsoleFixConfig, load_config
from scan.files import find_source_files
from utils import display_path

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_ERROR = 2


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="consolefix")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check", help="Report native console calls"
    )
    _add_common_paths(check_parser)
    check_parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format (default: text)",
    )

    fix_parser = subparsers.add_parser(
        "fix", help="Rewrite native console calls in place"
    )
    _add_common_paths(fix_parser)

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _iter_files(root: Path, config: ConsoleFixConfig) -> list[Path]:
    return list(
        find_source_files(
            root,
            extensions=config.extensions,
            include_patterns=config.include,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )
    )


def _handle_check(root: Path, config: ConsoleFixConfig, output_format: str) -> int:
    problem_count = 0
    parse_failures = 0
    for file_path in _iter_files(root, config):
        try:
            reports = lint_path(file_path, root, config)
        except SourceParseError as exc:
            sys.stderr.write(f"{exc}\n")
            parse_failures += 1
            continue

        for report in reports:
            problem_count += 1
            if output_format == "json":
                payload = orjson.dumps(
                    report.model_dump(), option=orjson.OPT_SORT_KEYS
                )
                sys.stdout.write(payload.decode("utf-8") + "\n")
            else:
                sys.stdout.write(
                    f"{report.location()}: {report.message} [{report.rule_id}]\n"
                )

    if parse_failures:
        return EXIT_ERROR
    return EXIT_PROBLEMS if problem_count else EXIT_OK


def _handle_fix(root: Path, config: ConsoleFixConfig) -> int:
    remaining = 0
    parse_failures = 0
    for file_path in _iter_files(root, config):
        try:
            result = fix_path(file_path, root, config)
        except SourceParseError as exc:
            sys.stderr.write(f"{exc}\n")
            parse_failures += 1
            continue

        if result.changed:
            relative = display_path(file_path, root)
            sys.stdout.write(f"{relative}: fixed {result.fixed} problem(s)\n")
        for report in result.remaining:
            remaining += 1
            sys.stderr.write(
                f"{report.location()}: {report.message} [{report.rule_id}]\n"
            )

    if parse_failures:
        return EXIT_ERROR
    return EXIT_PROBLEMS if remaining else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    root = Path(args.root).expanduser().resolve()
    try:
        config = load_config(root)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_ERROR

    if args.command == "check":
        return _handle_check(root, config, args.format)

    if args.command == "fix":
        return _handle_fix(root, config)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
