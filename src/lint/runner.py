"""Per-file lint and fix pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fixes.apply import apply_fixes
from parse.treesitter_js import iter_error_nodes, parse_source
from rules.config import ConsoleFixConfig
from rules.registry import RULES
from scope.analyzer import analyze_scopes
from utils import display_path

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from rules.models import Report
    from rules.registry import Rule
    from scope.model import ScopeTree

logger = logging.getLogger(__name__)

MAX_FIX_PASSES = 10


class SourceParseError(Exception):
    """Raised when a file is not valid UTF-8 or does not parse as JavaScript."""

    def __init__(
        self, filename: str, line: int, col: int, reason: str = "syntax error"
    ) -> None:
        self.filename = filename
        self.line = line
        self.col = col
        self.reason = reason
        super().__init__(f"{filename}:{line}:{col}: {reason}")


@dataclass(frozen=True)
class FixResult:
    output: bytes
    changed: bool
    fixed: int = 0
    passes: int = 0
    remaining: tuple[Report, ...] = field(default_factory=tuple)


def _check_utf8(source: bytes, filename: str) -> None:
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_start = source.rfind(b"\n", 0, exc.start) + 1
        raise SourceParseError(
            filename,
            source.count(b"\n", 0, exc.start) + 1,
            exc.start - line_start + 1,
            reason="invalid UTF-8",
        ) from exc


def build_scope_tree(
    source: bytes,
    filename: str,
    config: ConsoleFixConfig | None = None,
) -> ScopeTree:
    """Parse ``source`` and analyze its scopes.

    Raises:
        SourceParseError: If the source is not valid UTF-8 or contains
            syntax errors.
    """
    _check_utf8(source, filename)
    if config is None:
        config = ConsoleFixConfig()

    tree = parse_source(source)
    error_node = next(iter_error_nodes(tree.root_node), None)
    if error_node is not None:
        raise SourceParseError(
            filename,
            error_node.start_point[0] + 1,
            error_node.start_point[1] + 1,
        )

    return analyze_scopes(tree.root_node, source, config.globals)


def lint_source(
    source: bytes,
    filename: str,
    config: ConsoleFixConfig | None = None,
    rules: Iterable[Rule] | None = None,
) -> list[Report]:
    """Run every rule over one file and return its reports in source order."""
    scope_tree = build_scope_tree(source, filename, config)

    reports: list[Report] = []
    for rule in RULES.values() if rules is None else rules:
        reports.extend(rule.run(scope_tree, filename))

    reports.sort(
        key=lambda report: (report.loc.start_line, report.loc.start_col, report.rule_id)
    )
    return reports


def fix_source(
    source: bytes,
    filename: str,
    config: ConsoleFixConfig | None = None,
    *,
    max_passes: int = MAX_FIX_PASSES,
) -> FixResult:
    """Repeatedly lint and apply fixes until nothing more can be fixed.

    A pass whose output no longer parses is discarded and fixing stops with
    the last good output.

    Raises:
        SourceParseError: If the input source contains syntax errors.
    """
    current = source
    reports = lint_source(current, filename, config)
    fixed = 0
    passes = 0

    while passes < max_passes and any(report.fixable for report in reports):
        outcome = apply_fixes(current, reports)
        if outcome.applied == 0:
            break
        passes += 1

        try:
            next_reports = lint_source(outcome.output, filename, config)
        except SourceParseError as exc:
            logger.warning("%s: discarding fix pass %d: %s", filename, passes, exc)
            break

        current = outcome.output
        fixed += outcome.applied
        reports = next_reports

    return FixResult(
        output=current,
        changed=current != source,
        fixed=fixed,
        passes=passes,
        remaining=tuple(reports),
    )


def lint_path(
    path: Path,
    root: Path,
    config: ConsoleFixConfig | None = None,
) -> list[Report]:
    return lint_source(path.read_bytes(), display_path(path, root), config)


def fix_path(
    path: Path,
    root: Path,
    config: ConsoleFixConfig | None = None,
) -> FixResult:
    """Fix one file in place; the file is only written when it changed."""
    result = fix_source(path.read_bytes(), display_path(path, root), config)
    if result.changed:
        path.write_bytes(result.output)
        logger.info("%s: applied %d fix(es)", display_path(path, root), result.fixed)
    return result


__all__ = [
    "MAX_FIX_PASSES",
    "FixResult",
    "SourceParseError",
    "build_scope_tree",
    "fix_path",
    "fix_source",
    "lint_path",
    "lint_source",
]
