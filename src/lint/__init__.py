"""Lint and fix pipeline for consolefix."""

from lint.runner import (
    MAX_FIX_PASSES,
    FixResult,
    SourceParseError,
    build_scope_tree,
    fix_path,
    fix_source,
    lint_path,
    lint_source,
)

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
