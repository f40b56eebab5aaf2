"""Fix application for consolefix reports."""

from fixes.apply import (
    EditConflictError,
    FixOutcome,
    apply_edits,
    apply_fixes,
    merge_edits,
)

__all__ = [
    "EditConflictError",
    "FixOutcome",
    "apply_edits",
    "apply_fixes",
    "merge_edits",
]
