"""Apply report fixes to source bytes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rules.models import TextEdit

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rules.models import Report

logger = logging.getLogger(__name__)


class EditConflictError(ValueError):
    """Raised when the edits of a single fix overlap each other."""


@dataclass(frozen=True)
class FixOutcome:
    output: bytes
    applied: int
    skipped: int


def _sorted_edits(edits: Iterable[TextEdit]) -> list[TextEdit]:
    return sorted(edits, key=lambda edit: (edit.start, edit.end))


def merge_edits(edits: Sequence[TextEdit], source: bytes) -> TextEdit:
    """Fold the edits of one fix into a single contiguous edit.

    The merged edit spans from the first edit's start to the last edit's end;
    untouched source between the edits is carried over verbatim.

    Raises:
        EditConflictError: If two edits overlap, or an edit is out of range.
    """
    if not edits:
        msg = "cannot merge an empty edit list"
        raise EditConflictError(msg)

    ordered = _sorted_edits(edits)
    for edit in ordered:
        if edit.start > edit.end or edit.end > len(source):
            msg = f"edit [{edit.start}, {edit.end}) is outside the source"
            raise EditConflictError(msg)

    if len(ordered) == 1:
        return ordered[0]

    pieces: list[bytes] = []
    position = ordered[0].start
    for edit in ordered:
        if edit.start < position:
            msg = f"edit [{edit.start}, {edit.end}) overlaps a previous edit"
            raise EditConflictError(msg)
        pieces.append(source[position : edit.start])
        pieces.append(edit.text.encode("utf-8"))
        position = edit.end

    return TextEdit(
        start=ordered[0].start,
        end=position,
        text=b"".join(pieces).decode("utf-8"),
    )


def apply_edits(source: bytes, edits: Iterable[TextEdit]) -> bytes:
    """Apply non-overlapping edits; the result does not depend on input order."""
    pieces: list[bytes] = []
    position = 0
    for edit in _sorted_edits(edits):
        if edit.start < position:
            msg = f"edit [{edit.start}, {edit.end}) overlaps a previous edit"
            raise EditConflictError(msg)
        pieces.append(source[position : edit.start])
        pieces.append(edit.text.encode("utf-8"))
        position = edit.end
    pieces.append(source[position:])
    return b"".join(pieces)


def apply_fixes(source: bytes, reports: Iterable[Report]) -> FixOutcome:
    """Apply the fix of every report whose span does not overlap an earlier one.

    Fixes that overlap an already accepted fix are skipped; they are expected
    to be picked up by a later pass over the rewritten source.
    """
    fixes: list[TextEdit] = []
    for report in reports:
        if not report.edits:
            continue
        try:
            fixes.append(merge_edits(report.edits, source))
        except EditConflictError as exc:
            logger.warning("%s: dropping fix: %s", report.location(), exc)

    accepted: list[TextEdit] = []
    skipped = 0
    last_end = 0
    for fix in _sorted_edits(fixes):
        if fix.start < last_end:
            skipped += 1
            continue
        accepted.append(fix)
        last_end = fix.end

    return FixOutcome(
        output=apply_edits(source, accepted),
        applied=len(accepted),
        skipped=skipped,
    )


__all__ = [
    "EditConflictError",
    "FixOutcome",
    "apply_edits",
    "apply_fixes",
    "merge_edits",
]
