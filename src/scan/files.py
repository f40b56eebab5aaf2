"""Source file discovery for consolefix."""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from rules.config import DEFAULT_EXTENSIONS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path

ALWAYS_SKIPPED_DIRS = frozenset({"node_modules", ".git"})


@dataclass(frozen=True)
class _SourceFilter:
    root: Path
    suffixes: frozenset[str]
    include_patterns: tuple[str, ...]
    exclude_patterns: tuple[str, ...]
    ignored: Callable[[str], bool] | None

    def is_ignored(self, path: Path) -> bool:
        return self.ignored is not None and self.ignored(str(path))

    def accepts(self, path: Path) -> bool:
        if path.suffix not in self.suffixes or self.is_ignored(path):
            return False

        rel_path_str = path.relative_to(self.root).as_posix()
        if self.include_patterns and not any(
            fnmatch(rel_path_str, pat) for pat in self.include_patterns
        ):
            return False
        return not any(fnmatch(rel_path_str, pat) for pat in self.exclude_patterns)


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        path.resolve().relative_to(root.resolve())
    except (OSError, ValueError):
        return False
    return True


def _walk(directory: Path, source_filter: _SourceFilter) -> Iterator[Path]:
    """Yield candidate files below ``directory``, pruning skipped subtrees.

    Symlinks are never followed, so nothing outside the root is visited.
    """
    try:
        entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
    except OSError:
        return

    for entry in entries:
        if entry.is_symlink():
            continue
        if entry.is_dir():
            if entry.name in ALWAYS_SKIPPED_DIRS or source_filter.is_ignored(entry):
                continue
            yield from _walk(entry, source_filter)
        elif entry.is_file() and source_filter.accepts(entry):
            yield entry


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return the .gitignore files that apply under ``root``, outermost first."""
    found: list[Path] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        candidate = directory / ".gitignore"
        if candidate.is_file() and not candidate.is_symlink():
            found.append(candidate)
        try:
            pending.extend(
                child
                for child in directory.iterdir()
                if child.is_dir()
                and not child.is_symlink()
                and child.name not in ALWAYS_SKIPPED_DIRS
            )
        except OSError:
            continue
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    matchers = [parse_gitignore(path) for path in _iter_gitignore_files(root)]
    if not matchers:
        return None

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                # Path lies outside this .gitignore's directory.
                continue
        return False

    return matches


def find_source_files(
    directory: Path,
    *,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find JavaScript source files under ``directory``, respecting .gitignore.

    Args:
        directory: Project root to search
        extensions: File suffixes to collect (e.g. ".js")
        include_patterns: Optional fnmatch patterns on the root-relative path;
            when given, a file must match at least one of them
        exclude_patterns: Optional fnmatch patterns; matching files are skipped
        nested_gitignore: Also honor .gitignore files below the root

    Yields:
        Paths sorted by their root-relative POSIX path. ``node_modules`` and
        ``.git`` directories, symlinks and paths resolving outside the root
        are never yielded.
    """
    source_filter = _SourceFilter(
        root=directory,
        suffixes=frozenset(extensions),
        include_patterns=tuple(include_patterns or ()),
        exclude_patterns=tuple(exclude_patterns or ()),
        ignored=_build_gitignore_matcher(directory, nested_gitignore=nested_gitignore),
    )

    matched_files = [
        path
        for path in _walk(directory, source_filter)
        if _is_within_root(path, directory)
    ]
    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


__all__ = ["ALWAYS_SKIPPED_DIRS", "find_source_files"]
