"""Shared utilities for consolefix."""

from __future__ import annotations

from pathlib import Path


def file_namespace(file_path: str | Path) -> str:
    """Derive the logger namespace for a file from its base name.

    The namespace is the file name with its last extension stripped; the
    directory part never contributes.

    Examples:
        >>> file_namespace("src/api/client.js")
        'client'
        >>> file_namespace("src/api/client.test.js")
        'client.test'
        >>> file_namespace(Path(".eslintrc"))
        '.eslintrc'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    base = path_str.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]

    stem, dot, _extension = base.rpartition(".")
    if not dot or not stem:
        return base
    return stem


def display_path(file_path: Path, root: Path) -> str:
    """Return ``file_path`` relative to ``root`` when possible, POSIX style."""
    try:
        return file_path.relative_to(root).as_posix()
    except ValueError:
        return file_path.as_posix()
