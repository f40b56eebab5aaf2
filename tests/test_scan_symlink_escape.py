from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from scan.files import _build_gitignore_matcher, find_source_files

if TYPE_CHECKING:
    from pathlib import Path


def _relative_results(root: Path, **kwargs) -> list[str]:
    return [path.relative_to(root).as_posix() for path in find_source_files(root, **kwargs)]


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_find_source_files_skips_symlinked_dirs(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "src").mkdir()
    (project_root / "src" / "app.js").write_text("run();\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "leak.js").write_text("leak();\n", encoding="utf-8")

    symlink_dir = project_root / "linked"
    symlink_dir.symlink_to(external_root, target_is_directory=True)

    results = _relative_results(project_root)

    assert "src/app.js" in results
    assert "linked/leak.js" not in results


@pytest.mark.skipif(
    os.name == "nt",
    reason="Symlink semantics vary on Windows test runners.",
)
def test_nested_gitignore_skips_symlinked_gitignore(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "src").mkdir()
    (project_root / "src" / "app.js").write_text("run();\n", encoding="utf-8")
    (project_root / ".gitignore").write_text("*.min.js\n", encoding="utf-8")

    external_root = tmp_path / "external"
    external_root.mkdir()
    (external_root / "outside.gitignore").write_text("src/app.js\n", encoding="utf-8")

    symlink_gitignore = project_root / "linked.gitignore"
    symlink_gitignore.symlink_to(external_root / "outside.gitignore")

    matcher = _build_gitignore_matcher(project_root, nested_gitignore=True)
    assert matcher is not None
    assert matcher(str(project_root / "src" / "app.js")) is False


def test_find_source_files_filters_extensions_and_skips_node_modules(
    tmp_path: Path,
) -> None:
    for relative in (
        "src/b.js",
        "src/a.mjs",
        "src/view.jsx",
        "src/types.ts",
        "README.md",
        "node_modules/dep/index.js",
    ):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x;\n", encoding="utf-8")

    assert _relative_results(tmp_path) == ["src/a.mjs", "src/b.js", "src/view.jsx"]
    assert _relative_results(tmp_path, extensions=[".ts"]) == ["src/types.ts"]


def test_find_source_files_include_and_exclude_patterns(tmp_path: Path) -> None:
    for relative in ("src/app.js", "src/app.test.js", "scripts/build.js"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x;\n", encoding="utf-8")

    results = _relative_results(
        tmp_path,
        include_patterns=["src/*"],
        exclude_patterns=["*.test.js"],
    )

    assert results == ["src/app.js"]


def test_find_source_files_respects_root_gitignore(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("build/\n", encoding="utf-8")
    for relative in ("src/app.js", "build/out.js"):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x;\n", encoding="utf-8")

    assert _relative_results(tmp_path) == ["src/app.js"]
