from __future__ import annotations

from pathlib import Path

import pytest

from utils import display_path, file_namespace


@pytest.mark.parametrize(
    ("file_path", "expected"),
    [
        ("src/api/client.js", "client"),
        ("client.test.js", "client.test"),
        ("C:\\repo\\src\\index.mjs", "index"),
        ("Makefile", "Makefile"),
        (".eslintrc", ".eslintrc"),
        (Path("lib/worker.cjs"), "worker"),
    ],
)
def test_file_namespace(file_path: str | Path, expected: str) -> None:
    assert file_namespace(file_path) == expected


def test_display_path_relative_and_outside_root(tmp_path: Path) -> None:
    inside = tmp_path / "src" / "app.js"
    outside = Path("/elsewhere/app.js")

    assert display_path(inside, tmp_path) == "src/app.js"
    assert display_path(outside, tmp_path) == "/elsewhere/app.js"
