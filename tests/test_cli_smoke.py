from __future__ import annotations

import shutil
from pathlib import Path

import orjson
import pytest

from cli import EXIT_ERROR, EXIT_OK, EXIT_PROBLEMS, main


def _write_minimal_project(root: Path) -> None:
    (root / "src").mkdir(parents=True, exist_ok=True)
    (root / "src" / "app.js").write_text(
        "console.error(err);\nconsole.warn('slow', ms);\n",
        encoding="utf-8",
    )
    (root / "src" / "clean.js").write_text("export const x = 1;\n", encoding="utf-8")


def _copy_mini_project_fixture(root: Path) -> None:
    fixture_project = Path(__file__).parent / "fixtures" / "mini_project"
    shutil.copytree(fixture_project, root)


def test_cli_check_reports_problems(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)

    exit_code = main(["check", str(tmp_path)])

    assert exit_code == EXIT_PROBLEMS
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "src/app.js:1:1: No native console.error allowed, "
        "use moduleLogger.error instead [no-native-console]",
        "src/app.js:2:1: No native console.warn allowed, "
        "use moduleLogger.warn instead [no-native-console]",
    ]


def test_cli_check_json_output(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)

    exit_code = main(["check", str(tmp_path), "--format", "json"])

    assert exit_code == EXIT_PROBLEMS
    payloads = [orjson.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [payload["path"] for payload in payloads] == ["src/app.js", "src/app.js"]
    assert payloads[0]["rule_id"] == "no-native-console"
    assert payloads[0]["schema_version"] == 1
    assert payloads[0]["edits"][-1]["text"] == "moduleLogger.error(err)"


def test_cli_fix_then_check_is_clean(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)

    fix_exit = main(["fix", str(tmp_path)])
    fix_out = capsys.readouterr().out
    check_exit = main(["check", str(tmp_path)])

    assert fix_exit == EXIT_OK
    assert fix_out == "src/app.js: fixed 2 problem(s)\n"
    assert check_exit == EXIT_OK
    assert (tmp_path / "src" / "app.js").read_text(encoding="utf-8") == (
        "import { logger } from 'lib/logger';\n"
        "const moduleLogger = logger.child({ namespace: ['app'] });\n"
        "moduleLogger.error(err);\n"
        "moduleLogger.warn(ms,'slow');\n"
    )
    assert (tmp_path / "src" / "clean.js").read_text(encoding="utf-8") == (
        "export const x = 1;\n"
    )


def test_cli_check_fixture_project(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    project_root = tmp_path / "project"
    _copy_mini_project_fixture(project_root)

    exit_code = main(["check", str(project_root)])

    assert exit_code == EXIT_PROBLEMS
    out = capsys.readouterr().out
    assert "src/server.js:4:5:" in out
    assert "src/server.js:8:1:" in out
    assert "src/shadowed.js" not in out
    assert "node_modules" not in out
    assert "dist/" not in out


def test_cli_fix_fixture_project(tmp_path: Path) -> None:
    project_root = tmp_path / "project"
    _copy_mini_project_fixture(project_root)

    assert main(["fix", str(project_root)]) == EXIT_OK

    server = (project_root / "src" / "server.js").read_text(encoding="utf-8")
    assert server.count("import { logger } from 'lib/logger';") == 1
    assert "namespace: ['server']" in server
    assert "console." not in server
    vendored = project_root / "node_modules" / "dep" / "index.js"
    assert "console.error" in vendored.read_text(encoding="utf-8")


def test_cli_invalid_config_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)
    (tmp_path / "consolefix.toml").write_text("bogus_key = true\n", encoding="utf-8")

    exit_code = main(["check", str(tmp_path)])

    assert exit_code == EXIT_ERROR
    assert "consolefix.toml" in capsys.readouterr().err


def test_cli_syntax_error_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)
    (tmp_path / "src" / "broken.js").write_text("console.error(;\n", encoding="utf-8")

    exit_code = main(["check", str(tmp_path)])

    captured = capsys.readouterr()
    assert exit_code == EXIT_ERROR
    assert "src/broken.js:1:" in captured.err
    assert "syntax error" in captured.err
    assert "src/app.js:1:1:" in captured.out


def test_cli_fix_reports_non_utf8_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _write_minimal_project(tmp_path)
    legacy = tmp_path / "src" / "legacy.js"
    legacy.write_bytes(b"// caf\xe9\nconsole.error(err);\n")

    exit_code = main(["fix", str(tmp_path)])

    captured = capsys.readouterr()
    assert exit_code == EXIT_ERROR
    assert "src/legacy.js:1:7: invalid UTF-8" in captured.err
    assert "src/app.js: fixed 2 problem(s)" in captured.out
    assert legacy.read_bytes() == b"// caf\xe9\nconsole.error(err);\n"


def test_cli_default_root_is_cwd(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write_minimal_project(tmp_path)
    monkeypatch.chdir(tmp_path)

    exit_code = main(["check"])

    assert exit_code == EXIT_PROBLEMS
    assert capsys.readouterr().out.startswith("src/app.js:1:1:")
