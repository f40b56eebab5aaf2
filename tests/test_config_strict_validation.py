from __future__ import annotations

from pathlib import Path

import pytest

from rules.config import DEFAULT_EXTENSIONS, ConfigError, load_config


def _write_config(project_root: Path, toml_content: str) -> None:
    (project_root / "consolefix.toml").write_text(toml_content, encoding="utf-8")


def test_unknown_top_level_key_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "bogus_key = true")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_unknown_section_rejected(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
[rules]
no-native-console = "off"
""".strip(),
    )

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_toml_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "exclude = [")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "toml_content",
    [
        'extensions = ["js"]',
        'extensions = ["."]',
        "extensions = [1]",
        'extensions = ".js"',
    ],
)
def test_invalid_extensions_rejected(tmp_path: Path, toml_content: str) -> None:
    _write_config(tmp_path, toml_content)

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_valid_config_accepted(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        """
exclude = ["vendor/**"]
extensions = [".js", ".ts"]
globals = ["console", "window"]
nested_gitignore = true
""".strip(),
    )

    config = load_config(tmp_path)

    assert config.exclude == ["vendor/**"]
    assert config.extensions == [".js", ".ts"]
    assert config.globals == ["console", "window"]
    assert config.nested_gitignore is True


def test_empty_config_accepted(tmp_path: Path) -> None:
    _write_config(tmp_path, "")

    config = load_config(tmp_path)

    assert config.include == []
    assert config.exclude == []
    assert config.extensions == DEFAULT_EXTENSIONS
    assert config.globals == []
    assert config.nested_gitignore is False


def test_missing_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert config.extensions == DEFAULT_EXTENSIONS
    assert config.globals == []
