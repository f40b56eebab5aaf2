from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILENAME = "consolefix.toml"

DEFAULT_EXTENSIONS = [".js", ".jsx", ".mjs", ".cjs"]


class ConsoleFixConfig(BaseModel):
    """Configuration for scanning and fixing a project."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all source files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File extensions treated as JavaScript sources",
    )
    globals: list[str] = Field(
        default_factory=list,
        description="Names declared as ambient globals (e.g. 'console', 'window')",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: Any) -> Any:
        """Require a leading dot on every extension.

        Note: this runs in `mode="before"` so we can report a clear error
        message using the raw TOML values.
        """

        if v is None:
            return list(DEFAULT_EXTENSIONS)

        if not isinstance(v, list):
            msg = "extensions must be a list of strings"
            raise TypeError(msg)

        for extension in v:
            if not isinstance(extension, str):
                msg = "extensions must be a list of strings"
                raise TypeError(msg)
            if not extension.startswith(".") or len(extension) < 2:
                msg = f"Invalid extension '{extension}': expected e.g. '.js'"
                raise ValueError(msg)

        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def load_config(root: Path) -> ConsoleFixConfig:
    """Load configuration from consolefix.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ConsoleFixConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ConsoleFixConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
