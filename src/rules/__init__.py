"""Rule definitions for consolefix."""

from rules.config import (
    ConfigError,
    ConsoleFixConfig,
    load_config,
)
from rules.models import Report, SourceSpan, TextEdit
from rules.registry import RULES, Rule, RuleMeta

__all__ = [
    "RULES",
    "ConfigError",
    "ConsoleFixConfig",
    "Report",
    "Rule",
    "RuleMeta",
    "SourceSpan",
    "TextEdit",
    "load_config",
]
