"""Registry of available lint rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from rules import no_native_console

if TYPE_CHECKING:
    from collections.abc import Callable

    from rules.models import Report, RuleType
    from scope.model import ScopeTree


@dataclass(frozen=True)
class RuleMeta:
    type: RuleType
    fixable: Literal["code", "whitespace"] | None
    description: str


@dataclass(frozen=True)
class Rule:
    rule_id: str
    meta: RuleMeta
    run: Callable[[ScopeTree, str], list[Report]]


RULES: dict[str, Rule] = {
    no_native_console.RULE_ID: Rule(
        rule_id=no_native_console.RULE_ID,
        meta=RuleMeta(
            type="problem",
            fixable="code",
            description="Disallow console.error/warn/info in favor of moduleLogger",
        ),
        run=no_native_console.run,
    ),
}


__all__ = ["RULES", "Rule", "RuleMeta"]
