"""Lexical scope analysis for JavaScript files."""

from scope.analyzer import analyze_scopes
from scope.model import (
    Definition,
    DefinitionKind,
    Reference,
    Scope,
    ScopeKind,
    ScopeTree,
    Variable,
)
from scope.resolver import resolve

__all__ = [
    "Definition",
    "DefinitionKind",
    "Reference",
    "Scope",
    "ScopeKind",
    "ScopeTree",
    "Variable",
    "analyze_scopes",
    "resolve",
]
