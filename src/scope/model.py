"""Lexical scope records for a single JavaScript file."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from parse.treesitter_js import node_text

if TYPE_CHECKING:
    from tree_sitter import Node


class ScopeKind(str, Enum):
    """Kinds of lexical scopes produced by the scope analyzer."""

    GLOBAL = "global"
    MODULE = "module"
    FUNCTION = "function"
    BLOCK = "block"
    CATCH = "catch"
    CLASS = "class"
    FOR = "for"
    SWITCH = "switch"


class DefinitionKind(str, Enum):
    """What kind of syntax introduced a binding."""

    VARIABLE = "variable"
    PARAMETER = "parameter"
    FUNCTION_NAME = "function_name"
    CLASS_NAME = "class_name"
    IMPORT_BINDING = "import_binding"
    CATCH_CLAUSE = "catch_clause"


@dataclass(frozen=True)
class Definition:
    """A declaring occurrence of a name."""

    kind: DefinitionKind
    name_node: Node
    node: Node


@dataclass
class Variable:
    """A named binding in one scope, with its definitions and resolved uses.

    Ambient globals are variables of the global scope with no definitions.
    """

    name: str
    scope_index: int
    defs: list[Definition] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)


@dataclass
class Reference:
    """A use-site of a name; ``resolved`` is None for unresolved references."""

    identifier: Node
    from_scope: int
    resolved: Variable | None = None

    @property
    def name(self) -> str:
        return node_text(self.identifier)

    @property
    def parent(self) -> Node | None:
        return self.identifier.parent


@dataclass
class Scope:
    index: int
    kind: ScopeKind
    node: Node
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    variables: dict[str, Variable] = field(default_factory=dict)
    through: list[Reference] = field(default_factory=list)


@dataclass
class ScopeTree:
    """Arena of scopes for one file.

    Scope 0 is the global scope and scope 1 the module scope. Parents always
    have a smaller index than their children, so parent chains are acyclic.
    """

    source: bytes
    root_node: Node
    scopes: list[Scope] = field(default_factory=list)

    @property
    def global_scope(self) -> Scope:
        return self.scopes[0]

    @property
    def module_scope(self) -> Scope | None:
        children = self.global_scope.children
        if not children:
            return None
        return self.scopes[children[0]]

    def parent_of(self, scope: Scope) -> Scope | None:
        if scope.parent is None:
            return None
        return self.scopes[scope.parent]


__all__ = [
    "Definition",
    "DefinitionKind",
    "Reference",
    "Scope",
    "ScopeKind",
    "ScopeTree",
    "Variable",
]
