"""Nearest-binding lookup over a scope arena."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from scope.model import Scope, ScopeTree, Variable


def resolve(tree: ScopeTree, scope: Scope | None, name: str) -> Variable | None:
    """Find the nearest binding of ``name`` starting at ``scope``.

    Walks the parent chain up to the global scope. Returns None when no scope
    on the chain binds the name, or when ``scope`` itself is None.
    """
    current = scope
    while current is not None:
        variable = current.variables.get(name)
        if variable is not None:
            return variable
        current = tree.parent_of(current)
    return None


__all__ = ["resolve"]
