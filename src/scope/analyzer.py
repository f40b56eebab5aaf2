"""Scope analysis over a Tree-sitter JavaScript syntax tree.

The analyzer runs in two passes. The first walks the tree, creating scopes,
recording declarations and collecting every identifier in expression position
as a pending reference. The second resolves each pending reference up the
scope chain, so declarations are visible to references regardless of source
order (hoisting and the temporal dead zone are not modeled).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from parse.treesitter_js import node_text
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

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from tree_sitter import Node

logger = logging.getLogger(__name__)

_FUNCTION_DECLARATION_TYPES = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
_FUNCTION_EXPRESSION_TYPES = frozenset(
    {"function_expression", "function", "generator_function"}
)
_REFERENCE_IDENTIFIER_TYPES = frozenset({"identifier", "shorthand_property_identifier"})
_PATTERN_NAME_TYPES = frozenset({"identifier", "shorthand_property_identifier_pattern"})
_VAR_SCOPE_KINDS = frozenset({ScopeKind.FUNCTION, ScopeKind.MODULE, ScopeKind.GLOBAL})


def _declaration_keyword(for_in: Node) -> str | None:
    """Return ``var``/``let``/``const`` when a for-in/of head declares names."""
    kind = for_in.child_by_field_name("kind")
    if kind is not None:
        return node_text(kind)
    for child in for_in.children:
        if child.type in {"var", "let", "const"}:
            return child.type
    return None


class _ScopeBuilder:
    def __init__(self, source: bytes, root_node: Node) -> None:
        self.tree = ScopeTree(source=source, root_node=root_node)
        self._pending: list[Reference] = []
        self._handlers: dict[str, Callable[[Node, Scope], None]] = {
            "import_statement": self._visit_import,
            "export_statement": self._visit_export,
            "variable_declaration": self._visit_var_declaration,
            "lexical_declaration": self._visit_lexical_declaration,
            "function_declaration": self._visit_function_declaration,
            "generator_function_declaration": self._visit_function_declaration,
            "function_expression": self._visit_function_expression,
            "function": self._visit_function_expression,
            "generator_function": self._visit_function_expression,
            "arrow_function": self._visit_function_expression,
            "method_definition": self._visit_function_expression,
            "class_declaration": self._visit_class_declaration,
            "class": self._visit_class_expression,
            "statement_block": self._visit_block,
            "for_statement": self._visit_for,
            "for_in_statement": self._visit_for_in,
            "catch_clause": self._visit_catch,
            "switch_statement": self._visit_switch,
            "assignment_expression": self._visit_assignment,
            "augmented_assignment_expression": self._visit_assignment,
        }

    def build(self, ambient_globals: Iterable[str]) -> ScopeTree:
        root_node = self.tree.root_node
        global_scope = self._new_scope(ScopeKind.GLOBAL, root_node, None)
        for name in sorted(set(ambient_globals)):
            global_scope.variables[name] = Variable(name=name, scope_index=0)

        module_scope = self._new_scope(ScopeKind.MODULE, root_node, global_scope)
        self._visit_children(root_node, module_scope)
        self._resolve_pending()
        return self.tree

    # -- scope and binding bookkeeping -------------------------------------

    def _new_scope(self, kind: ScopeKind, node: Node, parent: Scope | None) -> Scope:
        scope = Scope(
            index=len(self.tree.scopes),
            kind=kind,
            node=node,
            parent=parent.index if parent is not None else None,
        )
        self.tree.scopes.append(scope)
        if parent is not None:
            parent.children.append(scope.index)
        return scope

    def _var_scope(self, scope: Scope) -> Scope:
        current = scope
        while current.kind not in _VAR_SCOPE_KINDS and current.parent is not None:
            current = self.tree.scopes[current.parent]
        return current

    def _declare(
        self, scope: Scope, name_node: Node, kind: DefinitionKind, node: Node
    ) -> None:
        name = node_text(name_node)
        if not name:
            return
        variable = scope.variables.get(name)
        if variable is None:
            variable = Variable(name=name, scope_index=scope.index)
            scope.variables[name] = variable
        variable.defs.append(Definition(kind=kind, name_node=name_node, node=node))

    def _add_reference(self, identifier: Node, scope: Scope) -> None:
        self._pending.append(Reference(identifier=identifier, from_scope=scope.index))

    def _resolve_pending(self) -> None:
        global_scope = self.tree.global_scope
        for reference in self._pending:
            start = self.tree.scopes[reference.from_scope]
            variable = resolve(self.tree, start, reference.name)
            if variable is None:
                global_scope.through.append(reference)
                continue
            reference.resolved = variable
            variable.references.append(reference)
        logger.debug(
            "resolved %d references, %d unresolved",
            len(self._pending) - len(global_scope.through),
            len(global_scope.through),
        )

    # -- traversal ----------------------------------------------------------

    def _visit(self, node: Node, scope: Scope) -> None:
        handler = self._handlers.get(node.type)
        if handler is not None:
            handler(node, scope)
            return
        if node.type in _REFERENCE_IDENTIFIER_TYPES:
            self._add_reference(node, scope)
            return
        self._visit_children(node, scope)

    def _visit_children(self, node: Node, scope: Scope) -> None:
        for child in node.named_children:
            self._visit(child, scope)

    def _visit_optional(self, node: Node | None, scope: Scope) -> None:
        if node is not None:
            self._visit(node, scope)

    def _bind_pattern(
        self,
        pattern: Node,
        declare_scope: Scope,
        kind: DefinitionKind,
        decl_node: Node,
        ref_scope: Scope,
    ) -> None:
        """Declare every name bound by ``pattern``; visit its default values."""
        pattern_type = pattern.type
        if pattern_type in _PATTERN_NAME_TYPES:
            self._declare(declare_scope, pattern, kind, decl_node)
        elif pattern_type in {"object_pattern", "array_pattern", "rest_pattern"}:
            for child in pattern.named_children:
                self._bind_pattern(child, declare_scope, kind, decl_node, ref_scope)
        elif pattern_type == "pair_pattern":
            key = pattern.child_by_field_name("key")
            if key is not None and key.type == "computed_property_name":
                self._visit(key, ref_scope)
            value = pattern.child_by_field_name("value")
            if value is not None:
                self._bind_pattern(value, declare_scope, kind, decl_node, ref_scope)
        elif pattern_type in {"assignment_pattern", "object_assignment_pattern"}:
            left = pattern.child_by_field_name("left")
            if left is not None:
                self._bind_pattern(left, declare_scope, kind, decl_node, ref_scope)
            self._visit_optional(pattern.child_by_field_name("right"), ref_scope)
        elif pattern_type != "comment":
            self._visit(pattern, ref_scope)

    def _reference_pattern(self, pattern: Node, scope: Scope) -> None:
        """Record every name written by a destructuring assignment target."""
        pattern_type = pattern.type
        if pattern_type in _PATTERN_NAME_TYPES:
            self._add_reference(pattern, scope)
        elif pattern_type in {"object_pattern", "array_pattern", "rest_pattern"}:
            for child in pattern.named_children:
                self._reference_pattern(child, scope)
        elif pattern_type == "pair_pattern":
            key = pattern.child_by_field_name("key")
            if key is not None and key.type == "computed_property_name":
                self._visit(key, scope)
            value = pattern.child_by_field_name("value")
            if value is not None:
                self._reference_pattern(value, scope)
        elif pattern_type in {"assignment_pattern", "object_assignment_pattern"}:
            left = pattern.child_by_field_name("left")
            if left is not None:
                self._reference_pattern(left, scope)
            self._visit_optional(pattern.child_by_field_name("right"), scope)
        elif pattern_type != "comment":
            self._visit(pattern, scope)

    # -- modules ----------------------------------------------------------------

    def _visit_import(self, node: Node, scope: Scope) -> None:
        for clause in node.named_children:
            if clause.type != "import_clause":
                continue
            for item in clause.named_children:
                if item.type == "identifier":
                    self._declare(scope, item, DefinitionKind.IMPORT_BINDING, node)
                elif item.type == "namespace_import":
                    for name_node in item.named_children:
                        if name_node.type == "identifier":
                            self._declare(
                                scope, name_node, DefinitionKind.IMPORT_BINDING, node
                            )
                elif item.type == "named_imports":
                    self._declare_import_specifiers(item, scope, node)

    def _declare_import_specifiers(
        self, named_imports: Node, scope: Scope, import_node: Node
    ) -> None:
        for specifier in named_imports.named_children:
            if specifier.type != "import_specifier":
                continue
            local = specifier.child_by_field_name("alias")
            if local is None:
                local = specifier.child_by_field_name("name")
            if local is not None and local.type == "identifier":
                self._declare(scope, local, DefinitionKind.IMPORT_BINDING, import_node)

    def _visit_export(self, node: Node, scope: Scope) -> None:
        reexport = node.child_by_field_name("source") is not None
        for child in node.named_children:
            if child.type == "export_clause":
                if not reexport:
                    self._reference_export_clause(child, scope)
            elif child.type in {"string", "namespace_export"}:
                continue
            else:
                self._visit(child, scope)

    def _reference_export_clause(self, clause: Node, scope: Scope) -> None:
        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            local = specifier.child_by_field_name("name")
            if local is not None and local.type == "identifier":
                self._add_reference(local, scope)

    # -- declarations -------------------------------------------------------------

    def _visit_declarators(
        self, node: Node, declare_scope: Scope, scope: Scope
    ) -> None:
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None:
                self._bind_pattern(
                    name, declare_scope, DefinitionKind.VARIABLE, declarator, scope
                )
            self._visit_optional(declarator.child_by_field_name("value"), scope)

    def _visit_var_declaration(self, node: Node, scope: Scope) -> None:
        self._visit_declarators(node, self._var_scope(scope), scope)

    def _visit_lexical_declaration(self, node: Node, scope: Scope) -> None:
        self._visit_declarators(node, scope, scope)

    def _visit_function_declaration(self, node: Node, scope: Scope) -> None:
        name = node.child_by_field_name("name")
        if name is not None:
            self._declare(scope, name, DefinitionKind.FUNCTION_NAME, node)
        self._visit_function(node, scope, name_inside=False)

    def _visit_function_expression(self, node: Node, scope: Scope) -> None:
        self._visit_function(node, scope, name_inside=True)

    def _visit_function(self, node: Node, outer: Scope, *, name_inside: bool) -> None:
        name = node.child_by_field_name("name")
        if name is not None and name.type == "computed_property_name":
            self._visit(name, outer)

        function_scope = self._new_scope(ScopeKind.FUNCTION, node, outer)
        if name_inside and name is not None and name.type == "identifier":
            self._declare(function_scope, name, DefinitionKind.FUNCTION_NAME, node)

        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            for parameter in parameters.named_children:
                self._bind_pattern(
                    parameter,
                    function_scope,
                    DefinitionKind.PARAMETER,
                    node,
                    function_scope,
                )
        single_parameter = node.child_by_field_name("parameter")
        if single_parameter is not None:
            self._bind_pattern(
                single_parameter,
                function_scope,
                DefinitionKind.PARAMETER,
                node,
                function_scope,
            )

        body = node.child_by_field_name("body")
        if body is None:
            return
        if body.type == "statement_block":
            self._visit_children(body, function_scope)
        else:
            self._visit(body, function_scope)

    def _visit_class_declaration(self, node: Node, scope: Scope) -> None:
        name = node.child_by_field_name("name")
        if name is not None:
            self._declare(scope, name, DefinitionKind.CLASS_NAME, node)
        self._visit_class(node, scope, name_inside=False)

    def _visit_class_expression(self, node: Node, scope: Scope) -> None:
        self._visit_class(node, scope, name_inside=True)

    def _visit_class(self, node: Node, outer: Scope, *, name_inside: bool) -> None:
        for child in node.named_children:
            if child.type == "class_heritage":
                self._visit_children(child, outer)

        class_scope = self._new_scope(ScopeKind.CLASS, node, outer)
        name = node.child_by_field_name("name")
        if name_inside and name is not None and name.type == "identifier":
            self._declare(class_scope, name, DefinitionKind.CLASS_NAME, node)

        body = node.child_by_field_name("body")
        if body is not None:
            self._visit_children(body, class_scope)

    # -- blocks and statements ------------------------------------------------------

    def _visit_block(self, node: Node, scope: Scope) -> None:
        block_scope = self._new_scope(ScopeKind.BLOCK, node, scope)
        self._visit_children(node, block_scope)

    def _visit_for(self, node: Node, scope: Scope) -> None:
        for_scope = self._new_scope(ScopeKind.FOR, node, scope)
        self._visit_children(node, for_scope)

    def _visit_for_in(self, node: Node, scope: Scope) -> None:
        for_scope = self._new_scope(ScopeKind.FOR, node, scope)
        kind = _declaration_keyword(node)
        left = node.child_by_field_name("left")
        if left is not None:
            if kind is None:
                self._reference_pattern(left, for_scope)
            else:
                declare_scope = self._var_scope(scope) if kind == "var" else for_scope
                self._bind_pattern(
                    left, declare_scope, DefinitionKind.VARIABLE, node, for_scope
                )
        self._visit_optional(node.child_by_field_name("right"), for_scope)
        self._visit_optional(node.child_by_field_name("body"), for_scope)

    def _visit_catch(self, node: Node, scope: Scope) -> None:
        catch_scope = self._new_scope(ScopeKind.CATCH, node, scope)
        parameter = node.child_by_field_name("parameter")
        if parameter is not None:
            self._bind_pattern(
                parameter,
                catch_scope,
                DefinitionKind.CATCH_CLAUSE,
                node,
                catch_scope,
            )
        self._visit_optional(node.child_by_field_name("body"), catch_scope)

    def _visit_switch(self, node: Node, scope: Scope) -> None:
        self._visit_optional(node.child_by_field_name("value"), scope)
        body = node.child_by_field_name("body")
        if body is not None:
            switch_scope = self._new_scope(ScopeKind.SWITCH, body, scope)
            self._visit_children(body, switch_scope)

    def _visit_assignment(self, node: Node, scope: Scope) -> None:
        left = node.child_by_field_name("left")
        if left is not None:
            if left.type in {"object_pattern", "array_pattern"}:
                self._reference_pattern(left, scope)
            else:
                self._visit(left, scope)
        self._visit_optional(node.child_by_field_name("right"), scope)


def analyze_scopes(
    root_node: Node,
    source: bytes,
    ambient_globals: Iterable[str] = (),
) -> ScopeTree:
    """Build a fully resolved scope tree for one JavaScript module.

    Args:
        root_node: The ``program`` node of a parsed file
        source: The source bytes the tree was parsed from
        ambient_globals: Names pre-declared in the global scope with no
            definitions (e.g. environment globals such as ``window``)

    Returns:
        ScopeTree whose scope 0 is the global scope and scope 1 the module scope.
    """
    return _ScopeBuilder(source, root_node).build(ambient_globals)


__all__ = ["analyze_scopes"]
