"""Tree-sitter based parsing for JavaScript files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_javascript import language as get_javascript_language

if TYPE_CHECKING:
    from collections.abc import Iterator

_PARSER: Parser | None = None


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with JavaScript language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_javascript_language())
        _PARSER = Parser(lang)

    return _PARSER


def parse_source(source_bytes: bytes) -> Tree:
    """Parse JavaScript source bytes into a Tree-sitter tree."""
    return _get_parser().parse(source_bytes)


def node_text(node: Node) -> str:
    if node.text is None:
        return ""
    return node.text.decode("utf8", errors="ignore")


def same_node(left: Node | None, right: Node | None) -> bool:
    """Return True when both handles point at the same syntax node."""
    if left is None or right is None:
        return False
    return (
        left.type == right.type
        and left.start_byte == right.start_byte
        and left.end_byte == right.end_byte
    )


def iter_error_nodes(node: Node) -> Iterator[Node]:
    """Yield ERROR and MISSING nodes below ``node`` in document order."""
    if node.type == "ERROR" or node.is_missing:
        yield node
        return
    if not node.has_error:
        return
    for child in node.children:
        yield from iter_error_nodes(child)


__all__ = ["iter_error_nodes", "node_text", "parse_source", "same_node"]
