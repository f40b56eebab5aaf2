"""Parsing utilities for consolefix."""

from parse.treesitter_js import iter_error_nodes, node_text, parse_source, same_node

__all__ = [
    "iter_error_nodes",
    "node_text",
    "parse_source",
    "same_node",
]
