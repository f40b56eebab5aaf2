"""Rule ``no-native-console``: rewrite console calls to the module logger.

Calls such as ``console.error(err)`` are reported and fixed to
``moduleLogger.error(err)``. When the file does not bind ``logger`` yet, the
fix also inserts the logger import and the per-file ``moduleLogger``
declaration at the top of the file, once per file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from parse.treesitter_js import node_text, same_node
from rules.models import Report, SourceSpan, TextEdit
from scope.resolver import resolve
from utils import file_namespace

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from tree_sitter import Node

    from scope.model import Reference, ScopeTree

logger = logging.getLogger(__name__)

RULE_ID = "no-native-console"

DISALLOWED_GLOBAL = "console"
LOGGER_BINDING = "logger"
MODULE_LOGGER = "moduleLogger"
LOGGER_IMPORT_PATH = "lib/logger"

# Dispatch method of the logger library itself; never reported.
RESERVED_DISPATCH_METHOD = "consoleFn"

PROLOGUE_TEMPLATE = (
    "import {{ logger }} from '{import_path}';\n"
    "const moduleLogger = logger.child({{ namespace: ['{namespace}'] }});\n"
)

MESSAGE_TEMPLATE = (
    "No native console.{method} allowed, use moduleLogger.{method} instead"
)

_LITERAL_TYPES = frozenset({"string", "number", "regex", "true", "false", "null"})
_NAME_TYPES = frozenset({"identifier", "undefined"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})
_MALFORMED_ESCAPE_STARTS = frozenset("xu123456789")
_TEMPLATE_TOKEN = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])|\r\n?"
)


class ConsoleMethod(str, Enum):
    """Console methods this rule rewrites."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"

    @classmethod
    def from_name(cls, name: str) -> ConsoleMethod | None:
        try:
            return cls(name)
        except ValueError:
            return None


class GlobalBinding(str, Enum):
    """How ``console`` resolves from the file's top scope."""

    SHADOWED = "shadowed"
    AMBIENT = "ambient"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class ConsoleResolution:
    outcome: GlobalBinding
    references: tuple[Reference, ...] = ()


@dataclass(frozen=True)
class CallOccurrence:
    """A ``console.<method>(...)`` call eligible for reporting."""

    reference: Reference
    call: Node
    method: ConsoleMethod
    arguments: tuple[Node, ...]


def resolve_console(tree: ScopeTree) -> ConsoleResolution:
    """Classify the ``console`` binding visible at the top of the file."""
    variable = resolve(tree, tree.module_scope, DISALLOWED_GLOBAL)
    if variable is None:
        references = tuple(
            reference
            for reference in tree.global_scope.through
            if reference.name == DISALLOWED_GLOBAL
        )
        return ConsoleResolution(GlobalBinding.UNRESOLVED, references)

    if variable.defs:
        return ConsoleResolution(GlobalBinding.SHADOWED)

    return ConsoleResolution(GlobalBinding.AMBIENT, tuple(variable.references))


def _member_access(reference: Reference) -> Node | None:
    """Return the member expression when the reference is its object."""
    parent = reference.parent
    if parent is None or parent.type != "member_expression":
        return None
    if not same_node(parent.child_by_field_name("object"), reference.identifier):
        return None
    return parent


def _accessed_property(member: Node) -> str:
    property_node = member.child_by_field_name("property")
    if property_node is None:
        return ""
    return node_text(property_node)


def _call_occurrence(reference: Reference, member: Node) -> CallOccurrence | None:
    method = ConsoleMethod.from_name(_accessed_property(member))
    if method is None:
        return None

    call = member.parent
    if call is None or call.type != "call_expression":
        return None
    if not same_node(call.child_by_field_name("function"), member):
        return None

    arguments_node = call.child_by_field_name("arguments")
    if arguments_node is None or arguments_node.type != "arguments":
        return None

    arguments = tuple(
        argument
        for argument in arguments_node.named_children
        if argument.type != "comment"
    )
    return CallOccurrence(
        reference=reference,
        call=call,
        method=method,
        arguments=arguments,
    )


def collect_occurrences(references: Iterable[Reference]) -> list[CallOccurrence]:
    """Filter references down to reportable calls, in source order."""
    occurrences: list[CallOccurrence] = []
    for reference in references:
        member = _member_access(reference)
        if member is None:
            continue
        if _accessed_property(member) == RESERVED_DISPATCH_METHOD:
            continue
        occurrence = _call_occurrence(reference, member)
        if occurrence is not None:
            occurrences.append(occurrence)

    occurrences.sort(key=lambda occurrence: occurrence.call.start_byte)
    return occurrences


# ---------------------------------------------------------------------------
# Argument textualization
# ---------------------------------------------------------------------------


def _unwrap_parentheses(node: Node) -> Node:
    current = node
    while current.type == "parenthesized_expression":
        inner = [child for child in current.named_children if child.type != "comment"]
        if len(inner) != 1:
            break
        current = inner[0]
    return current


def _literal_or_name(node: Node) -> str | None:
    node = _unwrap_parentheses(node)
    if node.type in _LITERAL_TYPES or node.type in _NAME_TYPES:
        return node_text(node)
    return None


class _MalformedEscapeError(ValueError):
    pass


def _cook_escape(match: re.Match[str]) -> str:
    sequence = match.group(1)
    if sequence is None:
        return "\n"
    if sequence in _LINE_CONTINUATIONS:
        return ""
    if sequence.startswith("u{"):
        code_point = int(sequence[2:-1], 16)
        if code_point > 0x10FFFF:
            raise _MalformedEscapeError(match.group(0))
        return chr(code_point)
    if len(sequence) > 1:
        return chr(int(sequence[1:], 16))
    if sequence in _MALFORMED_ESCAPE_STARTS or (
        sequence == "0" and match.string[match.end() : match.end() + 1].isdigit()
    ):
        raise _MalformedEscapeError(match.group(0))
    return _SIMPLE_ESCAPES.get(sequence, sequence)


def cook_template_chars(raw: str) -> str | None:
    """Apply JavaScript template literal escape processing to raw characters.

    Returns None for malformed escapes (e.g. ``\\xZ`` or octal ``\\1``), which
    have no cooked value.
    """
    try:
        return _TEMPLATE_TOKEN.sub(_cook_escape, raw)
    except _MalformedEscapeError:
        return None


def _cooked_template(node: Node) -> str | None:
    """Return the cooked template text, or None when it is not usable.

    A template is not textualizable when it has substitutions or when its
    cooked value is missing or empty.
    """
    node = _unwrap_parentheses(node)
    if node.type != "template_string":
        return None
    if any(child.type == "template_substitution" for child in node.named_children):
        return None
    cooked = cook_template_chars(node_text(node)[1:-1])
    if not cooked:
        return None
    return f"`{cooked}`"


def _error_or_warn_arguments(arguments: Sequence[Node]) -> list[str]:
    if not arguments:
        return []
    if len(arguments) == 1:
        ordered = [arguments[0]]
    else:
        first, second, *rest = arguments
        ordered = [second, first, *rest]

    return [text for text in map(_literal_or_name, ordered) if text]


def _info_arguments(arguments: Sequence[Node]) -> list[str]:
    texts: list[str] = []
    for argument in arguments:
        text = _cooked_template(argument) or _literal_or_name(argument)
        if text:
            texts.append(text)
    return texts


_ARGUMENT_BUILDERS: dict[ConsoleMethod, Callable[[Sequence[Node]], list[str]]] = {
    ConsoleMethod.ERROR: _error_or_warn_arguments,
    ConsoleMethod.WARN: _error_or_warn_arguments,
    ConsoleMethod.INFO: _info_arguments,
}


def reconstruct_call(occurrence: CallOccurrence) -> str:
    """Build the ``moduleLogger`` call replacing ``occurrence``.

    Arguments that are neither literals nor plain identifiers are dropped.
    """
    build_arguments = _ARGUMENT_BUILDERS[occurrence.method]
    arguments = ",".join(build_arguments(occurrence.arguments))
    return f"{MODULE_LOGGER}.{occurrence.method.value}({arguments})"


# ---------------------------------------------------------------------------
# Prologue
# ---------------------------------------------------------------------------


def logger_is_bound(tree: ScopeTree) -> bool:
    return resolve(tree, tree.module_scope, LOGGER_BINDING) is not None


def render_prologue(filename: str) -> str:
    namespace = file_namespace(filename).replace("\\", "\\\\").replace("'", "\\'")
    return PROLOGUE_TEMPLATE.format(
        import_path=LOGGER_IMPORT_PATH,
        namespace=namespace,
    )


def _prologue_anchor(tree: ScopeTree) -> int:
    """Byte offset where the prologue goes: file start, or after a ``#!`` line."""
    first = tree.root_node.child(0) if tree.root_node.child_count else None
    if first is None or first.type != "hash_bang_line":
        return 0

    anchor = first.end_byte
    if tree.source[anchor : anchor + 2] == b"\r\n":
        return anchor + 2
    if tree.source[anchor : anchor + 1] == b"\n":
        return anchor + 1
    return anchor


def prologue_edit(tree: ScopeTree, filename: str) -> TextEdit:
    anchor = _prologue_anchor(tree)
    return TextEdit(start=anchor, end=anchor, text=render_prologue(filename))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run(tree: ScopeTree, filename: str) -> list[Report]:
    """Report and fix every native console call in one file.

    At most one report carries the prologue insertion: the first occurrence
    in source order, and only when ``logger`` is not already bound.
    """
    resolution = resolve_console(tree)
    if resolution.outcome is GlobalBinding.SHADOWED:
        logger.debug("%s: console is locally declared, skipping file", filename)
        return []

    occurrences = collect_occurrences(resolution.references)
    prologue_pending = bool(occurrences) and not logger_is_bound(tree)

    reports: list[Report] = []
    for occurrence in occurrences:
        edits: list[TextEdit] = []
        if prologue_pending:
            edits.append(prologue_edit(tree, filename))
            prologue_pending = False
        edits.append(
            TextEdit(
                start=occurrence.call.start_byte,
                end=occurrence.call.end_byte,
                text=reconstruct_call(occurrence),
            )
        )
        reports.append(
            Report(
                rule_id=RULE_ID,
                type="problem",
                path=filename,
                message=MESSAGE_TEMPLATE.format(method=occurrence.method.value),
                loc=SourceSpan.from_node(occurrence.reference.identifier),
                node_span=SourceSpan.from_node(occurrence.call),
                edits=edits,
            )
        )

    logger.debug(
        "%s: %d console call(s) reported (%s)",
        filename,
        len(reports),
        resolution.outcome.value,
    )
    return reports


__all__ = [
    "RULE_ID",
    "CallOccurrence",
    "ConsoleMethod",
    "ConsoleResolution",
    "GlobalBinding",
    "collect_occurrences",
    "cook_template_chars",
    "logger_is_bound",
    "prologue_edit",
    "reconstruct_call",
    "render_prologue",
    "resolve_console",
    "run",
]
