"""Report models emitted by lint rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from tree_sitter import Node

REPORT_SCHEMA_VERSION = 1

RuleType = Literal["problem", "suggestion", "layout"]


class SourceSpan(BaseModel):
    """Source span of a syntax node (1-based lines and columns)."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    @classmethod
    def from_node(cls, node: Node) -> SourceSpan:
        return cls(
            start_line=node.start_point[0] + 1,
            start_col=node.start_point[1] + 1,
            end_line=node.end_point[0] + 1,
            end_col=node.end_point[1] + 1,
        )


class TextEdit(BaseModel):
    """Replace the UTF-8 byte range ``[start, end)`` with ``text``.

    An edit with ``start == end`` is a pure insertion before ``start``.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    text: str

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


class Report(BaseModel):
    """One detected problem, with an optional atomic fix."""

    schema_version: int = Field(default=REPORT_SCHEMA_VERSION)
    rule_id: str
    type: RuleType = "problem"
    path: str
    message: str
    loc: SourceSpan = Field(description="Location of the offending identifier")
    node_span: SourceSpan = Field(description="Span of the reported node")
    edits: list[TextEdit] = Field(
        default_factory=list,
        description="Ordered edits that together form one fix",
    )

    @property
    def fixable(self) -> bool:
        return bool(self.edits)

    def location(self) -> str:
        return f"{self.path}:{self.loc.start_line}:{self.loc.start_col}"


__all__ = ["REPORT_SCHEMA_VERSION", "Report", "RuleType", "SourceSpan", "TextEdit"]
