"""Source text representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node


@dataclass(frozen=True)
class Span:
    """A range within a source file (1-indexed lines and columns)."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


def span_of(node: Node, file: str) -> Span:
    """Convert a tree node's 0-indexed points to a 1-indexed Span."""
    start_row, start_col = node.start_point
    end_row, end_col = node.end_point
    return Span(file, start_row + 1, start_col + 1, end_row + 1, end_col)


class SourceFile:
    """A named piece of MATLAB source, read from disk or handed over by the caller."""

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self.content = content
        self.lines = content.splitlines()

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        return cls(str(path), path.read_text(encoding="utf-8"))

    @property
    def encoded(self) -> bytes:
        return self.content.encode("utf-8")

    def line_at(self, n: int) -> str:
        """Return the 1-indexed line, or empty string if out of range."""
        if 1 <= n <= len(self.lines):
            return self.lines[n - 1]
        return ""
