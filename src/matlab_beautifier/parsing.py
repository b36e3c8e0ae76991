"""tree-sitter front end: turns MATLAB source into a concrete syntax tree."""

from __future__ import annotations

import tree_sitter_matlab
from tree_sitter import Language, Node, Parser, Tree

from matlab_beautifier.errors import SYNTAX_ERROR, format_error
from matlab_beautifier.source import span_of

MATLAB = Language(tree_sitter_matlab.language())


def parse(source: str | bytes) -> Tree:
    """Parse MATLAB source. Never fails; errors are reported inside the tree.

    The grammar needs a newline after the last statement, so one is added when the
    source does not end with it. Byte offsets of the original text are unchanged.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    if not source.endswith(b"\n"):
        source += b"\n"
    return Parser(MATLAB).parse(source)


def find_syntax_error(node: Node) -> Node | None:
    """Return the first ERROR or missing node in document order."""
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = find_syntax_error(child)
        if found is not None:
            return found
    return node


def check_syntax(root: Node, file: str) -> None:
    """Raise FormatError if the tree under ``root`` has a syntax error anywhere."""
    if not root.has_error:
        return
    culprit = find_syntax_error(root) or root
    if culprit.is_missing:
        label = f"expected `{culprit.type}` here"
    else:
        label = "could not parse this"
    raise format_error(
        SYNTAX_ERROR, "parsed file contains errors", span_of(culprit, file), label,
    )


def dump_tree(node: Node, depth: int = 0, field_name: str | None = None) -> list[str]:
    """Readable outline of the tree: kind, 1-indexed position, field names."""
    row, col = node.start_point
    prefix = f"{field_name}: " if field_name else ""
    lines = [f"{'  ' * depth}{prefix}{node.type} [{row + 1}:{col + 1}]"]
    for i, child in enumerate(node.children):
        if not child.is_named:
            continue
        lines.extend(dump_tree(child, depth + 1, node.field_name_for_child(i)))
    return lines
