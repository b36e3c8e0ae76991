"""Tree-walking beautifier for MATLAB source code.

Walks the tree-sitter concrete syntax tree and re-emits the program with
canonical indentation, operator spacing, statement terminators and comment
placement. Whitespace is recomputed from the tree; the only thing taken from
the input layout is row information (blank lines, statements sharing a
line, multi-line matrices and comments).

Each construct has one ``_format_*`` method; ``_format_node`` dispatches on
the node kind and falls back to printing the node's source text, which covers
identifiers, numbers, strings and bare keywords.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, TextIO

from matlab_beautifier.config import FormatOptions, OperatorSpacing
from matlab_beautifier.errors import MISSING_ELEMENT, UNDECODABLE_TEXT, format_error
from matlab_beautifier.parsing import check_syntax, parse
from matlab_beautifier.render import INDENT_WIDTH, RenderState
from matlab_beautifier.source import span_of

if TYPE_CHECKING:
    from tree_sitter import Node

# Statements that close their own block; they never get a terminator.
_SELF_TERMINATED = frozenset({
    "arguments_statement",
    "class_definition",
    "comment",
    "for_statement",
    "function_definition",
    "if_statement",
    "spmd_statement",
    "switch_statement",
    "try_statement",
    "while_statement",
})

# Children that start the body of a construct; header pragmas come before them.
_BODY_KINDS = frozenset({
    "arguments_statement",
    "block",
    "case_clause",
    "catch_clause",
    "class_property",
    "else_clause",
    "elseif_clause",
    "enum",
    "enumeration",
    "events",
    "function_definition",
    "function_signature",
    "methods",
    "otherwise_clause",
    "properties",
    "property",
})

_CLAUSE_KINDS = frozenset({
    "case_clause",
    "catch_clause",
    "else_clause",
    "elseif_clause",
    "otherwise_clause",
})

_PROPERTY_KINDS = ("property", "class_property")
_ACCESSORS = ("get", "set", "get.", "set.")


class MatlabFormatter:
    """Format a MATLAB syntax tree back to canonical source text."""

    _HANDLERS: dict[str, str] = {
        "arguments_statement": "_format_arguments_statement",
        "assignment": "_format_assignment",
        "binary_operator": "_format_binary",
        "block": "_format_block",
        "boolean_operator": "_format_boolean",
        "cell": "_format_matrix",
        "class_definition": "_format_classdef",
        "class_property": "_format_property",
        "command": "_format_command",
        "comment": "_format_comment",
        "comparison_operator": "_format_boolean",
        "field_expression": "_format_field",
        "for_statement": "_format_for",
        "function_call": "_format_call",
        "function_definition": "_format_function",
        "global_operator": "_format_global",
        "handle_operator": "_format_unary",
        "if_statement": "_format_if",
        "indirect_access": "_format_parenthesis",
        "lambda": "_format_lambda",
        "line_continuation": "_format_line_continuation",
        "matrix": "_format_matrix",
        "metaclass_operator": "_format_unary",
        "multioutput_variable": "_format_multioutput",
        "not_operator": "_format_unary",
        "parenthesis": "_format_parenthesis",
        "persistent_operator": "_format_global",
        "postfix_operator": "_format_unary",
        "property": "_format_property",
        "property_name": "_format_property_name",
        "range": "_format_range",
        "row": "_format_row",
        "spmd_statement": "_format_spmd",
        "superclass": "_format_property_name",
        "switch_statement": "_format_switch",
        "try_statement": "_format_try",
        "unary_operator": "_format_unary",
        "while_statement": "_format_while",
    }

    def __init__(self, options: FormatOptions | None = None) -> None:
        self.options = options or FormatOptions()
        self._code = b""
        self._file = "<input>"
        self._state = RenderState()
        self._on_header: set[int] = set()
        self._header_tail: set[int] = set()

    # ── Public API ─────────────────────────────────────────────

    def format_tree(self, root: Node, code: bytes, file: str = "<input>") -> str:
        """Format the tree parsed from ``code`` and return the text."""
        self._render(root, code, file, RenderState())
        return self._state.getvalue()

    def write_tree(
        self, root: Node, code: bytes, out: TextIO, file: str = "<input>",
    ) -> None:
        """Format the tree parsed from ``code``, writing straight to ``out``."""
        self._render(root, code, file, RenderState(out))

    def _render(self, root: Node, code: bytes, file: str, state: RenderState) -> None:
        check_syntax(root, file)
        self._code = code
        self._file = file
        self._state = state
        self._on_header = set()
        self._header_tail = set()
        self._format_block(root, self.options)

    # ── Tree access ────────────────────────────────────────────

    def _text(self, node: Node) -> str:
        return self._slice(node, node)

    def _slice(self, first: Node, last: Node) -> str:
        raw = self._code[first.start_byte:last.end_byte]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise format_error(
                UNDECODABLE_TEXT,
                f"source of `{first.type}` is not valid UTF-8",
                span_of(first, self._file),
            ) from None

    def _missing(self, node: Node, what: str) -> Exception:
        return format_error(
            MISSING_ELEMENT,
            f"error accessing {what} of `{node.type}`",
            span_of(node, self._file),
            "the formatter does not understand this construct",
            notes=[
                "the installed tree-sitter-matlab grammar may differ from the one "
                "this formatter was written against"
            ],
        )

    def _field(self, node: Node, name: str) -> Node:
        child = node.child_by_field_name(name)
        if child is None:
            raise self._missing(node, f"field `{name}`")
        return child

    def _nth_named(self, node: Node, index: int) -> Node:
        child = node.named_child(index)
        if child is None:
            raise self._missing(node, f"child #{index}")
        return child

    @staticmethod
    def _child(node: Node, kind: str) -> Node | None:
        for child in node.children:
            if child.type == kind:
                return child
        return None

    @staticmethod
    def _children(node: Node, *kinds: str) -> list[Node]:
        return [c for c in node.children if c.type in kinds]

    @staticmethod
    def _operands(node: Node) -> list[Node]:
        return [c for c in node.named_children if c.type != "line_continuation"]

    def _command_name(self, statement: Node) -> str | None:
        """Name of a bareword command statement; ``cvx_begin`` alone is an identifier."""
        if statement.type == "identifier":
            return self._text(statement)
        if statement.type == "command":
            return self._text(self._nth_named(statement, 0))
        return None

    def _print_node(self, node: Node) -> None:
        self._state.write(self._text(node))

    def _format_node(self, node: Node, opts: FormatOptions) -> None:
        handler = self._HANDLERS.get(node.type)
        if handler is None:
            self._print_node(node)
        else:
            getattr(self, handler)(node, opts)

    # ── Blocks ─────────────────────────────────────────────────

    def _format_block(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        original_depth = s.depth
        s.reset_alignment()
        s.indent()

        statements = list(node.named_children)
        # Comments hugging the block belong to it, except header pragmas.
        prev = node.prev_named_sibling
        while prev is not None and prev.type == "comment":
            if self._is_body_comment(prev):
                statements.insert(0, prev)
            prev = prev.prev_named_sibling
        nxt = node.next_named_sibling
        # The parser lifts a clause body's trailing comments out of the clause.
        if nxt is None and node.parent is not None and node.parent.type in _CLAUSE_KINDS:
            nxt = node.parent.next_named_sibling
        while nxt is not None and nxt.type == "comment":
            statements.append(nxt)
            nxt = nxt.next_named_sibling

        for i, child in enumerate(statements):
            previous = statements[i - 1] if i > 0 else None
            following = statements[i + 1] if i + 1 < len(statements) else None
            command = self._command_name(child)

            if command in opts.dedent_commands:
                s.depth = original_depth
            if previous is not None:
                if child.start_point.row - previous.end_point.row > 1:
                    s.newline()
                # Only assignments and trailing comments share a line.
                shares_row = child.start_point.row == previous.end_point.row
                inline = child.type == "comment" or (
                    child.type == "assignment" and previous.type == "assignment"
                )
                if not (shares_row and inline):
                    s.newline()
                    s.indent()

            self._format_node(child, opts)
            s.reset_alignment()
            if command in opts.indent_commands:
                s.depth += 1

            if child.type in _SELF_TERMINATED:
                continue
            if (
                following is not None
                and child.type == "assignment"
                and following.type == "assignment"
                and child.end_point.row == following.start_point.row
            ):
                s.write(", ")
            else:
                s.write(";")

        s.reset_alignment()
        s.depth = original_depth
        s.newline()

    @contextmanager
    def _indented(self) -> Iterator[None]:
        self._state.depth += 1
        try:
            yield
        finally:
            self._state.depth -= 1

    def _format_body(
        self, block: Node | None, owner: Node, opts: FormatOptions, *, after: bool = False,
    ) -> None:
        """Render a nested block, or the comments standing in for an empty one.

        With ``after``, the comments following a clause also belong to its body.
        """
        self._state.reset_alignment()
        with self._indented():
            if block is not None:
                self._format_block(block, opts)
                return
            self._print_inner_comments(owner, opts)
            if after:
                self._print_comments_after(owner, opts)

    def _close(self) -> None:
        self._state.indent()
        self._state.write("end")

    # ── Comments ───────────────────────────────────────────────

    def _format_comment(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        text = self._text(node)

        if node.start_point.row != node.end_point.row and text.startswith("%{"):
            body = text[2:].rstrip()
            if not body.endswith("%}"):
                raise self._missing(node, "closing `%}`")
            lines = [line.strip() for line in body[:-2].split("\n")]
            s.newline("%{")
            s.set_alignment(2)
            for line in lines:
                if line:
                    s.indent()
                    s.newline(line)
            s.reset_alignment()
            s.indent()
            s.write("%}")
            return

        # A run of line comments may be merged into one node.
        lines = text.split("\n")
        if node.id in self._header_tail:
            lines = lines[1:]
        self._comment_gap()
        for i, line in enumerate(lines):
            if i:
                s.newline()
                s.indent()
            self._write_comment_line(line, opts)

    def _comment_gap(self) -> None:
        s = self._state
        if s.column != INDENT_WIDTH * s.depth:
            s.write(" ")

    def _write_comment_line(self, line: str, opts: FormatOptions) -> None:
        s = self._state
        line = line.strip()
        if opts.is_pragma(line) or line.startswith("%%"):
            s.write(line)
            return
        body = line.removeprefix("%").strip()
        s.write("%")
        if body:
            s.write(" " + body)

    def _header_pragmas(
        self, node: Node, opts: FormatOptions, stop: frozenset[str] = _BODY_KINDS,
    ) -> None:
        """Print linter directives attached to a construct's header line.

        Only the first line of a merged comment run goes on the header; the rest
        is printed with the body.
        """
        for child in node.named_children:
            if child.type in stop:
                break
            if child.type != "comment":
                continue
            first, *rest = self._text(child).split("\n")
            if not opts.is_pragma(first):
                continue
            self._comment_gap()
            self._write_comment_line(first, opts)
            if any(line.strip() for line in rest):
                self._header_tail.add(child.id)
            else:
                self._on_header.add(child.id)

    def _is_body_comment(self, comment: Node) -> bool:
        return comment.id not in self._on_header

    def _print_inner_comments(self, node: Node, opts: FormatOptions) -> None:
        for child in node.named_children:
            if child.type in _BODY_KINDS:
                break
            if child.type == "comment" and self._is_body_comment(child):
                self._print_comment_line(child, opts)

    def _print_comments_after(self, node: Node, opts: FormatOptions) -> None:
        nxt = node.next_named_sibling
        while nxt is not None and nxt.type == "comment":
            if self._is_body_comment(nxt):
                self._print_comment_line(nxt, opts)
            nxt = nxt.next_named_sibling

    def _print_comment_line(self, comment: Node, opts: FormatOptions) -> None:
        self._state.indent()
        self._format_comment(comment, opts)
        self._state.newline()

    def _format_line_continuation(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        if not s.after_space:
            s.write(" ")
        # The marker may or may not include the line break it consumes.
        s.newline(self._text(node).rstrip())
        s.indent()

    # ── Expressions ────────────────────────────────────────────

    def _format_assignment(self, node: Node, opts: FormatOptions) -> None:
        left = self._field(node, "left")
        right = node.child_by_field_name("right")
        if right is None:
            right = self._last_operand(node, "right-hand side", skip=left)
        self._format_node(left, opts)
        self._state.write(" = ")
        self._format_node(right, opts)
        self._state.reset_alignment()

    def _last_operand(self, node: Node, what: str, skip: Node | None = None) -> Node:
        operands = [
            c for c in self._operands(node)
            if c.type not in ("comment", "arguments")
            and (skip is None or c.id != skip.id)
        ]
        if not operands:
            raise self._missing(node, what)
        return operands[-1]

    def _format_binary(self, node: Node, opts: FormatOptions) -> None:
        self._format_operator_chain(node, opts, opts.spaces_around)

    def _format_boolean(self, node: Node, opts: FormatOptions) -> None:
        self._format_operator_chain(node, opts, lambda operator: True)

    def _format_operator_chain(
        self, node: Node, opts: FormatOptions, spaced: Callable[[str], bool],
    ) -> None:
        s = self._state
        s.latch_alignment(s.offset())
        after_continuation = False
        for child in node.children:
            if child.is_named:
                after_continuation = child.type == "line_continuation"
                self._format_node(child, opts)
                continue
            operator = self._text(child).strip()
            if spaced(operator):
                # A continuation already ended the line and indented.
                if not after_continuation:
                    s.write(" ")
                s.latch_alignment(s.offset())
                s.write(operator)
                s.write(" ")
            else:
                s.latch_alignment(s.offset())
                s.write(operator)

    def _format_unary(self, node: Node, opts: FormatOptions) -> None:
        for child in node.children:
            if child.type != "line_continuation":
                self._format_node(child, opts)

    def _format_parenthesis(self, node: Node, opts: FormatOptions) -> None:
        operands = self._operands(node)
        if not operands:
            raise self._missing(node, "inner expression")
        s = self._state
        s.write("(")
        s.latch_alignment(s.offset())
        self._format_node(operands[0], opts)
        s.write(")")

    def _format_range(self, node: Node, opts: FormatOptions) -> None:
        tight = replace(opts, operator_spacing=OperatorSpacing.NONE)
        for i, child in enumerate(self._operands(node)):
            if i:
                self._state.write(":")
            self._format_node(child, tight)

    def _format_multioutput(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("[")
        for i, child in enumerate(self._operands(node)):
            if i:
                s.write(", ")
            self._format_node(child, opts)
        s.write("]")

    def _format_lambda(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        arguments = self._child(node, "arguments")
        body = node.child_by_field_name("expression")
        if body is None:
            body = self._last_operand(node, "body")
        s.write("@(")
        if arguments is not None:
            s.write(", ".join(self._text(a) for a in self._operands(arguments)))
        s.write(") ")
        self._format_node(body, opts)

    def _format_call(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        parens = True
        for child in node.children:
            if child.type == "line_continuation":
                continue
            if not child.is_named:
                bracket = self._text(child)
                if bracket == "(":
                    break
                if bracket == "{":
                    parens = False
                    break
            self._format_node(child, opts)

        s.write("(" if parens else "{")
        previous = s.extra_indentation
        s.set_alignment(s.offset())
        arguments = self._child(node, "arguments")
        if arguments is not None:
            self._format_arguments(arguments, opts)
        s.write(")" if parens else "}")
        s.set_alignment(previous)

    def _format_arguments(self, node: Node, opts: FormatOptions) -> None:
        children = node.named_children
        for i, child in enumerate(children):
            if i and children[i - 1].type != "line_continuation":
                self._state.write(", ")
            self._format_node(child, opts)

    def _format_command(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        for i, child in enumerate(node.children):
            if i:
                s.write(" ")
            self._format_node(child, opts)
            if child.type == "command_name":
                s.set_alignment(s.offset())
        s.reset_alignment()

    def _format_field(self, node: Node, opts: FormatOptions) -> None:
        parts = [c for c in node.named_children if not c.is_extra]
        for i, child in enumerate(parts):
            if i:
                self._state.write(".")
            self._format_node(child, opts)

    def _format_matrix(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        opening, closing = ("[", "]") if node.type == "matrix" else ("{", "}")
        multiline = node.start_point.row != node.end_point.row

        s.write(opening)
        previous = s.extra_indentation
        s.set_alignment(s.offset())
        first = True
        for child in node.named_children:
            if child.type == "comment":
                if not first:
                    s.write(";")
                self._format_comment(child, opts)
                s.newline()
                s.indent()
                first = True
                continue
            if not first:
                if multiline:
                    s.newline(";")
                    s.indent()
                else:
                    s.write("; ")
            self._format_node(child, opts)
            if not child.is_extra:
                first = False
        s.write(closing)
        s.set_alignment(previous)

    def _format_row(self, node: Node, opts: FormatOptions) -> None:
        first = True
        for child in node.named_children:
            if not first and not child.is_extra:
                self._state.write(" ")
            self._format_node(child, opts)
            first = child.is_extra

    def _format_global(self, node: Node, opts: FormatOptions) -> None:
        names = [c for c in node.children if c.type != "line_continuation"]
        self._state.write(" ".join(self._text(c) for c in names))

    # ── Control flow ───────────────────────────────────────────

    def _format_if(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("if ")
        self._format_node(self._field(node, "condition"), opts)
        self._header_pragmas(node, opts)
        s.newline()
        self._format_body(self._child(node, "block"), node, opts)

        for clause in self._children(node, "elseif_clause"):
            s.indent()
            s.write("elseif ")
            self._format_node(self._field(clause, "condition"), opts)
            self._header_pragmas(clause, opts)
            s.newline()
            self._format_body(self._child(clause, "block"), clause, opts, after=True)

        otherwise = self._child(node, "else_clause")
        if otherwise is not None:
            s.indent()
            s.write("else")
            self._header_pragmas(otherwise, opts)
            s.newline()
            self._format_body(self._child(otherwise, "block"), otherwise, opts, after=True)
        self._close()

    def _format_for(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        keyword = node.child(0)
        if keyword is None:
            raise self._missing(node, "keyword")
        iterator = self._child(node, "iterator")
        if iterator is None:
            raise self._missing(node, "iterator")
        variable = self._nth_named(iterator, 0)
        values = self._nth_named(iterator, 1)
        parfor_options = self._child(node, "parfor_options")

        s.write(self._text(keyword) + " ")
        if parfor_options is not None:
            s.write("(")
        self._print_node(variable)
        s.write(" = ")
        self._format_node(values, opts)
        if parfor_options is not None:
            s.write(", ")
            self._print_node(self._nth_named(parfor_options, 0))
            s.write(")")
        self._header_pragmas(node, opts)
        s.newline()
        self._format_body(self._child(node, "block"), node, opts)
        self._close()

    def _format_while(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("while ")
        self._format_node(self._field(node, "condition"), opts)
        self._header_pragmas(node, opts)
        s.newline()
        self._format_body(self._child(node, "block"), node, opts)
        self._close()

    def _format_spmd(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        header = []
        for child in node.children[1:]:
            if child.type in _BODY_KINDS or child.type in ("comment", "end"):
                break
            header.append(child)
        s.write("spmd")
        if header:
            s.write(" " + self._slice(header[0], header[-1]))
        self._header_pragmas(node, opts)
        s.newline()
        self._format_body(self._child(node, "block"), node, opts)
        self._close()

    def _format_switch(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("switch ")
        self._format_node(self._field(node, "condition"), opts)
        self._header_pragmas(node, opts)
        s.newline()
        with self._indented():
            self._print_inner_comments(node, opts)
            for case in self._children(node, "case_clause"):
                s.indent()
                s.write("case ")
                self._format_node(self._field(case, "condition"), opts)
                self._header_pragmas(case, opts)
                s.newline()
                self._format_body(self._child(case, "block"), case, opts, after=True)
            otherwise = self._child(node, "otherwise_clause")
            if otherwise is not None:
                s.indent()
                s.write("otherwise")
                self._header_pragmas(otherwise, opts)
                s.newline()
                self._format_body(
                    self._child(otherwise, "block"), otherwise, opts, after=True,
                )
        self._close()

    def _format_try(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("try")
        self._header_pragmas(node, opts)
        s.newline()
        self._format_body(self._child(node, "block"), node, opts)

        catch = self._child(node, "catch_clause")
        if catch is not None:
            capture = self._child(catch, "identifier")
            s.indent()
            s.write("catch")
            if capture is not None:
                s.write(" ")
                self._print_node(capture)
            self._header_pragmas(catch, opts)
            s.newline()
            self._format_body(self._child(catch, "block"), catch, opts, after=True)
        self._close()

    # ── Functions ──────────────────────────────────────────────

    def _format_function(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("function ")
        self._format_signature(node, opts)
        self._header_pragmas(node, opts)
        s.newline()
        s.reset_alignment()
        with self._indented():
            for statement in self._children(node, "arguments_statement"):
                s.indent()
                self._format_arguments_statement(statement, opts)
                s.newline()
        self._format_body(self._child(node, "block"), node, opts)
        self._close()

    def _format_signature(self, node: Node, opts: FormatOptions) -> None:
        """``[outputs] = get.name(arguments)``, shared by definitions and signatures."""
        s = self._state
        output = self._child(node, "function_output")
        name = self._field(node, "name")
        arguments = self._child(node, "function_arguments")
        accessor = None
        for child in node.children:
            if not child.is_named and self._text(child) in _ACCESSORS:
                accessor = self._text(child)
                break

        if output is not None:
            target = output.child(0)
            if target is None:
                raise self._missing(output, "output variable")
            self._format_node(target, opts)
            s.write(" = ")
        if accessor is not None:
            s.write(accessor.rstrip(".") + ".")
        self._print_node(name)
        if arguments is not None:
            s.write("(")
            s.write(", ".join(self._text(a) for a in self._operands(arguments)))
            s.write(")")

    def _format_arguments_statement(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.reset_alignment()
        s.write("arguments")
        attributes = self._child(node, "attributes")
        if attributes is not None:
            s.write(" ")
            self._format_attributes(attributes, opts)
        self._header_pragmas(node, opts)
        s.newline()
        self._format_members(node, _PROPERTY_KINDS, opts)
        self._close()

    def _format_property(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        name = self._field(node, "name")
        dimensions = self._child(node, "dimensions")
        validators = self._child(node, "validation_functions")
        default = self._child(node, "default_value")
        klass = None
        for child in node.children:
            if child.id != name.id and child.type in ("identifier", "property_name"):
                klass = child
                break

        if name.type == "identifier":
            self._print_node(name)
        else:
            self._format_property_name(name, opts)
        if dimensions is not None:
            s.write(" ")
            self._format_dimensions(dimensions)
        if klass is not None:
            s.write(" ")
            self._format_node(klass, opts)
        if validators is not None:
            s.write(" {")
            self._format_arguments(validators, opts)
            s.write("}")
        if default is not None:
            s.write(" = ")
            self._format_node(self._nth_named(default, 0), opts)

    def _format_property_name(self, node: Node, opts: FormatOptions) -> None:
        if not node.children:
            self._print_node(node)
        for child in node.children:
            self._print_node(child)

    def _format_dimensions(self, node: Node) -> None:
        sizes = [c for c in node.children if c.type not in ("(", ")", ",")]
        self._state.write("(" + ",".join(self._text(c) for c in sizes) + ")")

    # ── Classes ────────────────────────────────────────────────

    def _format_classdef(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        attributes = self._child(node, "attributes")
        name = self._field(node, "name")
        superclasses = self._child(node, "superclasses")

        s.write("classdef ")
        if attributes is not None:
            self._format_attributes(attributes, opts)
            s.write(" ")
        self._print_node(name)
        if superclasses is not None:
            s.write(" < ")
            for i, superclass in enumerate(self._operands(superclasses)):
                if i:
                    s.write(" & ")
                self._format_property_name(superclass, opts)
        self._header_pragmas(node, opts)
        s.newline()
        s.reset_alignment()

        sections = (
            ("properties", self._format_properties),
            ("enumeration", self._format_enumeration),
            ("events", self._format_events),
            ("methods", self._format_methods),
        )
        with self._indented():
            for kind, format_section in sections:
                for section in self._children(node, kind):
                    s.indent()
                    format_section(section, opts)
                    s.newline()
        self._close()

    def _format_attributes(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        s.write("(")
        for i, attribute in enumerate(self._children(node, "attribute")):
            if i:
                s.write(", ")
            self._format_attribute(attribute, opts)
        s.write(")")

    def _format_attribute(self, node: Node, opts: FormatOptions) -> None:
        named_seen = False
        for child in node.children:
            if not child.is_named:
                self._state.write(self._text(child).strip())
            elif not named_seen:
                named_seen = True
                self._print_node(child)
            else:
                self._format_node(child, opts)

    def _section_header(
        self,
        keyword: str,
        node: Node,
        opts: FormatOptions,
        stop: frozenset[str] = _BODY_KINDS,
    ) -> None:
        s = self._state
        s.write(keyword)
        attributes = self._child(node, "attributes")
        if attributes is not None:
            s.write(" ")
            self._format_attributes(attributes, opts)
        self._header_pragmas(node, opts, stop)
        s.newline()

    def _format_members(self, node: Node, kinds: tuple[str, ...], opts: FormatOptions) -> None:
        """One member per line, with the section's comments kept in place."""
        s = self._state
        previous = None
        with self._indented():
            for child in node.named_children:
                if child.type == "comment":
                    if not self._is_body_comment(child):
                        continue
                    trailing = previous is not None and (
                        child.start_point.row == previous.end_point.row
                    )
                    if trailing:
                        self._format_comment(child, opts)
                        previous = child
                        continue
                elif child.type not in kinds:
                    continue
                if previous is not None:
                    s.newline()
                s.indent()
                self._format_member(child, opts)
                if child.type != "comment":
                    for comment in self._children(child, "comment"):
                        self._format_comment(comment, opts)
                previous = child
            if previous is not None:
                s.newline()

    def _format_properties(self, node: Node, opts: FormatOptions) -> None:
        self._section_header("properties", node, opts)
        self._format_members(node, _PROPERTY_KINDS, opts)
        self._close()

    def _format_enumeration(self, node: Node, opts: FormatOptions) -> None:
        self._section_header("enumeration", node, opts)
        self._format_members(node, ("enum",), opts)
        self._close()

    def _format_events(self, node: Node, opts: FormatOptions) -> None:
        self._section_header("events", node, opts, _BODY_KINDS | {"identifier"})
        self._format_members(node, ("identifier",), opts)
        self._close()

    def _format_member(self, node: Node, opts: FormatOptions) -> None:
        if node.type == "comment":
            self._format_comment(node, opts)
        elif node.type == "enum":
            self._format_enum(node, opts)
        elif node.type == "identifier":
            self._print_node(node)
        else:
            self._format_property(node, opts)

    def _format_enum(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        name, *arguments = [c for c in self._operands(node) if c.type != "comment"]
        self._print_node(name)
        if arguments:
            s.write(" (")
            for i, argument in enumerate(arguments):
                if i:
                    s.write(", ")
                self._format_node(argument, opts)
            s.write(")")

    def _format_methods(self, node: Node, opts: FormatOptions) -> None:
        s = self._state
        self._section_header("methods", node, opts)
        signatures = self._children(node, "function_signature")
        definitions = self._children(node, "function_definition")
        with self._indented():
            for signature in signatures:
                s.indent()
                self._format_signature(signature, opts)
                s.newline()
            for i, definition in enumerate(definitions):
                if i or signatures:
                    s.newline()
                s.indent()
                self._format_function(definition, opts)
                s.newline()
        self._close()


# ── Driver ─────────────────────────────────────────────────────


def beautify(
    source: str | bytes, options: FormatOptions | None = None, file: str = "<input>",
) -> str:
    """Parse and format MATLAB source, returning the formatted text.

    Raises FormatError when the source has syntax errors or contains a
    construct the formatter cannot lay out.
    """
    code = source.encode("utf-8") if isinstance(source, str) else source
    tree = parse(code)
    return MatlabFormatter(options).format_tree(tree.root_node, code, file)


def beautify_to(
    source: str | bytes,
    out: TextIO,
    options: FormatOptions | None = None,
    file: str = "<input>",
) -> None:
    """Like ``beautify`` but writes the text to ``out`` as it is produced."""
    code = source.encode("utf-8") if isinstance(source, str) else source
    tree = parse(code)
    MatlabFormatter(options).write_tree(tree.root_node, code, out, file)
