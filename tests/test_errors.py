"""Tests for diagnostics, their rendering, and source spans."""

from __future__ import annotations

from matlab_beautifier.errors import (
    MISSING_ELEMENT,
    SYNTAX_ERROR,
    Diagnostic,
    DiagnosticLabel,
    DiagnosticRenderer,
    FormatError,
    Severity,
    format_error,
)
from matlab_beautifier.parsing import parse
from matlab_beautifier.source import SourceFile, Span, span_of


class TestRenderer:
    def test_render_error(self):
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=SYNTAX_ERROR,
            message="parsed file contains errors",
            labels=[DiagnosticLabel(Span("test.m", 1, 5, 1, 5), "could not parse this")],
        )
        output = DiagnosticRenderer(color=False).render(diag)
        assert "error[E001]: parsed file contains errors" in output
        assert "--> test.m:1:5" in output
        assert "could not parse this" in output

    def test_render_note(self):
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=MISSING_ELEMENT,
            message="error accessing field `left` of `assignment`",
            notes=["the installed grammar may differ"],
        )
        output = DiagnosticRenderer(color=False).render(diag)
        assert output.startswith("error[E002]: error accessing field `left`")
        assert "= note: the installed grammar may differ" in output

    def test_color_codes(self):
        diag = Diagnostic(severity=Severity.ERROR, code="E001", message="x")
        assert "\033[" in DiagnosticRenderer(color=True).render(diag)
        assert "\033[" not in DiagnosticRenderer(color=False).render(diag)

    def test_source_line_from_memory(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.add_source(SourceFile("<stdin>", "a = 1\nx = (\n"))
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=SYNTAX_ERROR,
            message="bad",
            labels=[DiagnosticLabel(Span("<stdin>", 2, 5, 2, 5))],
        )
        output = renderer.render(diag)
        assert "   2 | x = (" in output
        assert "    ^" in output

    def test_source_line_out_of_range_is_skipped(self):
        renderer = DiagnosticRenderer(color=False)
        renderer.add_source(SourceFile("<stdin>", "a = 1\n"))
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=SYNTAX_ERROR,
            message="bad",
            labels=[DiagnosticLabel(Span("<stdin>", 9, 1, 9, 1), "here")],
        )
        output = renderer.render(diag)
        assert "^" not in output
        assert "here" in output

    def test_source_line_from_disk(self, tmp_path):
        path = tmp_path / "f.m"
        path.write_text("y = 2\n")
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=MISSING_ELEMENT,
            message="bad",
            labels=[DiagnosticLabel(Span(str(path), 1, 1, 1, 5))],
        )
        output = DiagnosticRenderer(color=False).render(diag)
        assert "| y = 2" in output
        assert "^^^^^" in output


class TestFormatError:
    def test_message_joins_diagnostics(self):
        err = FormatError([
            Diagnostic(Severity.ERROR, "E001", "first"),
            Diagnostic(Severity.ERROR, "E002", "second"),
        ])
        assert str(err) == "first; second"
        assert len(err.diagnostics) == 2

    def test_format_error_helper(self):
        span = Span("a.m", 3, 1, 3, 4)
        err = format_error(MISSING_ELEMENT, "missing thing", span, "here")
        diag = err.diagnostics[0]
        assert diag.severity is Severity.ERROR
        assert diag.code == "E002"
        assert diag.labels == [DiagnosticLabel(span, "here")]
        assert diag.notes == []

    def test_format_error_notes(self):
        span = Span("a.m", 1, 1, 1, 1)
        err = format_error(MISSING_ELEMENT, "missing thing", span, notes=["n"])
        assert err.diagnostics[0].notes == ["n"]


class TestSource:
    def test_span_str(self):
        assert str(Span("a.m", 3, 7, 3, 9)) == "a.m:3:7"

    def test_span_of_node(self):
        tree = parse("x = 1\ny = 22\n")
        second = tree.root_node.named_children[1]
        span = span_of(second, "s.m")
        assert span == Span("s.m", 2, 1, 2, 6)

    def test_source_file(self, tmp_path):
        path = tmp_path / "f.m"
        path.write_text("a = 1\nb = 2\n")
        sf = SourceFile.from_path(path)
        assert sf.name == str(path)
        assert sf.line_at(2) == "b = 2"
        assert sf.line_at(5) == ""
        assert sf.encoded == b"a = 1\nb = 2\n"
