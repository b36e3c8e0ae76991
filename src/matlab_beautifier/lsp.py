"""matlab-beautifier language server: pygls-based LSP for .m files.

Publishes syntax-error diagnostics and provides whole-document formatting
via stdio transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer
from pygls.uris import to_fs_path
from tree_sitter import Tree

from matlab_beautifier import __version__
from matlab_beautifier.config import FormatOptions, config_for
from matlab_beautifier.errors import Diagnostic, FormatError, Severity
from matlab_beautifier.formatter import MatlabFormatter
from matlab_beautifier.parsing import check_syntax, parse
from matlab_beautifier.source import Span

# ── Conversion helpers ────────────────────────────────────────────

_SEVERITY_MAP = {
    Severity.ERROR: lsp.DiagnosticSeverity.Error,
}


def span_to_range(span: Span) -> lsp.Range:
    """Convert a 1-indexed Span to a 0-indexed LSP Range."""
    return lsp.Range(
        start=lsp.Position(line=span.start_line - 1, character=span.start_col - 1),
        end=lsp.Position(line=span.end_line - 1, character=span.end_col),
    )


def _to_lsp_diag(d: Diagnostic) -> lsp.Diagnostic:
    span_range = lsp.Range(start=lsp.Position(0, 0), end=lsp.Position(0, 0))
    if d.labels:
        span_range = span_to_range(d.labels[0].span)
    return lsp.Diagnostic(
        range=span_range,
        severity=_SEVERITY_MAP[d.severity],
        source="matlab-beautifier",
        code=d.code,
        message=f"[{d.code}] {d.message}",
    )


def _whole_document_edit(source: str, formatted: str) -> lsp.TextEdit:
    """Edit replacing the whole of ``source`` with ``formatted``."""
    end_line = len(source.splitlines())
    return lsp.TextEdit(
        range=lsp.Range(
            start=lsp.Position(0, 0),
            end=lsp.Position(end_line, 0),
        ),
        new_text=formatted,
    )


# ── Per-document state ────────────────────────────────────────────


@dataclass
class DocumentState:
    """Cached parse results for a single open document."""

    source: str = ""
    tree: Tree | None = None
    diagnostics: list[lsp.Diagnostic] = field(default_factory=list)


# ── Server ────────────────────────────────────────────────────────

server = LanguageServer(
    "matlab-beautifier-lsp", __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)
_state: dict[str, DocumentState] = {}


def _analyze(uri: str, source: str) -> DocumentState:
    """Parse the document, cache the tree when it is error free, return state."""
    ds = DocumentState(source=source)
    tree = parse(source)
    try:
        check_syntax(tree.root_node, uri)
    except FormatError as e:
        ds.diagnostics = [_to_lsp_diag(d) for d in e.diagnostics]
    else:
        ds.tree = tree
    _state[uri] = ds
    return ds


def _options_for(uri: str) -> FormatOptions:
    path = to_fs_path(uri) if uri.startswith("file:") else None
    if path is None:
        return FormatOptions()
    return config_for(Path(path).parent).options()


def _publish(uri: str, diagnostics: list[lsp.Diagnostic]) -> None:
    server.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
        uri=uri,
        diagnostics=diagnostics,
    ))


# ── LSP Feature Handlers ─────────────────────────────────────────


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    uri = params.text_document.uri
    ds = _analyze(uri, params.text_document.text)
    _publish(uri, ds.diagnostics)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    # Full sync: the last change holds the whole text
    source = params.content_changes[-1].text if params.content_changes else ""
    ds = _analyze(uri, source)
    _publish(uri, ds.diagnostics)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    _state.pop(params.text_document.uri, None)


@server.feature(lsp.TEXT_DOCUMENT_FORMATTING)
def formatting(params: lsp.DocumentFormattingParams) -> list[lsp.TextEdit] | None:
    uri = params.text_document.uri
    ds = _state.get(uri)
    if ds is None or ds.tree is None:
        return None

    fmt = MatlabFormatter(_options_for(uri))
    try:
        formatted = fmt.format_tree(ds.tree.root_node, ds.source.encode("utf-8"), uri)
    except FormatError as e:
        ds.diagnostics = [_to_lsp_diag(d) for d in e.diagnostics]
        _publish(uri, ds.diagnostics)
        return None

    if formatted == ds.source:
        return None
    return [_whole_document_edit(ds.source, formatted)]


# ── Entry point ──────────────────────────────────────────────────


def main() -> None:
    """Start the matlab-beautifier language server on stdio."""
    server.start_io()
