"""matlab-beautifier command-line interface."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from matlab_beautifier import __version__
from matlab_beautifier.config import FormatOptions, config_for, load_config
from matlab_beautifier.errors import DiagnosticRenderer, FormatError
from matlab_beautifier.formatter import beautify
from matlab_beautifier.parsing import dump_tree, parse
from matlab_beautifier.source import SourceFile


def _resolve_options(
    config_path: Path | None,
    start: Path | None,
    *,
    sparse_math: bool,
    sparse_add: bool,
) -> FormatOptions:
    """Explicit --config wins; otherwise the nearest config file, or defaults."""
    config = load_config(config_path) if config_path else config_for(start)
    return config.options(sparse_math=sparse_math, sparse_add=sparse_add)


def _report(error: FormatError, source: SourceFile) -> None:
    renderer = DiagnosticRenderer(color=True)
    renderer.add_source(source)
    for diag in error.diagnostics:
        click.echo(renderer.render(diag), err=True)


@click.group()
@click.version_option(__version__, prog_name="matlab-beautifier")
def main() -> None:
    """A formatter for MATLAB source code."""


@main.command(name="format")
@click.argument(
    "files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--sparse-math", is_flag=True, help="Surround all math operators with spaces.")
@click.option("--sparse-add", is_flag=True, help="Surround only + and - with spaces.")
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option(
    "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Use this matlab-beautifier.toml instead of searching for one.",
)
def format_cmd(
    files: tuple[Path, ...],
    sparse_math: bool,
    sparse_add: bool,
    check: bool,
    config_path: Path | None,
) -> None:
    """Format MATLAB files.

    With no FILES, read stdin and write to stdout. A single file is written
    to stdout; several files are formatted in place.
    """
    if not files:
        _format_stream(
            SourceFile("<stdin>", sys.stdin.read()),
            check=check,
            options=_options_or_exit(config_path, None, sparse_math, sparse_add),
        )
        return

    if len(files) == 1 and not check:
        path = files[0]
        try:
            source = SourceFile.from_path(path)
        except (OSError, UnicodeDecodeError) as e:
            click.echo(f"error: cannot read {path}: {e}", err=True)
            raise SystemExit(1)
        _format_stream(
            source,
            check=False,
            options=_options_or_exit(config_path, path, sparse_math, sparse_add),
        )
        return

    failed = False
    for path in files:
        options = _options_or_exit(config_path, path, sparse_math, sparse_add)
        if check:
            failed |= _check_file(path, options)
        else:
            failed |= not _rewrite_file(path, options)

    if failed:
        raise SystemExit(1)


def _options_or_exit(
    config_path: Path | None, start: Path | None, sparse_math: bool, sparse_add: bool,
) -> FormatOptions:
    try:
        return _resolve_options(
            config_path, start, sparse_math=sparse_math, sparse_add=sparse_add,
        )
    except (OSError, ValueError) as e:
        click.echo(f"error: invalid configuration: {e}", err=True)
        raise SystemExit(1)


def _format_stream(source: SourceFile, *, check: bool, options: FormatOptions) -> None:
    try:
        formatted = beautify(source.content, options, source.name)
    except FormatError as e:
        _report(e, source)
        raise SystemExit(1)
    if check:
        if formatted != source.content:
            raise SystemExit(1)
    else:
        sys.stdout.write(formatted)


def _check_file(path: Path, options: FormatOptions) -> bool:
    """Report whether ``path`` would change. Returns True when it would or fails."""
    try:
        source = SourceFile.from_path(path)
        formatted = beautify(source.content, options, source.name)
    except FormatError as e:
        click.echo(f"could not format {path} ({e})", err=True)
        return True
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"could not read {path} ({e})", err=True)
        return True
    if formatted != source.content:
        click.echo(f"would reformat {path}")
        return True
    return False


def _rewrite_file(path: Path, options: FormatOptions) -> bool:
    """Format ``path`` in place. Returns False on failure."""
    click.echo(f"Formatting file {path}: ", nl=False)
    try:
        source = SourceFile.from_path(path)
        formatted = beautify(source.content, options, source.name)
    except FormatError as e:
        click.echo(f"could not format ({e})")
        return False
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"could not read ({e})")
        return False
    click.echo("file formatted ", nl=False)
    try:
        path.write_text(formatted, encoding="utf-8")
    except OSError as e:
        click.echo(f"but could not be written ({e})")
        return False
    click.echo("and overwritten.")
    return True


@main.command()
def lsp() -> None:
    """Start the matlab-beautifier language server."""
    from matlab_beautifier.lsp import main as lsp_main

    lsp_main()


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def view(file: Path) -> None:
    """View the syntax tree of a MATLAB source file."""
    try:
        source = SourceFile.from_path(file)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"error: cannot read {file}: {e}", err=True)
        raise SystemExit(1)
    tree = parse(source.encoded)
    for line in dump_tree(tree.root_node):
        click.echo(line)
