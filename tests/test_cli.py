"""Tests for the matlab-beautifier CLI."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from matlab_beautifier import __version__
from matlab_beautifier.cli import main
from matlab_beautifier.config import CONFIG_NAME


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def tmp_sources(tmp_path):
    """Two unformatted MATLAB files in a temp dir."""
    first = tmp_path / "first.m"
    first.write_text("x=a+b\n")
    second = tmp_path / "second.m"
    second.write_text("if x\ny=1\nend\n")
    return tmp_path


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "format" in result.output
        assert "view" in result.output
        assert "lsp" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_format_help(self, runner):
        result = runner.invoke(main, ["format", "--help"])
        assert result.exit_code == 0
        assert "--sparse-math" in result.output
        assert "--sparse-add" in result.output
        assert "--check" in result.output

    def test_lsp_help(self, runner):
        result = runner.invoke(main, ["lsp", "--help"])
        assert result.exit_code == 0


class TestFormatStdin:
    def test_stdin_to_stdout(self, runner):
        result = runner.invoke(main, ["format"], input="x=1\n")
        assert result.exit_code == 0
        assert result.output == "x = 1;\n"

    def test_stdin_without_trailing_newline(self, runner):
        result = runner.invoke(main, ["format"], input="x=1")
        assert result.exit_code == 0
        assert result.output == "x = 1;\n"

    def test_sparse_math(self, runner):
        result = runner.invoke(main, ["format", "--sparse-math"], input="x=a*b\n")
        assert result.output == "x = a * b;\n"

    def test_sparse_add(self, runner):
        result = runner.invoke(main, ["format", "--sparse-add"], input="x=a*b+c\n")
        assert result.output == "x = a*b + c;\n"

    def test_check_formatted(self, runner):
        result = runner.invoke(main, ["format", "--check"], input="x = 1;\n")
        assert result.exit_code == 0
        assert result.output == ""

    def test_check_unformatted(self, runner):
        result = runner.invoke(main, ["format", "--check"], input="x=1\n")
        assert result.exit_code == 1

    def test_syntax_error(self, runner):
        result = runner.invoke(main, ["format"], input="x = (\n")
        assert result.exit_code == 1
        assert "error[E001]" in result.output
        assert "<stdin>:1:" in result.output


class TestFormatFiles:
    def test_single_file_to_stdout(self, runner, tmp_sources):
        path = tmp_sources / "first.m"
        result = runner.invoke(main, ["format", str(path)])
        assert result.exit_code == 0
        assert result.output == "x = a+b;\n"
        assert path.read_text() == "x=a+b\n"

    def test_many_files_in_place(self, runner, tmp_sources):
        first = tmp_sources / "first.m"
        second = tmp_sources / "second.m"
        result = runner.invoke(main, ["format", str(first), str(second)])
        assert result.exit_code == 0
        assert f"Formatting file {first}: file formatted and overwritten." in result.output
        assert first.read_text() == "x = a+b;\n"
        assert second.read_text() == "if x\n    y = 1;\nend\n"

    def test_bad_file_does_not_stop_batch(self, runner, tmp_sources):
        broken = tmp_sources / "broken.m"
        broken.write_text("x = (\n")
        first = tmp_sources / "first.m"
        result = runner.invoke(main, ["format", str(broken), str(first)])
        assert result.exit_code == 1
        assert "could not format (parsed file contains errors)" in result.output
        assert broken.read_text() == "x = (\n"
        assert first.read_text() == "x = a+b;\n"

    def test_check_files(self, runner, tmp_sources):
        first = tmp_sources / "first.m"
        done = tmp_sources / "done.m"
        done.write_text("y = 1;\n")
        result = runner.invoke(main, ["format", "--check", str(first), str(done)])
        assert result.exit_code == 1
        assert f"would reformat {first}" in result.output
        assert str(done) not in result.output
        assert first.read_text() == "x=a+b\n"

    def test_check_clean_file(self, runner, tmp_path):
        done = tmp_path / "done.m"
        done.write_text("y = 1;\n")
        result = runner.invoke(main, ["format", "--check", str(done)])
        assert result.exit_code == 0

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["format", str(tmp_path / "nope.m")])
        assert result.exit_code != 0


class TestFormatConfig:
    def test_config_found_next_to_file(self, runner, tmp_sources):
        (tmp_sources / CONFIG_NAME).write_text('[format]\noperator_spacing = "sparse_all"\n')
        result = runner.invoke(main, ["format", str(tmp_sources / "first.m")])
        assert result.output == "x = a + b;\n"

    def test_flag_overrides_config(self, runner, tmp_sources):
        (tmp_sources / CONFIG_NAME).write_text('[format]\noperator_spacing = "none"\n')
        result = runner.invoke(
            main, ["format", "--sparse-add", str(tmp_sources / "first.m")],
        )
        assert result.output == "x = a + b;\n"

    def test_explicit_config(self, runner, tmp_path):
        config = tmp_path / "custom.toml"
        config.write_text('[format]\noperator_spacing = "sparse_all"\n')
        result = runner.invoke(main, ["format", "--config", str(config)], input="x=a*b\n")
        assert result.output == "x = a * b;\n"

    def test_invalid_config(self, runner, tmp_path):
        config = tmp_path / "custom.toml"
        config.write_text('[format]\noperator_spacing = "wide"\n')
        result = runner.invoke(main, ["format", "--config", str(config)], input="x=1\n")
        assert result.exit_code == 1
        assert "invalid configuration" in result.output


class TestView:
    def test_view_command(self, runner, tmp_sources):
        result = runner.invoke(main, ["view", str(tmp_sources / "first.m")])
        assert result.exit_code == 0
        assert result.output.startswith("source_file [1:1]")
        assert "assignment [1:1]" in result.output
