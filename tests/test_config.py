"""Tests for formatting options and matlab-beautifier.toml loading."""

from __future__ import annotations

import pytest

from matlab_beautifier.config import (
    CONFIG_NAME,
    BeautifierConfig,
    FormatOptions,
    OperatorSpacing,
    config_for,
    find_config,
    load_config,
    parse_spacing,
)


@pytest.fixture
def tmp_config(tmp_path):
    """Write a config file into a temp dir and return the dir."""

    def write(body: str):
        (tmp_path / CONFIG_NAME).write_text(body)
        return tmp_path

    return write


class TestFormatOptions:
    def test_defaults(self):
        opts = FormatOptions()
        assert opts.operator_spacing is OperatorSpacing.NONE
        assert opts.pragma_prefixes == ("%#",)
        assert "cvx_begin" in opts.indent_commands
        assert opts.dedent_commands == ("cvx_end",)

    def test_none_spaces_nothing(self):
        opts = FormatOptions()
        assert not opts.spaces_around("+")
        assert not opts.spaces_around("*")

    def test_sparse_all_spaces_everything(self):
        opts = FormatOptions(operator_spacing=OperatorSpacing.SPARSE_ALL)
        assert opts.spaces_around("*")
        assert opts.spaces_around(".^")

    def test_add_sub_only(self):
        opts = FormatOptions(operator_spacing=OperatorSpacing.SPARSE_ADD_SUB_ONLY)
        for op in ("+", "-", ".+", ".-"):
            assert opts.spaces_around(op)
        assert not opts.spaces_around("*")
        assert not opts.spaces_around("/")

    def test_is_pragma(self):
        opts = FormatOptions()
        assert opts.is_pragma("%#ok<NASGU>")
        assert not opts.is_pragma("% #ok")
        assert not opts.is_pragma("%% Section")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            FormatOptions().operator_spacing = OperatorSpacing.SPARSE_ALL


class TestSpacingValues:
    @pytest.mark.parametrize("value", ["none", "sparse_all", "sparse_add_sub_only"])
    def test_accepted(self, value):
        assert parse_spacing(value).value == value

    def test_rejected_lists_choices(self):
        with pytest.raises(ValueError, match="sparse_all"):
            parse_spacing("sparse")


class TestOverrides:
    def test_no_flags_uses_file(self):
        config = BeautifierConfig()
        config.format.operator_spacing = "sparse_add_sub_only"
        assert config.options().operator_spacing is OperatorSpacing.SPARSE_ADD_SUB_ONLY

    def test_sparse_math_flag(self):
        opts = BeautifierConfig().options(sparse_math=True)
        assert opts.operator_spacing is OperatorSpacing.SPARSE_ALL

    def test_sparse_add_flag(self):
        opts = BeautifierConfig().options(sparse_add=True)
        assert opts.operator_spacing is OperatorSpacing.SPARSE_ADD_SUB_ONLY

    def test_sparse_math_wins(self):
        opts = BeautifierConfig().options(sparse_math=True, sparse_add=True)
        assert opts.operator_spacing is OperatorSpacing.SPARSE_ALL


class TestConfigFile:
    def test_load_config(self, tmp_config):
        root = tmp_config(
            '[format]\noperator_spacing = "sparse_all"\n'
            'pragma_prefixes = ["%#", "%!"]\n'
        )
        config = load_config(root / CONFIG_NAME)
        opts = config.options()
        assert opts.operator_spacing is OperatorSpacing.SPARSE_ALL
        assert opts.pragma_prefixes == ("%#", "%!")
        assert opts.dedent_commands == ("cvx_end",)

    def test_load_config_defaults(self, tmp_config):
        root = tmp_config("")
        config = load_config(root / CONFIG_NAME)
        assert config.options() == FormatOptions()

    def test_load_config_bad_spacing(self, tmp_config):
        root = tmp_config('[format]\noperator_spacing = "wide"\n')
        with pytest.raises(ValueError, match="wide"):
            load_config(root / CONFIG_NAME)

    def test_find_config_walks_up(self, tmp_config):
        root = tmp_config("")
        nested = root / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config(nested) == (root / CONFIG_NAME).resolve()

    def test_find_config_from_file(self, tmp_config):
        root = tmp_config("")
        source = root / "script.m"
        source.write_text("x = 1\n")
        assert find_config(source) == (root / CONFIG_NAME).resolve()

    def test_find_config_not_found(self, tmp_path, monkeypatch):
        monkeypatch.setattr("matlab_beautifier.config.CONFIG_NAME", "no-such-config.toml")
        with pytest.raises(FileNotFoundError):
            find_config(tmp_path)

    def test_config_for_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr("matlab_beautifier.config.CONFIG_NAME", "no-such-config.toml")
        assert config_for(tmp_path).options() == FormatOptions()
