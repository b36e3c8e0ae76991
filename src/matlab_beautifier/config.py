"""Formatting options and TOML config loading for matlab-beautifier.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

CONFIG_NAME = "matlab-beautifier.toml"

_ADD_SUB_OPERATORS = frozenset({"+", "-", ".+", ".-"})


class OperatorSpacing(Enum):
    NONE = "none"
    SPARSE_ADD_SUB_ONLY = "sparse_add_sub_only"
    SPARSE_ALL = "sparse_all"


@dataclass(frozen=True)
class FormatOptions:
    operator_spacing: OperatorSpacing = OperatorSpacing.NONE
    # Comments starting with one of these stay on the header line they annotate.
    pragma_prefixes: tuple[str, ...] = ("%#",)
    # Bareword commands that open/close an indented region (CVX).
    indent_commands: tuple[str, ...] = ("cvx_begin", "subject")
    dedent_commands: tuple[str, ...] = ("cvx_end",)

    def spaces_around(self, operator: str) -> bool:
        if self.operator_spacing is OperatorSpacing.SPARSE_ALL:
            return True
        if self.operator_spacing is OperatorSpacing.SPARSE_ADD_SUB_ONLY:
            return operator in _ADD_SUB_OPERATORS
        return False

    def is_pragma(self, comment: str) -> bool:
        return comment.startswith(self.pragma_prefixes)


@dataclass
class FormatSection:
    operator_spacing: str = OperatorSpacing.NONE.value
    pragma_prefixes: list[str] = field(default_factory=lambda: ["%#"])
    indent_commands: list[str] = field(default_factory=lambda: ["cvx_begin", "subject"])
    dedent_commands: list[str] = field(default_factory=lambda: ["cvx_end"])


@dataclass
class BeautifierConfig:
    format: FormatSection = field(default_factory=FormatSection)

    def options(
        self, *, sparse_math: bool = False, sparse_add: bool = False,
    ) -> FormatOptions:
        """Resolve the file settings plus command-line overrides."""
        spacing = parse_spacing(self.format.operator_spacing)
        if sparse_math:
            spacing = OperatorSpacing.SPARSE_ALL
        elif sparse_add:
            spacing = OperatorSpacing.SPARSE_ADD_SUB_ONLY
        return FormatOptions(
            operator_spacing=spacing,
            pragma_prefixes=tuple(self.format.pragma_prefixes),
            indent_commands=tuple(self.format.indent_commands),
            dedent_commands=tuple(self.format.dedent_commands),
        )


def parse_spacing(value: str) -> OperatorSpacing:
    try:
        return OperatorSpacing(value)
    except ValueError:
        accepted = ", ".join(s.value for s in OperatorSpacing)
        raise ValueError(
            f"unknown operator_spacing {value!r} (expected one of: {accepted})"
        ) from None


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find matlab-beautifier.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> BeautifierConfig:
    """Parse a matlab-beautifier.toml file into a BeautifierConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = BeautifierConfig()

    if "format" in data:
        fmt = data["format"]
        defaults = FormatSection()
        config.format = FormatSection(
            operator_spacing=fmt.get("operator_spacing", defaults.operator_spacing),
            pragma_prefixes=fmt.get("pragma_prefixes", defaults.pragma_prefixes),
            indent_commands=fmt.get("indent_commands", defaults.indent_commands),
            dedent_commands=fmt.get("dedent_commands", defaults.dedent_commands),
        )
        parse_spacing(config.format.operator_spacing)

    return config


def config_for(start_path: Path | None = None) -> BeautifierConfig:
    """Load the nearest config file, or the defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return BeautifierConfig()
