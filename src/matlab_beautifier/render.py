"""Mutable render state threaded through one formatting pass."""

from __future__ import annotations

from typing import TextIO

INDENT_WIDTH = 4


class RenderState:
    """Output destination plus the cursors the formatter lays text out with.

    Text goes either to an in-memory buffer (read back with ``getvalue``) or
    straight to ``out``; both receive exactly the same writes.

    ``extra_indentation`` is the continuation-alignment column of the
    statement being rendered, relative to the nominal indentation. It is
    ``None`` until some construct latches it.
    """

    def __init__(self, out: TextIO | None = None) -> None:
        self._out = out
        self._parts: list[str] = []
        self.column = 0
        self.row = 0
        self.depth = 0
        self.extra_indentation: int | None = None
        self._last = ""

    # ── Output ─────────────────────────────────────────────────

    def write(self, text: str) -> None:
        if not text:
            return
        if self._out is not None:
            self._out.write(text)
        else:
            self._parts.append(text)
        self.column += len(text)
        self._last = text[-1]

    @property
    def after_space(self) -> bool:
        return self._last == " "

    def newline(self, text: str = "") -> None:
        self.write(text + "\n")
        self.column = 0
        self.row += 1

    def indent(self) -> None:
        self.write(" " * (INDENT_WIDTH * self.depth + (self.extra_indentation or 0)))

    def getvalue(self) -> str:
        return "".join(self._parts)

    # ── Alignment ──────────────────────────────────────────────

    def offset(self) -> int:
        """Current column relative to the nominal indentation."""
        return self.column - INDENT_WIDTH * self.depth

    def latch_alignment(self, offset: int) -> None:
        """Set the alignment column unless an earlier construct already did.

        An offset at (or left of) the nominal indentation is no alignment at
        all, so it leaves the latch open.
        """
        if self.extra_indentation is None and offset > 0:
            self.extra_indentation = offset

    def set_alignment(self, offset: int | None) -> None:
        self.extra_indentation = offset

    def reset_alignment(self) -> None:
        self.extra_indentation = None
