"""
confstack — output rendering for the CLI

File: src/confstack/ui/render.py
Last updated: 2026-02-12

Purpose
- Provide a thin rendering layer for human-readable CLI output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

What should be included in this file
- CLIRenderer class with methods for common output patterns.
- Factory function to create a renderer with appropriate settings.

Functional requirements
- Plain-text rendering must always work; color is an optional decoration.
- Machine-readable output (exports, --json) never goes through this class.

Non-functional requirements
- No dependencies beyond the standard library.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

_GREEN = "\033[32m"
_RED = "\033[31m"
_YELLOW = "\033[33m"
_BOLD = "\033[1m"
_RESET = "\033[0m"


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    """Check whether color output should be attempted."""

    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output.
    Respects ``NO_COLOR`` env var and ``--no-color`` flag.
    """

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream
        self._color = _color_allowed(no_color, self._out)

    @property
    def color(self) -> bool:
        return self._color

    @property
    def _out(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _print(self, line: str = "") -> None:
        print(line, file=self._out)

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if self._color else text

    def heading(self, text: str) -> None:
        """Print a heading line."""

        self._print(self._paint(_BOLD, text))

    def kv(self, key: str, value: object) -> None:
        """Print a key: value pair."""

        self._print(f"{key}: {value}")

    def text(self, line: str) -> None:
        self._print(line)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._print(f"\n{self._paint(_BOLD, title)}")

    def warning(self, text: str) -> None:
        self._print(f"  {self._paint(_YELLOW, 'Warning:')} {text}")

    def items(self, entries: Sequence[str], *, prefix: str = "- ") -> None:
        """Print a bulleted list."""

        for entry in entries:
            self._print(f"  {prefix}{entry}")

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.section(title)
        self._print(f"  {_pad(list(headers))}")
        self._print(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._print(f"  {_pad(list(row))}")

    def next_steps(self, steps: Sequence[str]) -> None:
        """Print actionable next-step hints."""

        if not steps:
            return
        self.section("Next steps:")
        for step in steps:
            self._print(f"  $ {step}")

    def ok(self, label: str) -> None:
        self._print(f"  {self._paint(_GREEN, 'OK')}  {label}")

    def fail(self, label: str) -> None:
        self._print(f"  {self._paint(_RED, 'FAIL')}  {label}")


def create_renderer(
    *, no_color: bool = False, verbose: bool = False, stream: TextIO | None = None
) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
