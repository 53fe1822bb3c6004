"""Output rendering for the safesave CLI.

File: src/safesave/ui/render.py

Purpose
- Provide a thin plain-text rendering layer for CLI output.
- Respect the NO_COLOR environment variable and the --no-color CLI flag.

Functional requirements
- Plain-text rendering must always work without external dependencies.
- Color is limited to ANSI markers on gate states and only on a TTY.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Mapping

_GREEN = "\x1b[32m"
_RED = "\x1b[31m"
_RESET = "\x1b[0m"


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
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def _print(self, line: str = "") -> None:
        print(line, file=self._stream, flush=True)

    def heading(self, text: str) -> None:
        """Print a heading line."""

        self._print(text)

    def text(self, line: str) -> None:
        """Print a plain text line."""

        self._print(line)

    def blank(self) -> None:
        """Print a blank line."""

        self._print()

    def block(self, text: str) -> None:
        """Print a multi-line block as-is."""

        for line in text.splitlines() or [""]:
            self._print(line)

    def section(self, title: str) -> None:
        """Print a section header with a preceding blank line."""

        self._print(f"\n{title}")

    def ok(self, label: str) -> None:
        self._print(f"  {self._paint('OK', _GREEN)}       {label}")

    def blocked(self, label: str) -> None:
        self._print(f"  {self._paint('BLOCKED', _RED)}  {label}")

    def gates(self, states: Mapping[str, bool]) -> None:
        """Print one line per action with its gate state."""

        for action, allowed in states.items():
            if allowed:
                self.ok(action)
            else:
                self.blocked(action)

    def _paint(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{color}{text}{_RESET}"


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
