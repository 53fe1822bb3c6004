"""UI package exports for the CLI, rendering, and the optional TUI surface."""

from safesave.ui.cli import CLIError, build_parser, main, run_cli
from safesave.ui.render import CLIRenderer, create_renderer
from safesave.ui.tui import run_tui, tui_available

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "main",
    "run_cli",
    "run_tui",
    "tui_available",
]
