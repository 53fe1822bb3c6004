"""Optional Textual status view.

Exposes ``tui_available()`` and ``run_tui()`` so the CLI can check for the
optional dependency before importing anything from textual.
"""

from __future__ import annotations

import sys
from importlib.util import find_spec
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from safesave.config.settings import SafeSaveSettings
    from safesave.scm.models import DirtyState


def tui_available() -> bool:
    """Return whether optional TUI dependencies are available in this environment."""
    return find_spec("textual") is not None


def run_tui(
    settings: SafeSaveSettings,
    project_dir: Path | str,
    *,
    dirty_source: Callable[[], DirtyState] | None = None,
    no_color: bool = False,
) -> int:
    """Run the status view, or exit with code 2 and an install hint if unavailable."""
    if not tui_available():
        print(
            "TUI requires optional dependency. Install: pip install -e '.[tui]'",
            file=sys.stderr,
        )
        return 2

    from safesave.ui.tui.app import run_tui_app

    return run_tui_app(settings, project_dir, dirty_source=dirty_source, no_color=no_color)


__all__ = ["run_tui", "tui_available"]
