"""Main Textual App: renders the engine snapshot and forwards key presses.

File: src/safesave/ui/tui/app.py

This is the top-level Textual App. It:
- Composes the layout (header, summary panel, status line, footer)
- Drives ``EngineSession.tick()`` and redraws on the same interval
- Maps key bindings to session actions, asking for confirmation first where needed
- Routes engine notifications to ``App.notify``

The app never calls into source control itself; it only reads ``snapshot()``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.css.query import NoMatches
from textual.widgets import Footer, Header

from safesave.engine.scheduler import DEFAULT_TICK_SECONDS
from safesave.engine.session import (
    PULL_CONFIRM_PROMPT,
    PUSH_CONFIRM_PROMPT,
    UPDATE_CONFIRM_PROMPT,
    EngineSession,
)
from safesave.ui.tui.screens.confirm import ConfirmDialog
from safesave.ui.tui.widgets.statusline import StatusLine
from safesave.ui.tui.widgets.summary import SummaryPanel

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from safesave.config.settings import SafeSaveSettings
    from safesave.scm.models import DirtyState
    from safesave.scm.providers.base import Provider

_CSS = """
Screen {
    background: #0b1020;
    color: #d7deea;
}
"""

_CSS_NO_COLOR = """
Screen {
    background: black;
    color: white;
}
"""


class _AppNotifier:
    """Adapts engine notifications to Textual toasts."""

    def __init__(self, app: App[int]) -> None:
        self._app = app

    def notify(self, message: str, *, success: bool) -> None:
        self._app.notify(message, severity="information" if success else "error")


class SafeSaveApp(App[int]):
    """Terminal status view for one working copy."""

    TITLE = "SafeSave"
    CSS = _CSS
    BINDINGS = [
        Binding("r", "refresh", "Refresh"),
        Binding("f", "fetch", "Fetch"),
        Binding("p", "pull", "Pull"),
        Binding("u", "push", "Push"),
        Binding("w", "update_workspace", "Update"),
        Binding("a", "toggle_auto_fetch", "Auto fetch"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: SafeSaveSettings,
        project_dir: Path | str,
        *,
        providers: Sequence[Provider] | None = None,
        dirty_source: Callable[[], DirtyState] | None = None,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
    ) -> None:
        super().__init__()
        self._tick_seconds = tick_seconds
        self._engine = EngineSession(
            settings,
            Path(project_dir),
            providers=providers,
            dirty_source=dirty_source,
            notifier=_AppNotifier(self),
        )
        self.sub_title = str(self._engine.project_dir)

    @property
    def session(self) -> EngineSession:
        return self._engine

    def compose(self) -> ComposeResult:
        yield Header()
        yield SummaryPanel(id="summary")
        yield StatusLine(id="statusline")
        yield Footer()

    def on_mount(self) -> None:
        self._on_tick()
        self.set_interval(self._tick_seconds, self._on_tick)

    def on_unmount(self) -> None:
        self._engine.close()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _on_tick(self) -> None:
        self._engine.tick()
        self.redraw()

    def redraw(self) -> None:
        """Push the current snapshot into the widgets."""
        session = self._engine
        snapshot = session.snapshot()
        try:
            self.query_one(StatusLine).update_from_snapshot(
                snapshot,
                session.status_label(),
                probing=session.aggregator.probe_in_flight,
                auto_fetch_enabled=session.auto_fetch_enabled,
            )
        except NoMatches:
            pass
        try:
            self.query_one(SummaryPanel).update_summary(
                session.build_status_summary(), session.gate_states()
            )
        except NoMatches:
            pass

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def action_refresh(self) -> None:
        self._engine.refresh_all()
        self.redraw()

    def action_fetch(self) -> None:
        self._engine.fetch()
        self.redraw()

    def action_pull(self) -> None:
        self._confirm_then(self._engine.can_pull(), PULL_CONFIRM_PROMPT, self._engine.pull)

    def action_push(self) -> None:
        self._confirm_then(self._engine.can_push(), PUSH_CONFIRM_PROMPT, self._engine.push)

    def action_update_workspace(self) -> None:
        self._confirm_then(self._engine.can_update(), UPDATE_CONFIRM_PROMPT, self._engine.update)

    def action_toggle_auto_fetch(self) -> None:
        enabled = self._engine.toggle_auto_fetch()
        self.notify("Auto fetch enabled." if enabled else "Auto fetch disabled.")
        self.redraw()

    def _confirm_then(self, allowed: bool, prompt: str, start: Callable[[], object]) -> None:
        if not allowed:
            # The session re-checks the gate and posts the blocked reason.
            start()
            return

        def on_answer(confirmed: bool | None) -> None:
            if confirmed:
                start()
                self.redraw()

        self.push_screen(ConfirmDialog(prompt), callback=on_answer)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def run_tui_app(
    settings: SafeSaveSettings,
    project_dir: Path | str,
    *,
    dirty_source: Callable[[], DirtyState] | None = None,
    no_color: bool = False,
) -> int:
    """Create and run the TUI app, returning exit code."""
    effective_no_color = no_color or bool(os.environ.get("NO_COLOR", ""))
    SafeSaveApp.CSS = _CSS_NO_COLOR if effective_no_color else _CSS

    app = SafeSaveApp(settings, project_dir, dirty_source=dirty_source)
    result = app.run()
    return result if isinstance(result, int) else 0


__all__ = ["SafeSaveApp", "run_tui_app"]
