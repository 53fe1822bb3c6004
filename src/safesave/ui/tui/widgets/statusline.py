"""Status line widget: always-visible bottom bar with the status label.

File: src/safesave/ui/tui/widgets/statusline.py

Shows: provider, status label, auto-fetch state and whether a probe is running.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widget import Widget
from textual.widgets import Static

from safesave.engine.summary import provider_label
from safesave.scm.models import ProviderKind

if TYPE_CHECKING:
    from safesave.scm.models import StatusSnapshot


class StatusLine(Widget):
    """Always-visible status bar showing the label and engine activity."""

    DEFAULT_CSS = """
    StatusLine {
        dock: bottom;
        height: 1;
        background: #0b1020;
        color: #7f8aa3;
        padding: 0 1;
    }
    #status-inner {
        width: 100%;
        height: 1;
    }
    #status-provider {
        width: auto;
        min-width: 14;
    }
    #status-label {
        width: 1fr;
    }
    #status-activity {
        width: auto;
        min-width: 22;
        text-align: right;
    }
    """

    _label: str = ""

    def compose(self) -> ComposeResult:
        with Horizontal(id="status-inner"):
            yield Static("", id="status-provider", markup=False)
            yield Static("", id="status-label", markup=False)
            yield Static("", id="status-activity", markup=False)

    def update_from_snapshot(
        self,
        snapshot: StatusSnapshot,
        label: str,
        *,
        probing: bool = False,
        auto_fetch_enabled: bool = False,
    ) -> None:
        """Refresh all status segments."""
        provider = (
            provider_label(snapshot.provider) if snapshot.provider is not ProviderKind.NONE else "-"
        )
        self.query_one("#status-provider", Static).update(f" {provider} ")
        self._label = label
        self.query_one("#status-label", Static).update(f" {label} ")

        activity = "checking..." if probing else "idle"
        fetch_state = "auto-fetch on" if auto_fetch_enabled else "auto-fetch off"
        self.query_one("#status-activity", Static).update(f" {fetch_state} | {activity} ")

    @property
    def label_text(self) -> str:
        return self._label


__all__ = ["StatusLine"]
