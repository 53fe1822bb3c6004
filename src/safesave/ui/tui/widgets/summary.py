"""Summary panel: the multi-line status report and action gate states."""

from __future__ import annotations

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widget import Widget
from textual.widgets import Static

if TYPE_CHECKING:
    from collections.abc import Mapping

_GATE_KEYS = {"fetch": "f", "pull": "p", "push": "u", "update": "w"}


class SummaryPanel(Widget):
    DEFAULT_CSS = """
    SummaryPanel {
        height: 1fr;
        padding: 1 2;
    }
    #summary-text {
        height: auto;
        padding: 0 0 1 0;
    }
    #summary-gates {
        height: auto;
        color: #7f8aa3;
    }
    """

    _summary: str = ""
    _gates: str = ""

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("", id="summary-text", markup=False)
            yield Static("", id="summary-gates", markup=False)

    def update_summary(self, summary: str, gates: Mapping[str, bool]) -> None:
        self._summary = summary
        self._gates = _gate_text(gates)
        self.query_one("#summary-text", Static).update(self._summary)
        self.query_one("#summary-gates", Static).update(self._gates)

    @property
    def summary_text(self) -> str:
        return self._summary

    @property
    def gates_text(self) -> str:
        return self._gates


def _gate_text(gates: Mapping[str, bool]) -> str:
    parts = []
    for action, allowed in gates.items():
        key = _GATE_KEYS.get(action, "?")
        state = "ready" if allowed else "blocked"
        parts.append(f"({key}) {action}: {state}")
    return "   ".join(parts)


__all__ = ["SummaryPanel"]
