"""Widgets for the status view."""

from safesave.ui.tui.widgets.statusline import StatusLine
from safesave.ui.tui.widgets.summary import SummaryPanel

__all__ = ["StatusLine", "SummaryPanel"]
