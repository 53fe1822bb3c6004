"""Modal screens for the status view."""

from safesave.ui.tui.screens.confirm import ConfirmDialog

__all__ = ["ConfirmDialog"]
