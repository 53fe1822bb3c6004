"""Stable constants shared across the status engine."""

from __future__ import annotations

import sys
from typing import Final

# Schema version for safesave.toml.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Client executables.
_EXE_SUFFIX: Final[str] = ".exe" if sys.platform == "win32" else ""
DEFAULT_GIT_EXECUTABLE: Final[str] = f"git{_EXE_SUFFIX}"
DEFAULT_PLASTIC_EXECUTABLE: Final[str] = f"cm{_EXE_SUFFIX}"

# Plastic machine-readable status framing.
PLASTIC_FIELD_SEPARATOR: Final[str] = "|"
PLASTIC_START_LINE_MARKER: Final[str] = "@@SAFE@@"
PLASTIC_END_LINE_MARKER: Final[str] = "##SAFE##"

# Substrings (lower-case) that mark a Plastic failure as an authentication problem.
PLASTIC_AUTH_INDICATORS: Final[tuple[str, ...]] = (
    "login",
    "log in",
    "authentication",
    "credential",
    "unauthorized",
    "not authorized",
    "access denied",
    "token",
    "expired",
)

# Poll cadence defaults and floors (seconds).
DEFAULT_DIRTY_CHECK_INTERVAL: Final[float] = 1.0
MIN_DIRTY_CHECK_INTERVAL: Final[float] = 0.1
DEFAULT_STATUS_CHECK_INTERVAL: Final[float] = 5.0
MIN_STATUS_CHECK_INTERVAL: Final[float] = 1.0
DEFAULT_AUTO_FETCH_INTERVAL: Final[float] = 120.0
MIN_AUTO_FETCH_INTERVAL: Final[float] = 10.0
DEFAULT_STATUS_TOAST_MIN_INTERVAL: Final[float] = 4.0
MIN_STATUS_TOAST_MIN_INTERVAL: Final[float] = 0.5

# Notification text is truncated to keep toasts readable.
NOTIFICATION_DETAIL_LIMIT: Final[int] = 200
STATUS_TOAST_PREFIX: Final[str] = "SafeSave: "

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_AUTO_FETCH_INTERVAL",
    "DEFAULT_DIRTY_CHECK_INTERVAL",
    "DEFAULT_GIT_EXECUTABLE",
    "DEFAULT_PLASTIC_EXECUTABLE",
    "DEFAULT_STATUS_CHECK_INTERVAL",
    "DEFAULT_STATUS_TOAST_MIN_INTERVAL",
    "MIN_AUTO_FETCH_INTERVAL",
    "MIN_DIRTY_CHECK_INTERVAL",
    "MIN_STATUS_CHECK_INTERVAL",
    "MIN_STATUS_TOAST_MIN_INTERVAL",
    "NOTIFICATION_DETAIL_LIMIT",
    "PLASTIC_AUTH_INDICATORS",
    "PLASTIC_END_LINE_MARKER",
    "PLASTIC_FIELD_SEPARATOR",
    "PLASTIC_START_LINE_MARKER",
    "STATUS_TOAST_PREFIX",
]
