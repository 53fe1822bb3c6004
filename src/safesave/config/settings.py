"""Immutable engine settings derived from validated config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from safesave.config.schema import assert_valid_config, default_config
from safesave.constants import (
    DEFAULT_AUTO_FETCH_INTERVAL,
    DEFAULT_DIRTY_CHECK_INTERVAL,
    DEFAULT_GIT_EXECUTABLE,
    DEFAULT_PLASTIC_EXECUTABLE,
    DEFAULT_STATUS_CHECK_INTERVAL,
    DEFAULT_STATUS_TOAST_MIN_INTERVAL,
    MIN_AUTO_FETCH_INTERVAL,
    MIN_DIRTY_CHECK_INTERVAL,
    MIN_STATUS_CHECK_INTERVAL,
    MIN_STATUS_TOAST_MIN_INTERVAL,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class SafeSaveSettings:
    """Settings snapshot injected into the engine.

    Raw values are kept as configured; the ``*_interval`` properties apply the
    minimum cadence floors.
    """

    dirty_check_interval_seconds: float = DEFAULT_DIRTY_CHECK_INTERVAL
    git_check_interval_seconds: float = DEFAULT_STATUS_CHECK_INTERVAL
    auto_fetch_enabled: bool = False
    auto_fetch_interval_seconds: float = DEFAULT_AUTO_FETCH_INTERVAL
    toast_on_status_change: bool = True
    status_toast_min_interval_seconds: float = DEFAULT_STATUS_TOAST_MIN_INTERVAL
    preferred_provider: str = ""
    git_executable: str = DEFAULT_GIT_EXECUTABLE
    plastic_executable: str = DEFAULT_PLASTIC_EXECUTABLE
    command_timeout_seconds: float = 0.0

    @property
    def dirty_interval(self) -> float:
        return max(MIN_DIRTY_CHECK_INTERVAL, self.dirty_check_interval_seconds)

    @property
    def status_interval(self) -> float:
        return max(MIN_STATUS_CHECK_INTERVAL, self.git_check_interval_seconds)

    @property
    def auto_fetch_interval(self) -> float:
        return max(MIN_AUTO_FETCH_INTERVAL, self.auto_fetch_interval_seconds)

    @property
    def toast_min_interval(self) -> float:
        return max(MIN_STATUS_TOAST_MIN_INTERVAL, self.status_toast_min_interval_seconds)

    @classmethod
    def from_config(cls, config: Mapping[str, object] | None = None) -> SafeSaveSettings:
        """Build settings from a full config mapping (validated here)."""

        validated = assert_valid_config(config if config is not None else default_config())
        status = validated["status"]
        scm = validated["scm"]
        notifications = validated["notifications"]
        return cls(
            dirty_check_interval_seconds=status["dirty_check_interval_seconds"],
            git_check_interval_seconds=status["git_check_interval_seconds"],
            auto_fetch_enabled=scm["auto_fetch_enabled"],
            auto_fetch_interval_seconds=scm["auto_fetch_interval_seconds"],
            toast_on_status_change=notifications["toast_on_status_change"],
            status_toast_min_interval_seconds=notifications["status_toast_min_interval_seconds"],
            preferred_provider=scm["preferred_provider"],
            git_executable=scm["git_executable"],
            plastic_executable=scm["plastic_executable"],
            command_timeout_seconds=scm["command_timeout_seconds"],
        )


__all__ = ["SafeSaveSettings"]
