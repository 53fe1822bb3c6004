"""
safesave — poll scheduler.

File: src/safesave/engine/scheduler.py

Purpose
- Own the three independent interval timers that drive the engine:
  unsaved-state check, status re-probe, and Git auto fetch.

Behavior
- Dirty and status timers start at zero, so both fire on the first tick.
- The auto-fetch timer starts at construction; the first fetch waits a full
  interval. It is only reset when the callback reports that a fetch started.
- Intervals are read from settings on every tick with their minimum floors.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from safesave.config.settings import SafeSaveSettings

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 0.5


@dataclass(frozen=True, slots=True)
class TickResult:
    dirty_checked: bool = False
    status_requested: bool = False
    auto_fetch_started: bool = False


class PollScheduler:
    def __init__(
        self,
        settings: SafeSaveSettings,
        *,
        on_dirty_check: Callable[[], None],
        on_status_check: Callable[[], None],
        on_auto_fetch: Callable[[], bool],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._on_dirty_check = on_dirty_check
        self._on_status_check = on_status_check
        self._on_auto_fetch = on_auto_fetch
        self._clock = clock
        self._last_dirty_check: float | None = None
        self._last_status_check: float | None = None
        self._last_auto_fetch = clock()

    @property
    def last_auto_fetch(self) -> float:
        return self._last_auto_fetch

    def reset_auto_fetch(self, now: float | None = None) -> None:
        self._last_auto_fetch = self._clock() if now is None else now

    def tick(self, now: float | None = None) -> TickResult:
        current = self._clock() if now is None else now
        settings = self._settings

        dirty_checked = False
        if _due(self._last_dirty_check, current, settings.dirty_interval):
            self._on_dirty_check()
            self._last_dirty_check = current
            dirty_checked = True

        status_requested = False
        if _due(self._last_status_check, current, settings.status_interval):
            self._on_status_check()
            self._last_status_check = current
            status_requested = True

        auto_fetch_started = False
        if current - self._last_auto_fetch >= settings.auto_fetch_interval:
            if self._on_auto_fetch():
                self._last_auto_fetch = current
                auto_fetch_started = True

        return TickResult(
            dirty_checked=dirty_checked,
            status_requested=status_requested,
            auto_fetch_started=auto_fetch_started,
        )

    async def run(self, stop: asyncio.Event, *, tick_seconds: float = DEFAULT_TICK_SECONDS) -> None:
        """Tick until ``stop`` is set."""

        logger.debug("poll scheduler started", extra={"tick_seconds": tick_seconds})
        while not stop.is_set():
            self.tick()
            try:
                await asyncio.wait_for(stop.wait(), timeout=tick_seconds)
            except TimeoutError:
                continue
        logger.debug("poll scheduler stopped")


def _due(last: float | None, now: float, interval: float) -> bool:
    return last is None or now - last >= interval


__all__ = ["DEFAULT_TICK_SECONDS", "PollScheduler", "TickResult"]
