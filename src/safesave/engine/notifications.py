"""Transient user notifications and the status-change toast throttle."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from safesave.constants import STATUS_TOAST_PREFIX

if TYPE_CHECKING:
    from collections.abc import Callable

    from safesave.config.settings import SafeSaveSettings

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, *, success: bool) -> None: ...


@dataclass(frozen=True, slots=True)
class Notification:
    message: str
    success: bool


class LoggingNotifier:
    """Routes notifications to the ``safesave`` logger, optionally echoing them."""

    def __init__(self, echo: Callable[[str], None] | None = None) -> None:
        self._echo = echo

    def notify(self, message: str, *, success: bool) -> None:
        if success:
            logger.info(message)
        else:
            logger.warning(message)
        if self._echo is not None:
            self._echo(message)


class RecordingNotifier:
    """Keeps every notification in memory; used by tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[Notification] = []

    def notify(self, message: str, *, success: bool) -> None:
        with self._lock:
            self._items.append(Notification(message=message, success=success))

    @property
    def items(self) -> tuple[Notification, ...]:
        with self._lock:
            return tuple(self._items)

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(item.message for item in self.items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()


class StatusChangeNotifier:
    """Posts ``SafeSave: <label>`` when the status label changes, rate limited."""

    def __init__(
        self,
        settings: SafeSaveSettings,
        notifier: Notifier,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._notifier = notifier
        self._clock = clock
        self._last_label: str | None = None
        self._last_toast_at: float | None = None

    @property
    def last_label(self) -> str | None:
        return self._last_label

    def observe(self, label: str) -> bool:
        """Record ``label``; return True if a toast was posted."""

        if not self._settings.toast_on_status_change or self._last_label is None:
            self._last_label = label
            return False
        if label == self._last_label:
            return False

        now = self._clock()
        self._last_label = label
        if (
            self._last_toast_at is not None
            and now - self._last_toast_at < self._settings.toast_min_interval
        ):
            return False

        self._last_toast_at = now
        self._notifier.notify(f"{STATUS_TOAST_PREFIX}{label}", success=True)
        return True


__all__ = [
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "RecordingNotifier",
    "StatusChangeNotifier",
]
