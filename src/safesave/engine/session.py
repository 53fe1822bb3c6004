"""
safesave — engine session.

File: src/safesave/engine/session.py

Purpose
- Wire aggregator, command executor, scheduler and status-change toasts for
  one working copy. The presentation layer talks only to this object.

Lifecycle
- Created once per UI session on the owning asyncio loop, then torn down
  with ``close()``. Nothing is persisted; a new session starts from an empty
  snapshot and re-probes immediately.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from safesave.engine import gates
from safesave.engine.aggregator import StatusAggregator
from safesave.engine.executor import CommandExecutor, CommandOutcome
from safesave.engine.gates import Action
from safesave.engine.notifications import LoggingNotifier, StatusChangeNotifier
from safesave.engine.scheduler import DEFAULT_TICK_SECONDS, PollScheduler, TickResult
from safesave.engine.summary import build_status_summary, status_label
from safesave.scm.models import DirtyState, ProviderKind
from safesave.scm.providers import default_providers

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from concurrent.futures import Executor

    from safesave.config.settings import SafeSaveSettings
    from safesave.engine.notifications import Notifier
    from safesave.scm.models import StatusSnapshot
    from safesave.scm.providers.base import Provider

logger = logging.getLogger(__name__)

PULL_CONFIRM_PROMPT = "Pull from upstream with rebase? This will update your working tree."
PUSH_CONFIRM_PROMPT = "Push local commits to upstream?"
UPDATE_CONFIRM_PROMPT = "Update workspace to the latest changeset?"


class EngineSession:
    def __init__(
        self,
        settings: SafeSaveSettings,
        project_dir: Path | str,
        *,
        providers: Sequence[Provider] | None = None,
        dirty_source: Callable[[], DirtyState] | None = None,
        notifier: Notifier | None = None,
        host_provider: Callable[[], str | None] | None = None,
        executor: Executor | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._settings = settings
        self._project_dir = Path(project_dir)
        self._providers = tuple(providers) if providers is not None else default_providers(settings)
        self._dirty_source = dirty_source
        self._notifier: Notifier = notifier or LoggingNotifier()
        self._dirty = DirtyState.clean()
        self._auto_fetch_enabled = settings.auto_fetch_enabled

        if host_provider is None and settings.preferred_provider:
            host_provider = _constant(settings.preferred_provider)

        self._aggregator = StatusAggregator(
            self._providers,
            self._project_dir,
            host_provider=host_provider,
            executor=executor,
            on_snapshot=self._on_snapshot,
        )
        self._commands = CommandExecutor(
            self._aggregator,
            {provider.kind: provider for provider in self._providers},
            self._notifier,
            self._project_dir,
            executor=executor,
        )
        clock_kwargs = {"clock": clock} if clock is not None else {}
        self._status_toasts = StatusChangeNotifier(settings, self._notifier, **clock_kwargs)
        self._scheduler = PollScheduler(
            settings,
            on_dirty_check=self.update_unsaved_state,
            on_status_check=self.request_refresh,
            on_auto_fetch=self._maybe_auto_fetch,
            **clock_kwargs,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def settings(self) -> SafeSaveSettings:
        return self._settings

    @property
    def project_dir(self) -> Path:
        return self._project_dir

    @property
    def aggregator(self) -> StatusAggregator:
        return self._aggregator

    @property
    def scheduler(self) -> PollScheduler:
        return self._scheduler

    @property
    def dirty(self) -> DirtyState:
        return self._dirty

    @property
    def auto_fetch_enabled(self) -> bool:
        return self._auto_fetch_enabled

    def snapshot(self) -> StatusSnapshot:
        return self._aggregator.snapshot()

    def status_label(self) -> str:
        return status_label(self.snapshot(), self._dirty)

    def build_status_summary(self) -> str:
        return build_status_summary(self.snapshot(), self._dirty)

    def request_refresh(self) -> bool:
        return self._aggregator.request_refresh()

    async def refresh_and_wait(self) -> StatusSnapshot:
        self.update_unsaved_state()
        return await self._aggregator.refresh()

    def update_unsaved_state(self) -> DirtyState:
        if self._dirty_source is not None:
            try:
                self._dirty = self._dirty_source()
            except Exception:  # noqa: BLE001 - a broken tracker keeps the last known state.
                logger.exception("dirty state check failed")
        self._status_toasts.observe(self.status_label())
        return self._dirty

    def refresh_all(self) -> bool:
        """Re-scan unsaved state and request a status probe."""
        self.update_unsaved_state()
        return self.request_refresh()

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def can_fetch(self) -> bool:
        return gates.can_run_git_command(self.snapshot())

    def can_pull(self) -> bool:
        return gates.can_git_pull(self.snapshot(), self._dirty.has_unsaved_assets)

    def can_push(self) -> bool:
        return gates.can_git_push(self.snapshot(), self._dirty.has_unsaved_assets)

    def can_update(self) -> bool:
        return gates.can_plastic_update(self.snapshot(), self._dirty.has_unsaved_assets)

    def gate_states(self) -> dict[str, bool]:
        return {
            "fetch": self.can_fetch(),
            "pull": self.can_pull(),
            "push": self.can_push(),
            "update": self.can_update(),
        }

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def fetch(self) -> asyncio.Task[CommandOutcome] | None:
        return self._commands.run_mutating_command(
            ProviderKind.GIT, ["fetch", "--prune"], "Fetch completed.", "Fetch failed."
        )

    def pull(
        self, confirm: Callable[[str], bool] | None = None
    ) -> asyncio.Task[CommandOutcome] | None:
        if not self._gate_open(Action.PULL) or not _confirmed(confirm, PULL_CONFIRM_PROMPT):
            return None
        return self._commands.run_mutating_command(
            ProviderKind.GIT, ["pull", "--rebase"], "Pull completed.", "Pull failed."
        )

    def push(
        self, confirm: Callable[[str], bool] | None = None
    ) -> asyncio.Task[CommandOutcome] | None:
        if not self._gate_open(Action.PUSH) or not _confirmed(confirm, PUSH_CONFIRM_PROMPT):
            return None
        return self._commands.run_mutating_command(
            ProviderKind.GIT, ["push"], "Push completed.", "Push failed."
        )

    def update(
        self, confirm: Callable[[str], bool] | None = None
    ) -> asyncio.Task[CommandOutcome] | None:
        if not self._gate_open(Action.UPDATE) or not _confirmed(confirm, UPDATE_CONFIRM_PROMPT):
            return None
        return self._commands.run_mutating_command(
            ProviderKind.PLASTIC, ["update"], "Update completed.", "Update failed."
        )

    def toggle_auto_fetch(self) -> bool:
        self._auto_fetch_enabled = not self._auto_fetch_enabled
        self._scheduler.reset_auto_fetch()
        logger.info("auto fetch toggled", extra={"enabled": self._auto_fetch_enabled})
        return self._auto_fetch_enabled

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------

    def tick(self, now: float | None = None) -> TickResult:
        return self._scheduler.tick(now)

    async def run(self, stop: asyncio.Event, *, tick_seconds: float = DEFAULT_TICK_SECONDS) -> None:
        await self._scheduler.run(stop, tick_seconds=tick_seconds)

    def close(self) -> None:
        self._aggregator.close()

    def _gate_open(self, action: Action) -> bool:
        reason = gates.blocked_reason(action, self.snapshot(), self._dirty.has_unsaved_assets)
        if reason is None:
            return True
        self._notifier.notify(reason, success=False)
        return False

    def _maybe_auto_fetch(self) -> bool:
        if not gates.can_auto_fetch(
            self.snapshot(),
            auto_fetch_enabled=self._auto_fetch_enabled,
            probe_in_flight=self._aggregator.probe_in_flight,
        ):
            return False
        task = self._commands.run_mutating_command(
            ProviderKind.GIT,
            ["fetch", "--prune"],
            "Auto fetch completed.",
            "Auto fetch failed.",
            refresh_after=True,
            silent_on_success=True,
        )
        return task is not None

    def _on_snapshot(self, snapshot: StatusSnapshot) -> None:
        self._status_toasts.observe(status_label(snapshot, self._dirty))


def _confirmed(confirm: Callable[[str], bool] | None, prompt: str) -> bool:
    return confirm is None or confirm(prompt)


def _constant(value: str) -> Callable[[], str | None]:
    def provider_name() -> str | None:
        return value

    return provider_name


__all__ = [
    "PULL_CONFIRM_PROMPT",
    "PUSH_CONFIRM_PROMPT",
    "UPDATE_CONFIRM_PROMPT",
    "EngineSession",
]
