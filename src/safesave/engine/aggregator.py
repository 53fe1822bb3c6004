"""
safesave — status aggregator.

File: src/safesave/engine/aggregator.py

Purpose
- Pick the authoritative backend, own the current snapshot, and serialize
  refreshes so that at most one probe is in flight.

Threading model
- All public methods are called from the owning asyncio loop.
- The probe itself (blocking subprocess calls) runs in an executor. Its result
  is applied back on the loop: snapshot swapped by reference, in-flight flag
  cleared, listener called, all in one step with no await in between.
- ``close()`` ends the session. Results that arrive afterwards are discarded;
  running probes are not cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from safesave.scm.models import ProbeResult, ProviderKind, StatusSnapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from concurrent.futures import Executor

    from safesave.scm.providers.base import Provider

logger = logging.getLogger(__name__)


class StatusAggregator:
    """Owns the current snapshot and runs one provider probe at a time."""

    def __init__(
        self,
        providers: Sequence[Provider],
        project_dir: Path | str,
        *,
        host_provider: Callable[[], str | None] | None = None,
        executor: Executor | None = None,
        on_snapshot: Callable[[StatusSnapshot], None] | None = None,
    ) -> None:
        if not providers:
            raise ValueError("at least one provider is required")
        self._providers = tuple(providers)
        self._project_dir = Path(project_dir)
        self._host_provider = host_provider
        self._executor = executor
        self._on_snapshot = on_snapshot
        self._current = StatusSnapshot()
        self._probe_in_flight = False
        self._task: asyncio.Task[StatusSnapshot] | None = None
        self._alive = True
        self._last_provider: ProviderKind | None = None

    @property
    def project_dir(self) -> Path:
        return self._project_dir

    @property
    def providers(self) -> tuple[Provider, ...]:
        return self._providers

    @property
    def probe_in_flight(self) -> bool:
        return self._probe_in_flight

    @property
    def is_alive(self) -> bool:
        return self._alive

    def snapshot(self) -> StatusSnapshot:
        """Return the last completed snapshot. Never waits on a running probe."""
        return self._current

    def request_refresh(self) -> bool:
        """Start a probe unless one is already running. Returns True if started."""

        if not self._alive or self._probe_in_flight:
            return False
        loop = asyncio.get_running_loop()
        self._probe_in_flight = True
        self._task = loop.create_task(self._run_probe(loop), name="safesave-probe")
        return True

    async def wait_idle(self) -> StatusSnapshot:
        """Wait for the in-flight probe (if any) and return the current snapshot."""

        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)
        return self._current

    async def refresh(self) -> StatusSnapshot:
        """Request a refresh and wait for it (or the already running one) to land."""

        self.request_refresh()
        return await self.wait_idle()

    def close(self) -> None:
        self._alive = False

    def probe_once(self) -> StatusSnapshot:
        """Run the provider selection policy synchronously. Worker-thread only."""

        preferred = self._preferred_provider()
        if preferred is not None:
            result = preferred.probe(self._project_dir)
            return result.snapshot

        results: list[tuple[Provider, ProbeResult]] = []
        for provider in self._providers:
            result = provider.probe(self._project_dir)
            if result.repo_found:
                return result.snapshot
            results.append((provider, result))

        return _synthesize_none(results)

    def _preferred_provider(self) -> Provider | None:
        if self._host_provider is None:
            return None
        name = (self._host_provider() or "").strip()
        if not name:
            return None
        for provider in self._providers:
            if provider.matches_host_provider(name):
                return provider
        return None

    async def _run_probe(self, loop: asyncio.AbstractEventLoop) -> StatusSnapshot:
        try:
            snapshot = await loop.run_in_executor(self._executor, self.probe_once)
        except Exception as exc:  # noqa: BLE001 - a probe bug must not kill the engine.
            logger.exception("status probe raised")
            snapshot = StatusSnapshot(last_error=f"{type(exc).__name__}: {exc}")

        if not self._alive:
            logger.debug("discarding probe result for closed session")
            self._probe_in_flight = False
            return self._current

        self._apply(snapshot.stamped())
        return self._current

    def _apply(self, snapshot: StatusSnapshot) -> None:
        self._current = snapshot
        self._probe_in_flight = False
        if snapshot.provider is not self._last_provider:
            logger.info(
                "active provider changed",
                extra={
                    "previous": self._last_provider.value if self._last_provider else None,
                    "provider": snapshot.provider.value,
                },
            )
            self._last_provider = snapshot.provider
        logger.debug("status snapshot applied", extra={"snapshot": snapshot.to_dict()})
        if self._on_snapshot is not None:
            try:
                self._on_snapshot(snapshot)
            except Exception:  # noqa: BLE001 - listener errors stay in the listener.
                logger.exception("snapshot listener raised")


def _synthesize_none(results: Sequence[tuple[Provider, ProbeResult]]) -> StatusSnapshot:
    errors = [f"{provider.label}: {result.error}" for provider, result in results if result.error]
    return StatusSnapshot(
        provider=ProviderKind.NONE,
        client_available=any(result.snapshot.client_available for _, result in results),
        is_repo=False,
        last_error="\n".join(errors),
    )


__all__ = ["StatusAggregator"]
