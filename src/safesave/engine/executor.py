"""Asynchronous execution of mutating source-control commands.

Commands are refused unless their backend is the active, reachable provider.
Accepted commands run in an executor; completion is reported through the
notifier and, optionally, followed by a status refresh. Concurrent commands
are not serialized against each other.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from safesave.constants import NOTIFICATION_DETAIL_LIMIT
from safesave.scm.models import ErrorKind, LaunchFailure

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from concurrent.futures import Executor

    from safesave.engine.aggregator import StatusAggregator
    from safesave.engine.notifications import Notifier
    from safesave.scm.models import ProviderKind, RunOutcome
    from safesave.scm.providers.base import Provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    kind: ProviderKind
    args: tuple[str, ...]
    success: bool
    error_text: str = ""

    @property
    def error_kind(self) -> ErrorKind | None:
        return None if self.success else ErrorKind.COMMAND_FAILED


class CommandExecutor:
    def __init__(
        self,
        aggregator: StatusAggregator,
        providers: Mapping[ProviderKind, Provider],
        notifier: Notifier,
        project_dir: Path | str,
        *,
        executor: Executor | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._providers = dict(providers)
        self._notifier = notifier
        self._project_dir = Path(project_dir)
        self._executor = executor

    def run_mutating_command(
        self,
        kind: ProviderKind,
        args: Sequence[str],
        success_message: str,
        failure_message: str,
        *,
        refresh_after: bool = True,
        silent_on_success: bool = False,
    ) -> asyncio.Task[CommandOutcome] | None:
        """Start ``args`` against the ``kind`` backend; None when refused."""

        provider = self._providers.get(kind)
        snapshot = self._aggregator.snapshot()
        if (
            provider is None
            or snapshot.provider is not kind
            or not snapshot.client_available
            or not snapshot.is_repo
        ):
            message = (
                provider.unavailable_message
                if provider is not None
                else f"{kind.value} is not available for this project."
            )
            self._notifier.notify(message, success=False)
            return None

        working_dir = Path(snapshot.repo_root) if snapshot.repo_root else self._project_dir
        loop = asyncio.get_running_loop()
        logger.info(
            "running source control command",
            extra={"provider": kind.value, "command_args": list(args), "cwd": str(working_dir)},
        )
        return loop.create_task(
            self._execute(
                loop,
                provider,
                tuple(args),
                working_dir,
                success_message=success_message,
                failure_message=failure_message,
                refresh_after=refresh_after,
                silent_on_success=silent_on_success,
            ),
            name=f"safesave-{kind.value}-{args[0] if args else 'command'}",
        )

    async def _execute(
        self,
        loop: asyncio.AbstractEventLoop,
        provider: Provider,
        args: tuple[str, ...],
        working_dir: Path,
        *,
        success_message: str,
        failure_message: str,
        refresh_after: bool,
        silent_on_success: bool,
    ) -> CommandOutcome:
        outcome: RunOutcome = await loop.run_in_executor(
            self._executor, provider.run_command, args, working_dir
        )
        if isinstance(outcome, LaunchFailure):
            # No stderr exists for a process that never started.
            logger.warning("command failed to launch", extra={"reason": outcome.reason})
            success = False
            error_text = ""
        else:
            success = outcome.ok
            error_text = outcome.stderr.strip()

        result = CommandOutcome(
            kind=provider.kind,
            args=args,
            success=success,
            error_text="" if success else error_text,
        )

        if not self._aggregator.is_alive:
            logger.debug(
                "discarding command result for closed session",
                extra={"command_args": list(args)},
            )
            return result

        if not success:
            logger.warning(
                "source control command failed",
                extra={
                    "provider": provider.kind.value,
                    "command_args": list(args),
                    "stderr": error_text,
                },
            )
        if not (success and silent_on_success):
            self._notifier.notify(success_message if success else failure_message, success=success)
        if not success and error_text:
            self._notifier.notify(error_text[:NOTIFICATION_DETAIL_LIMIT], success=False)
        if refresh_after:
            self._aggregator.request_refresh()
        return result


__all__ = ["CommandExecutor", "CommandOutcome"]
