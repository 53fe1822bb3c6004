"""Git backend prober."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from safesave.constants import DEFAULT_GIT_EXECUTABLE
from safesave.scm.git_status import parse_porcelain_v2
from safesave.scm.models import LaunchFailure, ProbeResult, ProviderKind, StatusSnapshot
from safesave.scm.providers.base import CommandProviderBase
from safesave.scm.runner import CommandRunner

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

GIT_NOT_FOUND_MESSAGE = "Git executable not found."


class GitProvider(CommandProviderBase):
    kind = ProviderKind.GIT
    label = "Git"
    unavailable_message = "Git is not available for this project."
    host_keywords = ("git",)

    def __init__(
        self,
        runner: CommandRunner | None = None,
        executable: str = DEFAULT_GIT_EXECUTABLE,
    ) -> None:
        super().__init__(runner or CommandRunner(), executable)

    def probe(self, project_dir: Path) -> ProbeResult:
        toplevel = self.run_command(["rev-parse", "--show-toplevel"], project_dir)
        if isinstance(toplevel, LaunchFailure):
            return ProbeResult(
                StatusSnapshot.client_missing(ProviderKind.GIT, GIT_NOT_FOUND_MESSAGE),
                GIT_NOT_FOUND_MESSAGE,
            )

        if not toplevel.ok:
            error = toplevel.stderr.strip()
            return ProbeResult(
                StatusSnapshot(
                    provider=ProviderKind.GIT,
                    client_available=True,
                    last_error=error,
                ),
                error,
            )

        repo_root = toplevel.stdout.strip()
        snapshot = StatusSnapshot(
            provider=ProviderKind.GIT,
            client_available=True,
            is_repo=True,
            repo_root=repo_root,
        )

        status = self.run_command(["status", "--porcelain=v2", "-b"], repo_root)
        if isinstance(status, LaunchFailure) or not status.ok:
            error = (
                status.reason if isinstance(status, LaunchFailure) else status.stderr
            ).strip()
            logger.debug("git status failed", extra={"repo_root": repo_root, "error": error})
            return ProbeResult(snapshot.with_updates(last_error=error), error)

        fields = parse_porcelain_v2(status.stdout)
        return ProbeResult(snapshot.with_updates(**fields.as_snapshot_fields()))


__all__ = ["GIT_NOT_FOUND_MESSAGE", "GitProvider"]
