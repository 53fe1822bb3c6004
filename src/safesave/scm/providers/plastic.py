"""Plastic SCM (Unity Version Control) backend prober.

The probe walks four ``cm`` calls. Each one can fail on authentication; when
that happens the probe stops early, flags ``auth_required`` and keeps the
workspace fields resolved so far.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from safesave.constants import (
    DEFAULT_PLASTIC_EXECUTABLE,
    PLASTIC_END_LINE_MARKER,
    PLASTIC_FIELD_SEPARATOR,
    PLASTIC_START_LINE_MARKER,
)
from safesave.scm.models import (
    CommandResult,
    LaunchFailure,
    ProbeResult,
    ProviderKind,
    RunOutcome,
    StatusSnapshot,
)
from safesave.scm.plastic_status import (
    is_auth_error,
    parse_machine_readable_status,
    parse_status_header,
    parse_workspace_from_path,
    parse_workspace_info_branch,
)
from safesave.scm.providers.base import CommandProviderBase
from safesave.scm.runner import CommandRunner

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

PLASTIC_NOT_FOUND_MESSAGE = "Plastic SCM CLI not found."
PLASTIC_LOGIN_REQUIRED_MESSAGE = "Plastic SCM login required."
PLASTIC_ROOT_NOT_FOUND_MESSAGE = "Plastic SCM workspace root not found."

STATUS_HEADER_ARGS: tuple[str, ...] = ("status", "--header", "--head")
MACHINE_READABLE_STATUS_ARGS: tuple[str, ...] = (
    "status",
    "--machinereadable",
    "--noheader",
    "--controlledchanged",
    "--private",
    f"--fieldseparator={PLASTIC_FIELD_SEPARATOR}",
    f"--startlineseparator={PLASTIC_START_LINE_MARKER}",
    f"--endlineseparator={PLASTIC_END_LINE_MARKER}",
)


class PlasticProvider(CommandProviderBase):
    kind = ProviderKind.PLASTIC
    label = "Plastic SCM"
    unavailable_message = "Plastic SCM is not available for this project."
    host_keywords = ("plastic", "unity")

    def __init__(
        self,
        runner: CommandRunner | None = None,
        executable: str = DEFAULT_PLASTIC_EXECUTABLE,
    ) -> None:
        super().__init__(runner or CommandRunner(), executable)

    def probe(self, project_dir: Path) -> ProbeResult:
        resolved = self.run_command(
            ["getworkspacefrompath", str(project_dir), "--format={wkname}|{wkpath}"],
            project_dir,
        )
        if isinstance(resolved, LaunchFailure):
            return ProbeResult(
                StatusSnapshot.client_missing(ProviderKind.PLASTIC, PLASTIC_NOT_FOUND_MESSAGE),
                PLASTIC_NOT_FOUND_MESSAGE,
            )

        base = StatusSnapshot(provider=ProviderKind.PLASTIC, client_available=True)

        if not resolved.ok or not resolved.stdout:
            combined = resolved.combined_output
            if is_auth_error(combined):
                return ProbeResult(
                    base.with_updates(auth_required=True, last_error=combined),
                    PLASTIC_LOGIN_REQUIRED_MESSAGE,
                )
            error = resolved.stderr.strip()
            return ProbeResult(base.with_updates(last_error=error), error)

        workspace = parse_workspace_from_path(resolved.stdout)
        if workspace is None:
            return ProbeResult(
                base.with_updates(last_error=PLASTIC_ROOT_NOT_FOUND_MESSAGE),
                PLASTIC_ROOT_NOT_FOUND_MESSAGE,
            )

        snapshot = base.with_updates(
            is_repo=True,
            repo_root=workspace.root,
            workspace_name=workspace.name,
        )

        info = self.run_command(["workspaceinfo", workspace.root], workspace.root)
        if _succeeded(info):
            snapshot = snapshot.with_updates(branch=parse_workspace_info_branch(info.stdout))
        elif _is_auth_failure(info):
            return self._login_required(snapshot, info)

        header = self.run_command(list(STATUS_HEADER_ARGS), workspace.root)
        if _succeeded(header):
            parsed = parse_status_header(header.stdout)
            if not snapshot.branch and parsed.branch:
                snapshot = snapshot.with_updates(branch=parsed.branch)
            if parsed.has_upstream:
                snapshot = snapshot.with_updates(
                    has_upstream=True,
                    ahead=parsed.ahead,
                    behind=parsed.behind,
                )
        elif _is_auth_failure(header):
            return self._login_required(snapshot, header)

        status = self.run_command(list(MACHINE_READABLE_STATUS_ARGS), workspace.root)
        if _succeeded(status):
            changes = parse_machine_readable_status(status.stdout)
            return ProbeResult(
                snapshot.with_updates(
                    untracked=changes.untracked,
                    unstaged=changes.unstaged,
                    has_conflicts=changes.has_conflicts,
                )
            )
        if _is_auth_failure(status):
            return self._login_required(snapshot, status)

        error = status.stderr.strip() if isinstance(status, CommandResult) else status.reason
        logger.debug("plastic status failed", extra={"repo_root": workspace.root, "error": error})
        return ProbeResult(snapshot.with_updates(last_error=error), error)

    def _login_required(self, snapshot: StatusSnapshot, outcome: RunOutcome) -> ProbeResult:
        combined = outcome.combined_output if isinstance(outcome, CommandResult) else ""
        logger.info("plastic login required", extra={"repo_root": snapshot.repo_root})
        return ProbeResult(
            snapshot.with_updates(auth_required=True, last_error=combined),
            PLASTIC_LOGIN_REQUIRED_MESSAGE,
        )


def _succeeded(outcome: RunOutcome) -> bool:
    return isinstance(outcome, CommandResult) and outcome.ok


def _is_auth_failure(outcome: RunOutcome) -> bool:
    return isinstance(outcome, CommandResult) and is_auth_error(outcome.combined_output)


__all__ = [
    "MACHINE_READABLE_STATUS_ARGS",
    "PLASTIC_LOGIN_REQUIRED_MESSAGE",
    "PLASTIC_NOT_FOUND_MESSAGE",
    "PLASTIC_ROOT_NOT_FOUND_MESSAGE",
    "STATUS_HEADER_ARGS",
    "PlasticProvider",
]
