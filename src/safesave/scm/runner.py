"""Blocking command runner for VCS client executables.

Runs a client binary with captured output and no shell. A nonzero exit is a
normal result; only a failure to start the process is reported separately, so
providers can tell "client missing" apart from "not a repository".
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from safesave.scm.models import CommandResult, LaunchFailure, RunOutcome

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

TIMEOUT_RETURNCODE = -1


class CommandRunner:
    """Synchronous process launcher. Call it from a worker thread, never the UI loop."""

    def __init__(
        self,
        *,
        env_overrides: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._env_overrides = dict(env_overrides or {})
        self._timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    def run(self, executable: str, args: Sequence[str], cwd: str | Path) -> RunOutcome:
        command = (executable, *args)
        run_cwd = Path(cwd)
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env.update(self._env_overrides)

        try:
            completed = subprocess.run(
                command,
                cwd=run_cwd,
                env=env,
                text=True,
                encoding="utf-8",
                errors="replace",
                capture_output=True,
                check=False,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning("command timed out", extra={"command": list(command), "cwd": str(run_cwd)})
            return CommandResult(
                command=command,
                cwd=run_cwd.as_posix(),
                returncode=TIMEOUT_RETURNCODE,
                stdout=_as_text(exc.stdout),
                stderr=f"{executable} timed out after {self._timeout:g}s",
            )
        except OSError as exc:
            # FileNotFoundError/PermissionError land here, as does a missing cwd.
            logger.debug(
                "command failed to launch",
                extra={"command": list(command), "cwd": str(run_cwd), "reason": str(exc)},
            )
            return LaunchFailure(command=command, cwd=run_cwd.as_posix(), reason=str(exc))

        logger.debug(
            "command finished",
            extra={
                "command": list(command),
                "cwd": str(run_cwd),
                "returncode": completed.returncode,
            },
        )
        return CommandResult(
            command=command,
            cwd=run_cwd.as_posix(),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def _as_text(raw: str | bytes | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return raw


__all__ = ["TIMEOUT_RETURNCODE", "CommandRunner"]
