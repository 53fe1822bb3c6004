"""
safesave — unit tests for the mutating command executor

File: tests/unit/engine/test_executor.py

Purpose
- Validate refusals, working directory choice, notification text and the
  follow-up refresh after a command completes.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path

import pytest

from safesave.engine.aggregator import StatusAggregator
from safesave.engine.executor import CommandExecutor
from safesave.engine.notifications import RecordingNotifier
from safesave.scm.models import (
    CommandResult,
    ErrorKind,
    LaunchFailure,
    ProbeResult,
    ProviderKind,
    RunOutcome,
    StatusSnapshot,
)

pytestmark = pytest.mark.unit


class CommandStub:
    """Provider stub whose probe result and command outcome are fixed."""

    def __init__(
        self,
        kind: ProviderKind,
        snapshot: StatusSnapshot,
        outcome: RunOutcome | None = None,
        *,
        gate: threading.Event | None = None,
    ) -> None:
        self.kind = kind
        self.label = kind.value
        self.unavailable_message = f"{kind.value} is not available for this project."
        self._snapshot = snapshot
        self._outcome = outcome or CommandResult((), "", 0, "", "")
        self._gate = gate
        self.probe_count = 0
        self.commands: list[tuple[tuple[str, ...], str]] = []

    def matches_host_provider(self, name: str) -> bool:
        return False

    def probe(self, project_dir: Path) -> ProbeResult:
        self.probe_count += 1
        return ProbeResult(self._snapshot)

    def run_command(self, args: Sequence[str], working_dir: Path | str) -> RunOutcome:
        if self._gate is not None:
            self._gate.wait(timeout=5)
        self.commands.append((tuple(args), str(working_dir)))
        return self._outcome


def _git_snapshot(**changes: object) -> StatusSnapshot:
    return StatusSnapshot(
        provider=ProviderKind.GIT, client_available=True, is_repo=True, repo_root="/work/repo"
    ).with_updates(**changes)


async def _executor(
    provider: CommandStub, tmp_path: Path
) -> tuple[CommandExecutor, StatusAggregator, RecordingNotifier]:
    aggregator = StatusAggregator([provider], tmp_path)
    await aggregator.refresh()
    notifier = RecordingNotifier()
    executor = CommandExecutor(aggregator, {provider.kind: provider}, notifier, tmp_path)
    return executor, aggregator, notifier


async def test_success_notifies_and_refreshes(tmp_path: Path) -> None:
    provider = CommandStub(ProviderKind.GIT, _git_snapshot())
    executor, aggregator, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(
        ProviderKind.GIT, ["fetch", "--prune"], "Fetch completed.", "Fetch failed."
    )
    assert task is not None
    outcome = await task
    await aggregator.wait_idle()

    assert outcome.success is True
    assert outcome.error_text == ""
    assert outcome.error_kind is None
    assert provider.commands == [(("fetch", "--prune"), "/work/repo")]
    assert notifier.messages == ("Fetch completed.",)
    assert provider.probe_count == 2


async def test_failure_posts_message_and_truncated_stderr(tmp_path: Path) -> None:
    stderr = "x" * 500
    provider = CommandStub(
        ProviderKind.GIT, _git_snapshot(), CommandResult(("git",), "", 1, "", stderr + "\n")
    )
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["push"], "Push completed.", "Push failed.")
    assert task is not None
    outcome = await task

    assert outcome.success is False
    assert outcome.error_text == stderr
    assert outcome.error_kind is ErrorKind.COMMAND_FAILED
    assert [item.success for item in notifier.items] == [False, False]
    assert notifier.messages[0] == "Push failed."
    assert notifier.messages[1] == "x" * 200


async def test_failure_with_empty_stderr_posts_only_the_failure_message(tmp_path: Path) -> None:
    provider = CommandStub(
        ProviderKind.GIT, _git_snapshot(), CommandResult(("git",), "", 1, "", "  \n")
    )
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["push"], "ok", "Push failed.")
    assert task is not None
    await task

    assert notifier.messages == ("Push failed.",)


async def test_launch_failure_is_reported_as_failure(tmp_path: Path) -> None:
    provider = CommandStub(
        ProviderKind.GIT, _git_snapshot(), LaunchFailure(("git",), "", "No such file")
    )
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["fetch"], "ok", "Fetch failed.")
    assert task is not None
    outcome = await task

    assert outcome.success is False
    assert notifier.messages == ("Fetch failed.",)


async def test_silent_success_posts_nothing(tmp_path: Path) -> None:
    provider = CommandStub(ProviderKind.GIT, _git_snapshot())
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(
        ProviderKind.GIT, ["fetch"], "Auto fetch completed.", "Auto fetch failed.",
        silent_on_success=True,
    )
    assert task is not None
    await task

    assert notifier.messages == ()


async def test_silent_failure_still_notifies(tmp_path: Path) -> None:
    provider = CommandStub(
        ProviderKind.GIT, _git_snapshot(), CommandResult(("git",), "", 1, "", "offline")
    )
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(
        ProviderKind.GIT, ["fetch"], "Auto fetch completed.", "Auto fetch failed.",
        silent_on_success=True,
    )
    assert task is not None
    await task

    assert notifier.messages == ("Auto fetch failed.", "offline")


async def test_refresh_can_be_skipped(tmp_path: Path) -> None:
    provider = CommandStub(ProviderKind.GIT, _git_snapshot())
    executor, aggregator, _ = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(
        ProviderKind.GIT, ["fetch"], "ok", "failed", refresh_after=False
    )
    assert task is not None
    await task
    await aggregator.wait_idle()

    assert provider.probe_count == 1


@pytest.mark.parametrize(
    "snapshot",
    [
        StatusSnapshot(provider=ProviderKind.PLASTIC, client_available=True, is_repo=True),
        _git_snapshot(is_repo=False),
        _git_snapshot(client_available=False),
    ],
)
async def test_refuses_when_backend_is_not_active(tmp_path: Path, snapshot: StatusSnapshot) -> None:
    provider = CommandStub(ProviderKind.GIT, snapshot)
    executor, _, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["pull"], "ok", "failed")

    assert task is None
    assert provider.commands == []
    assert notifier.items[0].success is False
    assert notifier.messages == ("git is not available for this project.",)


async def test_refuses_unknown_backend(tmp_path: Path) -> None:
    provider = CommandStub(ProviderKind.GIT, _git_snapshot())
    executor, _, notifier = await _executor(provider, tmp_path)

    assert executor.run_mutating_command(ProviderKind.PLASTIC, ["update"], "ok", "failed") is None
    assert notifier.messages == ("plastic is not available for this project.",)


async def test_falls_back_to_project_dir_without_repo_root(tmp_path: Path) -> None:
    provider = CommandStub(ProviderKind.GIT, _git_snapshot(repo_root=""))
    executor, _, _ = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["fetch"], "ok", "failed")
    assert task is not None
    await task

    assert provider.commands[0][1] == str(tmp_path)


async def test_result_after_close_is_not_reported(tmp_path: Path) -> None:
    gate = threading.Event()
    provider = CommandStub(ProviderKind.GIT, _git_snapshot(), gate=gate)
    executor, aggregator, notifier = await _executor(provider, tmp_path)

    task = executor.run_mutating_command(ProviderKind.GIT, ["fetch"], "ok", "failed")
    assert task is not None
    aggregator.close()
    gate.set()
    outcome = await task

    assert outcome.success is True
    assert notifier.messages == ()
    assert provider.probe_count == 1
