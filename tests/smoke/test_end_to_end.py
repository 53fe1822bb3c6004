"""
safesave — end-to-end smoke test

File: tests/smoke/test_end_to_end.py

Purpose
- Drive an ``EngineSession`` over a real clone with a bare remote: probe, push,
  fetch and pull, checking that gates and the status label follow each step.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from safesave.config.settings import SafeSaveSettings
from safesave.engine.notifications import RecordingNotifier
from safesave.engine.session import EngineSession
from safesave.scm.models import DirtyState
from safesave.scm.providers.git import GitProvider

pytestmark = [
    pytest.mark.smoke,
    pytest.mark.skipif(shutil.which("git") is None, reason="git binary not installed"),
]

_IDENTITY = {
    "GIT_AUTHOR_NAME": "SafeSave Tests",
    "GIT_AUTHOR_EMAIL": "tests@example.invalid",
    "GIT_COMMITTER_NAME": "SafeSave Tests",
    "GIT_COMMITTER_EMAIL": "tests@example.invalid",
}


@pytest.fixture(autouse=True)
def _isolated_git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for name, value in _IDENTITY.items():
        monkeypatch.setenv(name, value)


def _git(repo_root: Path, *args: str) -> None:
    completed = subprocess.run(
        ["git", "-c", "init.defaultBranch=main", "-c", "commit.gpgsign=false", *args],
        cwd=repo_root,
        text=True,
        capture_output=True,
        check=False,
        env=os.environ.copy(),
    )
    if completed.returncode != 0:
        command = "git " + " ".join(args)
        detail = completed.stderr.strip() or completed.stdout.strip()
        raise RuntimeError(f"git command failed: {command}: {detail}")


def _commit(repo_root: Path, name: str, contents: str) -> None:
    (repo_root / name).write_text(contents, encoding="utf-8")
    _git(repo_root, "add", name)
    _git(repo_root, "commit", "-m", f"add {name}")


def _seed_remote(tmp_path: Path) -> tuple[Path, Path, Path]:
    remote = tmp_path / "remote.git"
    remote.mkdir()
    _git(remote, "init", "--bare")

    other = tmp_path / "other"
    other.mkdir()
    _git(other, "init")
    _commit(other, "README.md", "seed\n")
    _git(other, "remote", "add", "origin", str(remote))
    _git(other, "push", "-u", "origin", "main")

    project = tmp_path / "project"
    _git(tmp_path, "clone", str(remote), str(project))
    return remote, other, project


@pytest.mark.smoke
async def test_end_to_end_push_fetch_pull(tmp_path: Path) -> None:
    _, other, project = _seed_remote(tmp_path)
    notifier = RecordingNotifier()
    dirty = DirtyState.clean()
    session = EngineSession(
        SafeSaveSettings(toast_on_status_change=False),
        project,
        providers=[GitProvider()],
        dirty_source=lambda: dirty,
        notifier=notifier,
    )
    try:
        snapshot = await session.refresh_and_wait()
        assert session.status_label() == "main | Clean"
        assert snapshot.has_upstream
        assert session.gate_states() == {
            "fetch": True,
            "pull": False,
            "push": False,
            "update": False,
        }

        # Local commit: push becomes available.
        _commit(project, "level.txt", "level one\n")
        await session.refresh_and_wait()
        assert session.status_label() == "main | Ahead 1"
        assert session.can_push()

        push_task = session.push()
        assert push_task is not None
        assert (await push_task).success
        await session.aggregator.wait_idle()
        assert session.snapshot().ahead == 0

        # Someone else pushes; fetch surfaces it and pull brings it in.
        _git(other, "pull")
        _commit(other, "remote.txt", "from elsewhere\n")
        _git(other, "push")

        fetch_task = session.fetch()
        assert fetch_task is not None
        assert (await fetch_task).success
        await session.aggregator.wait_idle()
        assert session.status_label() == "main | Behind 1"

        pull_task = session.pull()
        assert pull_task is not None
        assert (await pull_task).success
        await session.aggregator.wait_idle()
        assert session.status_label() == "main | Clean"
        assert (project / "remote.txt").exists()

        assert [item.message for item in notifier.items] == [
            "Push completed.",
            "Fetch completed.",
            "Pull completed.",
        ]
    finally:
        session.close()


@pytest.mark.smoke
async def test_end_to_end_unsaved_work_blocks_pull(tmp_path: Path) -> None:
    _, other, project = _seed_remote(tmp_path)
    _commit(other, "remote.txt", "from elsewhere\n")
    _git(other, "push")
    _git(project, "fetch")

    notifier = RecordingNotifier()
    session = EngineSession(
        SafeSaveSettings(toast_on_status_change=False),
        project,
        providers=[GitProvider()],
        dirty_source=lambda: DirtyState(has_unsaved_assets=True, count=1, sample_name="Main"),
        notifier=notifier,
    )
    try:
        await session.refresh_and_wait()

        assert session.status_label() == "main | Unsaved 1"
        assert session.pull() is None
        assert not (project / "remote.txt").exists()
        assert notifier.items[-1].success is False
    finally:
        session.close()
