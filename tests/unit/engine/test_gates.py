"""
safesave — unit tests for action gates

File: tests/unit/engine/test_gates.py

Purpose
- Check every gate predicate against clean, dirty, diverged and unavailable
  snapshots, plus the refusal messages.
"""

from __future__ import annotations

import pytest

from safesave.engine import gates
from safesave.engine.gates import Action
from safesave.scm.models import ProviderKind, StatusSnapshot

pytestmark = pytest.mark.unit


def _git(**changes: object) -> StatusSnapshot:
    base = StatusSnapshot(
        provider=ProviderKind.GIT,
        client_available=True,
        is_repo=True,
        has_upstream=True,
        branch="main",
    )
    return base.with_updates(**changes)


def _plastic(**changes: object) -> StatusSnapshot:
    base = StatusSnapshot(provider=ProviderKind.PLASTIC, client_available=True, is_repo=True)
    return base.with_updates(**changes)


def test_fetch_needs_reachable_git_repo() -> None:
    assert gates.can_run_git_command(_git()) is True
    assert gates.can_run_git_command(_git(client_available=False)) is False
    assert gates.can_run_git_command(_git(is_repo=False)) is False
    assert gates.can_run_git_command(_plastic()) is False


def test_pull_requires_behind_clean_and_no_unsaved_assets() -> None:
    assert gates.can_git_pull(_git(behind=3), False) is True
    assert gates.can_git_pull(_git(behind=0), False) is False
    assert gates.can_git_pull(_git(behind=3, has_upstream=False), False) is False
    assert gates.can_git_pull(_git(behind=3, untracked=1), False) is False


def test_pull_disabled_by_unsaved_assets_regardless_of_sync_state() -> None:
    for ahead, behind in [(0, 1), (2, 5), (0, 0)]:
        assert gates.can_git_pull(_git(ahead=ahead, behind=behind), True) is False


def test_push_requires_ahead_not_behind_and_clean() -> None:
    assert gates.can_git_push(_git(ahead=2), False) is True
    assert gates.can_git_push(_git(ahead=2, behind=1), False) is False
    assert gates.can_git_push(_git(ahead=0), False) is False
    assert gates.can_git_push(_git(ahead=2, staged=1), False) is False
    assert gates.can_git_push(_git(ahead=2), True) is False


def test_plastic_update_requires_clean_workspace() -> None:
    assert gates.can_plastic_update(_plastic(), False) is True
    assert gates.can_plastic_update(_plastic(unstaged=1), False) is False
    assert gates.can_plastic_update(_plastic(), True) is False
    assert gates.can_plastic_update(_git(), False) is False


def test_auto_fetch_requires_enabled_idle_git() -> None:
    snapshot = _git()

    assert gates.can_auto_fetch(snapshot, auto_fetch_enabled=True, probe_in_flight=False) is True
    assert gates.can_auto_fetch(snapshot, auto_fetch_enabled=False, probe_in_flight=False) is False
    assert gates.can_auto_fetch(snapshot, auto_fetch_enabled=True, probe_in_flight=True) is False
    assert (
        gates.can_auto_fetch(_plastic(), auto_fetch_enabled=True, probe_in_flight=False) is False
    )


@pytest.mark.parametrize(
    ("action", "message"),
    [
        (Action.FETCH, "Git is not available for this project."),
        (Action.PULL, gates.PULL_BLOCKED_MESSAGE),
        (Action.PUSH, gates.PUSH_BLOCKED_MESSAGE),
        (Action.UPDATE, gates.UPDATE_BLOCKED_MESSAGE),
    ],
)
def test_blocked_reason_for_unavailable_snapshot(action: Action, message: str) -> None:
    assert gates.blocked_reason(action, StatusSnapshot(), False) == message


def test_blocked_reason_is_none_when_allowed() -> None:
    assert gates.blocked_reason(Action.PUSH, _git(ahead=1), False) is None
    assert gates.is_action_allowed(Action.FETCH, _git(), True) is True
