"""
safesave — unit tests for status labels and summaries

File: tests/unit/engine/test_summary.py

Purpose
- Validate the short label priority order and the multi-line report for
  Git, Plastic SCM and every error state.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from safesave.engine import gates
from safesave.engine.summary import (
    CLIENT_MISSING_SUMMARY,
    LOGIN_REQUIRED_SUMMARY,
    NOT_A_REPO_SUMMARY,
    auto_fetch_interval_label,
    build_status_summary,
    provider_label,
    status_label,
)
from safesave.scm.models import DirtyState, ProviderKind, StatusSnapshot

pytestmark = pytest.mark.unit

_GIT = StatusSnapshot(
    provider=ProviderKind.GIT,
    client_available=True,
    is_repo=True,
    has_upstream=True,
    branch="main",
    repo_root="/work/repo",
)


def test_provider_labels() -> None:
    assert provider_label(ProviderKind.GIT) == "Git"
    assert provider_label(ProviderKind.PLASTIC) == "Plastic SCM"
    assert provider_label(ProviderKind.NONE) == "Source Control"


@pytest.mark.parametrize(
    ("snapshot", "dirty", "expected"),
    [
        (StatusSnapshot(), None, "SCM Missing"),
        (StatusSnapshot(client_available=True, auth_required=True), None, "Login Required"),
        (StatusSnapshot(client_available=True), None, "No SCM Repo"),
        (_GIT, None, "main | Clean"),
        (_GIT.with_updates(has_conflicts=True, behind=2), DirtyState(True, 3), "main | Conflicts"),
        (_GIT.with_updates(behind=2), DirtyState(True, 3), "main | Unsaved 3"),
        (_GIT.with_updates(ahead=1, behind=2), None, "main | Diverged"),
        (_GIT.with_updates(behind=2, untracked=4), None, "main | Behind 2"),
        (_GIT.with_updates(ahead=1, untracked=4), None, "main | Changes"),
        (_GIT.with_updates(ahead=1), None, "main | Ahead 1"),
        (_GIT.with_updates(branch="(detached)"), None, "detached | Clean"),
        (_GIT.with_updates(branch=""), None, "unknown | Clean"),
    ],
)
def test_status_label_priority(
    snapshot: StatusSnapshot, dirty: DirtyState | None, expected: str
) -> None:
    assert status_label(snapshot, dirty) == expected


def test_plastic_label_falls_back_to_workspace_name() -> None:
    snapshot = StatusSnapshot(
        provider=ProviderKind.PLASTIC, client_available=True, is_repo=True, workspace_name="MyGame"
    )

    assert status_label(snapshot) == "MyGame | Clean"


def test_git_summary_with_upstream() -> None:
    snapshot = _GIT.with_updates(ahead=2, staged=1, unstaged=2, untracked=3)

    summary = build_status_summary(snapshot)

    assert summary.splitlines() == [
        "Provider: Git",
        "Root: /work/repo",
        "Branch: main",
        "Ahead: 2  Behind: 0",
        "Staged: 1  Unstaged: 2  Untracked: 3",
    ]


def test_git_summary_without_upstream() -> None:
    summary = build_status_summary(_GIT.with_updates(has_upstream=False))

    assert "Upstream: not set" in summary
    assert "Ahead:" not in summary


def test_plastic_summary_lists_workspace_updates_and_pending_changes() -> None:
    snapshot = StatusSnapshot(
        provider=ProviderKind.PLASTIC,
        client_available=True,
        is_repo=True,
        workspace_name="MyGame",
        repo_root="/work/MyGame",
        branch="/main",
        behind=4,
        unstaged=2,
        untracked=1,
    )

    lines = build_status_summary(snapshot).splitlines()

    assert lines == [
        "Provider: Plastic SCM",
        "Workspace: MyGame",
        "Root: /work/MyGame",
        "Branch: /main",
        "Updates available: 4",
        "Pending changes: 3",
    ]


def test_summary_reports_unsaved_assets() -> None:
    summary = build_status_summary(_GIT, DirtyState(True, 2, "Level01.unity"))

    assert "Unsaved assets: 2" in summary
    assert "Example: Level01.unity" in summary


def test_summary_reports_age_of_snapshot() -> None:
    stamped = datetime(2026, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
    snapshot = _GIT.with_updates(last_update=stamped)

    summary = build_status_summary(snapshot, now=stamped + timedelta(seconds=7))

    assert summary.splitlines()[-1] == "Updated: 7s ago"


@pytest.mark.parametrize(
    ("snapshot", "headline"),
    [
        (StatusSnapshot(last_error="git: not found"), CLIENT_MISSING_SUMMARY),
        (
            StatusSnapshot(client_available=True, auth_required=True, last_error="token expired"),
            LOGIN_REQUIRED_SUMMARY,
        ),
        (StatusSnapshot(client_available=True, last_error="not a repo"), NOT_A_REPO_SUMMARY),
    ],
)
def test_error_summaries_include_details(snapshot: StatusSnapshot, headline: str) -> None:
    summary = build_status_summary(snapshot)

    assert summary.startswith(headline)
    assert summary.endswith(f"\n\nDetails:\n{snapshot.last_error}")


def test_error_summary_without_details_is_headline_only() -> None:
    assert build_status_summary(StatusSnapshot(client_available=True)) == NOT_A_REPO_SUMMARY


def test_ahead_two_clean_tree_enables_push_but_not_pull() -> None:
    snapshot = _GIT.with_updates(ahead=2, behind=0)

    assert "Ahead: 2  Behind: 0" in build_status_summary(snapshot)
    assert gates.can_git_push(snapshot, False) is True
    assert gates.can_git_pull(snapshot, False) is False


def test_auto_fetch_interval_label() -> None:
    assert auto_fetch_interval_label(120.0, enabled=True) == "Auto fetch interval: 120s"
    assert auto_fetch_interval_label(90.0, enabled=False) == "Auto fetch interval: 90s (disabled)"
