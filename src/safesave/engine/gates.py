"""Pure safety predicates for mutating source-control actions.

History is never rewritten, and remote state is never pulled over
uncommitted or unsaved local work.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from safesave.scm.models import ProviderKind

if TYPE_CHECKING:
    from safesave.scm.models import StatusSnapshot


class Action(enum.Enum):
    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    UPDATE = "update"


PULL_BLOCKED_MESSAGE = "Pull is disabled until the working tree is clean and upstream is set."
PUSH_BLOCKED_MESSAGE = (
    "Push is disabled until the working tree is clean, ahead, and upstream is set."
)
UPDATE_BLOCKED_MESSAGE = (
    "Update is disabled until the workspace is clean and there are no unsaved assets."
)


def is_clean_tree(snapshot: StatusSnapshot) -> bool:
    return snapshot.staged + snapshot.unstaged + snapshot.untracked == 0


def can_run_git_command(snapshot: StatusSnapshot) -> bool:
    return (
        snapshot.provider is ProviderKind.GIT
        and snapshot.client_available
        and snapshot.is_repo
    )


def can_git_pull(snapshot: StatusSnapshot, has_unsaved_assets: bool) -> bool:
    return (
        can_run_git_command(snapshot)
        and snapshot.has_upstream
        and snapshot.behind > 0
        and is_clean_tree(snapshot)
        and not has_unsaved_assets
    )


def can_git_push(snapshot: StatusSnapshot, has_unsaved_assets: bool) -> bool:
    return (
        can_run_git_command(snapshot)
        and snapshot.has_upstream
        and snapshot.ahead > 0
        and snapshot.behind == 0
        and is_clean_tree(snapshot)
        and not has_unsaved_assets
    )


def can_plastic_update(snapshot: StatusSnapshot, has_unsaved_assets: bool) -> bool:
    return (
        snapshot.provider is ProviderKind.PLASTIC
        and snapshot.client_available
        and snapshot.is_repo
        and is_clean_tree(snapshot)
        and not has_unsaved_assets
    )


def can_auto_fetch(
    snapshot: StatusSnapshot,
    *,
    auto_fetch_enabled: bool,
    probe_in_flight: bool,
) -> bool:
    """Background fetch runs only for an idle, reachable Git repository."""
    return auto_fetch_enabled and not probe_in_flight and can_run_git_command(snapshot)


def is_action_allowed(action: Action, snapshot: StatusSnapshot, has_unsaved_assets: bool) -> bool:
    if action is Action.FETCH:
        return can_run_git_command(snapshot)
    if action is Action.PULL:
        return can_git_pull(snapshot, has_unsaved_assets)
    if action is Action.PUSH:
        return can_git_push(snapshot, has_unsaved_assets)
    return can_plastic_update(snapshot, has_unsaved_assets)


def blocked_reason(
    action: Action, snapshot: StatusSnapshot, has_unsaved_assets: bool
) -> str | None:
    """Human-readable refusal text, or None when ``action`` is allowed."""

    if is_action_allowed(action, snapshot, has_unsaved_assets):
        return None
    if action is Action.FETCH:
        return "Git is not available for this project."
    if action is Action.PULL:
        return PULL_BLOCKED_MESSAGE
    if action is Action.PUSH:
        return PUSH_BLOCKED_MESSAGE
    return UPDATE_BLOCKED_MESSAGE


__all__ = [
    "PULL_BLOCKED_MESSAGE",
    "PUSH_BLOCKED_MESSAGE",
    "UPDATE_BLOCKED_MESSAGE",
    "Action",
    "blocked_reason",
    "can_auto_fetch",
    "can_git_pull",
    "can_git_push",
    "can_plastic_update",
    "can_run_git_command",
    "is_action_allowed",
    "is_clean_tree",
]
