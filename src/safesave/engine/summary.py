"""Human-readable renderings of a status snapshot.

``status_label`` is the short toolbar/status-line text; it is also what the
status-change toast compares. ``build_status_summary`` is the multi-line
report shown on demand.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from safesave.scm.models import DirtyState, ProviderKind

if TYPE_CHECKING:
    from safesave.scm.models import StatusSnapshot

CLIENT_MISSING_SUMMARY = (
    "Git or Plastic SCM CLI not found. Install Git or Unity Version Control "
    "(Plastic SCM) CLI and restart the editor."
)
LOGIN_REQUIRED_SUMMARY = "Plastic SCM login required. Sign in via Source Control to continue."
NOT_A_REPO_SUMMARY = "Project is not inside a Git repository or Plastic SCM workspace."

_PROVIDER_LABELS = {
    ProviderKind.GIT: "Git",
    ProviderKind.PLASTIC: "Plastic SCM",
    ProviderKind.NONE: "Source Control",
}


def provider_label(kind: ProviderKind) -> str:
    return _PROVIDER_LABELS[kind]


def status_label(snapshot: StatusSnapshot, dirty: DirtyState | None = None) -> str:
    dirty = dirty or DirtyState.clean()

    if not snapshot.client_available:
        return "SCM Missing"
    if snapshot.auth_required:
        return "Login Required"
    if not snapshot.is_repo:
        return "No SCM Repo"

    branch = snapshot.branch or snapshot.workspace_name or "unknown"
    if snapshot.provider is ProviderKind.GIT and "detached" in branch:
        branch = "detached"

    if snapshot.has_conflicts:
        state = "Conflicts"
    elif dirty.has_unsaved_assets:
        state = f"Unsaved {dirty.count}"
    elif snapshot.ahead > 0 and snapshot.behind > 0:
        state = "Diverged"
    elif snapshot.behind > 0:
        state = f"Behind {snapshot.behind}"
    elif snapshot.change_count > 0:
        state = "Changes"
    elif snapshot.ahead > 0:
        state = f"Ahead {snapshot.ahead}"
    else:
        state = "Clean"

    return f"{branch} | {state}"


def build_status_summary(
    snapshot: StatusSnapshot,
    dirty: DirtyState | None = None,
    *,
    now: datetime | None = None,
) -> str:
    """Multi-line report: provider, branch, sync state, changes, unsaved work, age."""

    dirty = dirty or DirtyState.clean()

    if not snapshot.client_available:
        return _with_details(CLIENT_MISSING_SUMMARY, snapshot.last_error)
    if snapshot.auth_required:
        return _with_details(LOGIN_REQUIRED_SUMMARY, snapshot.last_error)
    if not snapshot.is_repo:
        return _with_details(NOT_A_REPO_SUMMARY, snapshot.last_error)

    lines = [f"Provider: {provider_label(snapshot.provider)}"]
    if snapshot.provider is ProviderKind.PLASTIC and snapshot.workspace_name:
        lines.append(f"Workspace: {snapshot.workspace_name}")
    lines.append(f"Root: {snapshot.repo_root}")

    branch = snapshot.branch or snapshot.workspace_name
    if branch:
        lines.append(f"Branch: {branch}")

    if snapshot.provider is ProviderKind.GIT:
        if snapshot.has_upstream:
            lines.append(f"Ahead: {snapshot.ahead}  Behind: {snapshot.behind}")
        else:
            lines.append("Upstream: not set")
        lines.append(
            f"Staged: {snapshot.staged}  Unstaged: {snapshot.unstaged}  "
            f"Untracked: {snapshot.untracked}"
        )
    elif snapshot.provider is ProviderKind.PLASTIC:
        if snapshot.behind > 0:
            lines.append(f"Updates available: {snapshot.behind}")
        lines.append(f"Pending changes: {snapshot.unstaged + snapshot.untracked}")

    if dirty.has_unsaved_assets:
        lines.append(f"Unsaved assets: {dirty.count}")
        if dirty.sample_name:
            lines.append(f"Example: {dirty.sample_name}")

    if snapshot.last_update is not None:
        current = now or datetime.now(timezone.utc)
        age = max(0, int((current - snapshot.last_update).total_seconds()))
        lines.append(f"Updated: {age}s ago")

    return "\n".join(lines)


def auto_fetch_interval_label(interval_seconds: float, *, enabled: bool) -> str:
    label = f"Auto fetch interval: {int(interval_seconds)}s"
    return label if enabled else f"{label} (disabled)"


def _with_details(headline: str, details: str) -> str:
    if not details:
        return headline
    return f"{headline}\n\nDetails:\n{details}"


__all__ = [
    "CLIENT_MISSING_SUMMARY",
    "LOGIN_REQUIRED_SUMMARY",
    "NOT_A_REPO_SUMMARY",
    "auto_fetch_interval_label",
    "build_status_summary",
    "provider_label",
    "status_label",
]
