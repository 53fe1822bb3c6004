"""
safesave — source-control data model.

File: src/safesave/scm/models.py

Purpose
- Define the normalized, provider-independent status snapshot and the
  process/probe result records passed between runner, providers and engine.

Invariants
- Snapshots are immutable. A refresh produces a new snapshot and replaces the
  old one by reference, so readers never observe a half-applied update.
- Counts are never negative.
- A snapshot with ``client_available=False`` carries only ``provider`` and
  ``last_error``. A snapshot with ``is_repo=False`` carries no branch or counts.
- ``auth_required`` may be true even when ``is_repo`` is false.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any

UTC = timezone.utc


class ProviderKind(enum.Enum):
    """Which backend a snapshot describes."""

    NONE = "none"
    GIT = "git"
    PLASTIC = "plastic"


class ErrorKind(enum.Enum):
    """Failure classification surfaced to the presentation layer."""

    CLIENT_MISSING = "client_missing"
    NOT_A_REPOSITORY = "not_a_repository"
    AUTH_REQUIRED = "auth_required"
    COMMAND_FAILED = "command_failed"


_COUNT_FIELDS = ("ahead", "behind", "staged", "unstaged", "untracked")


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Provider-independent working-copy status."""

    provider: ProviderKind = ProviderKind.NONE
    client_available: bool = False
    is_repo: bool = False
    auth_required: bool = False
    has_upstream: bool = False
    has_conflicts: bool = False
    ahead: int = 0
    behind: int = 0
    staged: int = 0
    unstaged: int = 0
    untracked: int = 0
    branch: str = ""
    repo_root: str = ""
    workspace_name: str = ""
    last_error: str = ""
    last_update: datetime | None = None

    def __post_init__(self) -> None:
        for name in _COUNT_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

    @classmethod
    def client_missing(cls, provider: ProviderKind, error: str) -> StatusSnapshot:
        return cls(provider=provider, client_available=False, last_error=error)

    @property
    def change_count(self) -> int:
        return self.staged + self.unstaged + self.untracked

    @property
    def is_clean_tree(self) -> bool:
        return self.change_count == 0

    def with_updates(self, **changes: Any) -> StatusSnapshot:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def stamped(self, when: datetime | None = None) -> StatusSnapshot:
        """Return a copy with ``last_update`` set to ``when`` (default: now, UTC)."""
        return replace(self, last_update=when or datetime.now(UTC))

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly representation used by ``safesave status --json``."""
        return {
            "provider": self.provider.value,
            "client_available": self.client_available,
            "is_repo": self.is_repo,
            "auth_required": self.auth_required,
            "has_upstream": self.has_upstream,
            "has_conflicts": self.has_conflicts,
            "ahead": self.ahead,
            "behind": self.behind,
            "staged": self.staged,
            "unstaged": self.unstaged,
            "untracked": self.untracked,
            "branch": self.branch,
            "repo_root": self.repo_root,
            "workspace_name": self.workspace_name,
            "last_error": self.last_error,
            "last_update": self.last_update.isoformat() if self.last_update else None,
        }


def classify_error(snapshot: StatusSnapshot) -> ErrorKind | None:
    """Map a snapshot to the error kind the UI should surface, if any."""

    if not snapshot.client_available:
        return ErrorKind.CLIENT_MISSING
    if snapshot.auth_required:
        return ErrorKind.AUTH_REQUIRED
    if not snapshot.is_repo:
        return ErrorKind.NOT_A_REPOSITORY
    return None


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized subprocess result. A nonzero exit code is a normal outcome."""

    command: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined_output(self) -> str:
        return f"{self.stderr}\n{self.stdout}".strip()


@dataclass(frozen=True, slots=True)
class LaunchFailure:
    """The executable could not be started at all."""

    command: tuple[str, ...]
    cwd: str
    reason: str


RunOutcome = CommandResult | LaunchFailure


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Outcome of probing one provider.

    ``error`` is the short provider-level message used when the aggregator has
    to synthesize a combined snapshot; ``snapshot.last_error`` keeps the full
    client text.
    """

    snapshot: StatusSnapshot
    error: str = ""

    @property
    def repo_found(self) -> bool:
        return self.snapshot.is_repo


@dataclass(frozen=True, slots=True)
class DirtyState:
    """Unsaved-document state reported by the host editor."""

    has_unsaved_assets: bool = False
    count: int = 0
    sample_name: str = ""

    @classmethod
    def clean(cls) -> DirtyState:
        return cls()


__all__ = [
    "CommandResult",
    "DirtyState",
    "ErrorKind",
    "LaunchFailure",
    "ProbeResult",
    "ProviderKind",
    "RunOutcome",
    "StatusSnapshot",
    "classify_error",
]
