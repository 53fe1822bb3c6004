"""Parsers for Plastic SCM (``cm``) command output.

Covers the four probe steps: workspace resolution, ``workspaceinfo``,
``status --header --head`` and the machine-readable change listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from safesave.constants import (
    PLASTIC_AUTH_INDICATORS,
    PLASTIC_END_LINE_MARKER,
    PLASTIC_FIELD_SEPARATOR,
    PLASTIC_START_LINE_MARKER,
)

_CHANGESET_RE = re.compile(r"cs:(\d+)")
_HEAD_RE = re.compile(r"head:(\d+)")


@dataclass(frozen=True, slots=True)
class PlasticWorkspace:
    name: str
    root: str


@dataclass(frozen=True, slots=True)
class PlasticHeader:
    """Changeset position parsed from ``status --header --head``."""

    branch: str = ""
    current_changeset: int | None = None
    head_changeset: int | None = None

    @property
    def has_upstream(self) -> bool:
        return self.current_changeset is not None and self.head_changeset is not None

    @property
    def ahead(self) -> int:
        if not self.has_upstream:
            return 0
        assert self.current_changeset is not None and self.head_changeset is not None
        return max(0, self.current_changeset - self.head_changeset)

    @property
    def behind(self) -> int:
        if not self.has_upstream:
            return 0
        assert self.current_changeset is not None and self.head_changeset is not None
        return max(0, self.head_changeset - self.current_changeset)


@dataclass(frozen=True, slots=True)
class PlasticChanges:
    change_count: int = 0
    untracked: int = 0
    has_conflicts: bool = False

    @property
    def unstaged(self) -> int:
        return max(0, self.change_count - self.untracked)


def is_auth_error(text: str) -> bool:
    """Return True when client output looks like an authentication failure."""

    lowered = text.lower()
    return any(indicator in lowered for indicator in PLASTIC_AUTH_INDICATORS)


def parse_workspace_from_path(output: str) -> PlasticWorkspace | None:
    """Parse ``{wkname}|{wkpath}``; None unless both parts are present."""

    parts = [part for part in output.strip().split("|") if part]
    if len(parts) < 2:
        return None
    name = parts[0].strip()
    root = parts[1].strip()
    if not root:
        return None
    return PlasticWorkspace(name=name, root=root)


def parse_workspace_info_branch(output: str) -> str:
    """Return the branch from a ``Branch: ...`` / ``Branch=...`` line, or ""."""

    for line in output.splitlines():
        trimmed = line.strip()
        if not trimmed.startswith("Branch"):
            continue
        index = trimmed.find(":")
        if index < 0:
            index = trimmed.find("=")
        if index < 0:
            continue
        return trimmed[index + 1 :].strip()
    return ""


def parse_status_header(output: str) -> PlasticHeader:
    current: int | None = None
    head: int | None = None
    branch = ""

    for line in output.splitlines():
        if not line.strip():
            continue
        # Later matches overwrite earlier ones.
        cs_match = _CHANGESET_RE.search(line)
        if cs_match:
            current = int(cs_match.group(1))
        head_match = _HEAD_RE.search(line)
        if head_match:
            head = int(head_match.group(1))

        if not branch:
            branch = _branch_from_header_line(line)

    return PlasticHeader(branch=branch, current_changeset=current, head_changeset=head)


def _branch_from_header_line(line: str) -> str:
    left = line.split("(", 1)[0].strip()
    if not (left.startswith("/") or left.lower().startswith("lb:")):
        return ""
    return left.split("@", 1)[0].strip()


def parse_machine_readable_status(output: str) -> PlasticChanges:
    """Count changed items in ``status --machinereadable`` output."""

    change_count = 0
    untracked = 0
    has_conflicts = False

    for raw_line in output.splitlines():
        line = (
            raw_line.replace(PLASTIC_START_LINE_MARKER, "")
            .replace(PLASTIC_END_LINE_MARKER, "")
            .strip()
        )
        if not line:
            continue

        fields = line.split(PLASTIC_FIELD_SEPARATOR)
        code = fields[0].strip()
        if code.upper() == "STATUS":
            continue

        change_count += 1
        if any(part.upper() == "PR" for part in code.split("+") if part):
            untracked += 1
        if not has_conflicts and any(_field_signals_conflict(field) for field in fields):
            has_conflicts = True

    return PlasticChanges(change_count=change_count, untracked=untracked, has_conflicts=has_conflicts)


def _field_signals_conflict(field: str) -> bool:
    upper = field.upper()
    if "CONFLICT" in upper:
        return True
    return "MERGE" in upper and "NO_MERGES" not in upper


__all__ = [
    "PlasticChanges",
    "PlasticHeader",
    "PlasticWorkspace",
    "is_auth_error",
    "parse_machine_readable_status",
    "parse_status_header",
    "parse_workspace_from_path",
    "parse_workspace_info_branch",
]
