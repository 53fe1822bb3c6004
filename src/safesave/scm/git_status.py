"""Parser for ``git status --porcelain=v2 -b`` output."""

from __future__ import annotations

from dataclasses import dataclass

_HEAD_PREFIX = "# branch.head "
_UPSTREAM_PREFIX = "# branch.upstream "
_AB_PREFIX = "# branch.ab "


@dataclass(frozen=True, slots=True)
class GitStatusFields:
    """Fields a porcelain v2 listing contributes to a snapshot."""

    branch: str = ""
    has_upstream: bool = False
    ahead: int = 0
    behind: int = 0
    staged: int = 0
    unstaged: int = 0
    untracked: int = 0
    has_conflicts: bool = False

    def as_snapshot_fields(self) -> dict[str, object]:
        return {
            "branch": self.branch,
            "has_upstream": self.has_upstream,
            "ahead": self.ahead,
            "behind": self.behind,
            "staged": self.staged,
            "unstaged": self.unstaged,
            "untracked": self.untracked,
            "has_conflicts": self.has_conflicts,
        }


def parse_porcelain_v2(output: str) -> GitStatusFields:
    """Parse porcelain v2 branch headers and entries into counters."""

    branch = ""
    has_upstream = False
    ahead = behind = 0
    staged = unstaged = untracked = 0
    has_conflicts = False

    for line in output.splitlines():
        if not line:
            continue
        if line.startswith(_HEAD_PREFIX):
            branch = line[len(_HEAD_PREFIX) :].strip()
        elif line.startswith(_UPSTREAM_PREFIX):
            has_upstream = True
        elif line.startswith(_AB_PREFIX):
            for part in line[len(_AB_PREFIX) :].split():
                if part.startswith("+"):
                    ahead = _leading_int(part[1:])
                elif part.startswith("-"):
                    behind = _leading_int(part[1:])
        elif line.startswith(("1 ", "2 ")):
            if len(line) > 3:
                x, y = line[2], line[3]
                if x != ".":
                    staged += 1
                if y != ".":
                    unstaged += 1
                if x == "U" or y == "U":
                    has_conflicts = True
        elif line.startswith("u "):
            has_conflicts = True
        elif line.startswith("? "):
            untracked += 1

    return GitStatusFields(
        branch=branch,
        has_upstream=has_upstream,
        ahead=ahead,
        behind=behind,
        staged=staged,
        unstaged=unstaged,
        untracked=untracked,
        has_conflicts=has_conflicts,
    )


def _leading_int(text: str) -> int:
    """Parse leading decimal digits; anything unparsable counts as zero."""
    digits = ""
    for char in text:
        if char not in "0123456789":
            break
        digits += char
    return int(digits) if digits else 0


__all__ = ["GitStatusFields", "parse_porcelain_v2"]
