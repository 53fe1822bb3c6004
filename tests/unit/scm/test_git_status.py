"""
safesave — unit tests for the porcelain v2 parser

File: tests/unit/scm/test_git_status.py

Purpose
- Validate branch headers, ahead/behind parsing and entry classification.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from safesave.scm.git_status import parse_porcelain_v2

pytestmark = pytest.mark.unit

SAMPLE = "\n".join(
    [
        "# branch.oid 2f1c0a4e",
        "# branch.head main",
        "# branch.upstream origin/main",
        "# branch.ab +2 -1",
        "1 M. N... 100644 100644 100644 aaa bbb src/staged.py",
        "1 .M N... 100644 100644 100644 aaa bbb src/unstaged.py",
        "1 MM N... 100644 100644 100644 aaa bbb src/both.py",
        "2 R. N... 100644 100644 100644 aaa bbb R100 new.py\told.py",
        "? notes.txt",
        "? build/",
        "! ignored.log",
    ]
)


def test_parses_branch_upstream_and_counts() -> None:
    fields = parse_porcelain_v2(SAMPLE)

    assert fields.branch == "main"
    assert fields.has_upstream is True
    assert fields.ahead == 2
    assert fields.behind == 1
    assert fields.staged == 3
    assert fields.unstaged == 2
    assert fields.untracked == 2
    assert fields.has_conflicts is False


def test_no_upstream_header_leaves_sync_fields_unset() -> None:
    fields = parse_porcelain_v2("# branch.head feature/x\n? a.txt\n")

    assert fields.branch == "feature/x"
    assert fields.has_upstream is False
    assert (fields.ahead, fields.behind) == (0, 0)
    assert fields.untracked == 1


def test_unmerged_entry_sets_conflicts() -> None:
    fields = parse_porcelain_v2(
        "# branch.head main\nu UU N... 100644 100644 100644 100644 a b c conflicted.txt\n"
    )

    assert fields.has_conflicts is True
    assert fields.staged == 0
    assert fields.unstaged == 0


def test_u_code_inside_ordinary_entry_sets_conflicts() -> None:
    fields = parse_porcelain_v2("1 U. N... 100644 100644 100644 aaa bbb file.txt\n")

    assert fields.has_conflicts is True
    assert fields.staged == 1


def test_detached_head_is_reported_verbatim() -> None:
    assert parse_porcelain_v2("# branch.head (detached)\n").branch == "(detached)"


def test_malformed_ab_values_count_as_zero() -> None:
    fields = parse_porcelain_v2("# branch.upstream origin/main\n# branch.ab +x -\n")

    assert fields.has_upstream is True
    assert (fields.ahead, fields.behind) == (0, 0)


def test_ab_values_keep_leading_digits_only() -> None:
    fields = parse_porcelain_v2("# branch.ab +12abc -3?\n")

    assert (fields.ahead, fields.behind) == (12, 3)


def test_short_entry_lines_are_ignored() -> None:
    fields = parse_porcelain_v2("1 M\n2 \n")

    assert fields.staged == 0
    assert fields.unstaged == 0


def test_empty_output_yields_defaults() -> None:
    fields = parse_porcelain_v2("")

    assert fields.as_snapshot_fields() == {
        "branch": "",
        "has_upstream": False,
        "ahead": 0,
        "behind": 0,
        "staged": 0,
        "unstaged": 0,
        "untracked": 0,
        "has_conflicts": False,
    }


@given(st.text())
def test_arbitrary_text_never_yields_negative_counts(text: str) -> None:
    fields = parse_porcelain_v2(text)

    assert fields.ahead >= 0
    assert fields.behind >= 0
    assert fields.staged >= 0
    assert fields.unstaged >= 0
    assert fields.untracked >= 0
