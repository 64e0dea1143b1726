# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for applying suggested replacements."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from lintrun.errors import PatchConflictWarning, StalePatchWarning
from lintrun.filesystem import write_atomic
from lintrun.models import Issues, LintIssue, Severity
from lintrun.patching import apply_patches, plan_patches
from lintrun.reporting import aggregate


def _patch(linter: str, path: Path, replacement: str, original: str | None = None) -> LintIssue:
    return LintIssue(
        linter=linter,
        severity=Severity.WARNING,
        path=path,
        line=1,
        message="format",
        code="FMT",
        original=original,
        replacement=replacement,
    )


def test_conflicting_suggestions_apply_first_and_warn(tmp_path: Path) -> None:
    target = tmp_path / "f.py"
    target.write_text("x=1\n", encoding="utf-8")
    outcomes = [
        Issues(linter="alpha", issues=(_patch("alpha", target, "R1\n"),)),
        Issues(linter="beta", issues=(_patch("beta", target, "R2\n"),)),
    ]

    report = apply_patches(aggregate(outcomes))

    assert target.read_text(encoding="utf-8") == "R1\n"
    assert report.applied == [target]
    (warning,) = report.warnings
    assert isinstance(warning, PatchConflictWarning)
    assert (warning.kept, warning.discarded) == ("alpha", "beta")
    assert "alpha" in str(warning)
    assert "beta" in str(warning)


def test_identical_suggestions_do_not_conflict(tmp_path: Path) -> None:
    target = tmp_path / "f.py"
    target.write_text("x=1\n", encoding="utf-8")

    plans, conflicts = plan_patches([_patch("alpha", target, "x = 1\n"), _patch("beta", target, "x = 1\n")])

    assert [plan.linter for plan in plans] == ["alpha"]
    assert conflicts == []


def test_conflicts_do_not_block_other_files(tmp_path: Path) -> None:
    first = tmp_path / "first.py"
    second = tmp_path / "second.py"
    untouched = tmp_path / "untouched.py"
    for path in (first, second, untouched):
        path.write_text("old\n", encoding="utf-8")

    report = apply_patches(
        [
            _patch("alpha", first, "new-a\n"),
            _patch("beta", first, "new-b\n"),
            _patch("beta", second, "second\n"),
        ],
    )

    assert first.read_text(encoding="utf-8") == "new-a\n"
    assert second.read_text(encoding="utf-8") == "second\n"
    assert untouched.read_text(encoding="utf-8") == "old\n"
    assert report.applied == [first, second]
    assert not report.clean


def test_stale_original_is_skipped(tmp_path: Path) -> None:
    target = tmp_path / "f.py"
    target.write_text("changed since lint\n", encoding="utf-8")

    report = apply_patches([_patch("alpha", target, "fixed\n", original="as linted\n")])

    assert target.read_text(encoding="utf-8") == "changed since lint\n"
    (warning,) = report.warnings
    assert isinstance(warning, StalePatchWarning)
    assert report.applied == []


def test_matching_original_is_applied_byte_for_byte(tmp_path: Path) -> None:
    target = tmp_path / "crlf.txt"
    target.write_bytes(b"a\r\nb\r\n")

    report = apply_patches([_patch("alpha", target, "a\r\nc\r\n", original="a\r\nb\r\n")])

    assert report.clean
    assert target.read_bytes() == b"a\r\nc\r\n"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_write_atomic_preserves_mode_and_leaves_no_temp_files(tmp_path: Path) -> None:
    target = tmp_path / "tool.sh"
    target.write_text("echo old\n", encoding="utf-8")
    target.chmod(0o750)

    write_atomic(target, "echo new\n")

    assert target.read_text(encoding="utf-8") == "echo new\n"
    assert stat.S_IMODE(target.stat().st_mode) == 0o750
    assert sorted(path.name for path in tmp_path.iterdir()) == ["tool.sh"]


def test_unwritable_target_is_reported_not_raised(tmp_path: Path) -> None:
    missing_dir = tmp_path / "gone" / "f.py"

    report = apply_patches([_patch("alpha", missing_dir, "content\n")])

    assert missing_dir in report.failed
    assert report.applied == []
