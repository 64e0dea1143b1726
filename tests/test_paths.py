# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for path selection and normalisation."""

from __future__ import annotations

from pathlib import Path

import pytest
from helpers.support import FakeSourceControl

from lintrun.discovery import (
    AgainstMergeBaseWith,
    AgainstRevision,
    AllFiles,
    AtHead,
    AutomaticDefault,
    ExplicitList,
    FromFile,
    FromShellCommand,
    PathResolver,
)
from lintrun.errors import PathSourceError, RevisionResolutionError


def _assert_normalised(paths: tuple[Path, ...], root: Path) -> None:
    assert len(paths) == len(set(paths))
    for path in paths:
        assert path.is_absolute()
        assert path.is_relative_to(root)


def test_explicit_list_deduplicates_and_absolutises(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    paths = resolver.resolve(
        ExplicitList(("pkg/a.py", "./pkg/a.py", str(repo / "pkg" / "b.py"), "pkg/../pkg/b.py")),
    )

    assert paths == (repo / "pkg" / "a.py", repo / "pkg" / "b.py")
    _assert_normalised(paths, repo)


def test_explicit_list_resolves_against_cwd(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo / "pkg")

    assert resolver.resolve(ExplicitList(("a.py",))) == (repo / "pkg" / "a.py",)


def test_paths_outside_root_and_missing_files_are_rejected(repo: Path, tmp_path: Path) -> None:
    outside = tmp_path / "elsewhere.py"
    outside.write_text("z = 3\n", encoding="utf-8")
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    paths = resolver.resolve(ExplicitList((str(outside), "pkg/missing.py", "pkg", "README.md")))

    assert paths == (repo / "README.md",)


def test_from_file_reads_newline_separated_paths(repo: Path) -> None:
    listing = repo / "paths.txt"
    listing.write_text("pkg/b.py\n\n  pkg/a.py  \npkg/b.py\n", encoding="utf-8")
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    paths = resolver.resolve(FromFile(Path("paths.txt")))

    assert paths == (repo / "pkg" / "b.py", repo / "pkg" / "a.py")


def test_from_file_unreadable_raises(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    with pytest.raises(PathSourceError):
        resolver.resolve(FromFile(repo / "does-not-exist.txt"))


def test_from_shell_command_captures_stdout(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    paths = resolver.resolve(FromShellCommand("printf 'pkg/a.py\\nREADME.md\\n'"))

    assert paths == (repo / "pkg" / "a.py", repo / "README.md")


def test_from_shell_command_failure_raises(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl(), cwd=repo)

    with pytest.raises(PathSourceError, match="exited with status 3"):
        resolver.resolve(FromShellCommand("echo broken >&2; exit 3"))


def test_all_files_uses_tracked_listing(repo: Path) -> None:
    scm = FakeSourceControl(tracked=[repo / "pkg" / "b.py", repo / "README.md", repo / "pkg" / "a.py"])
    resolver = PathResolver(repo, scm)

    paths = resolver.resolve(AllFiles())

    assert paths == (repo / "README.md", repo / "pkg" / "a.py", repo / "pkg" / "b.py")


def test_automatic_default_diffs_against_head(repo: Path) -> None:
    scm = FakeSourceControl(changed={"HEAD": [repo / "pkg" / "b.py"]})
    resolver = PathResolver(repo, scm)

    assert resolver.resolve() == (repo / "pkg" / "b.py",)
    assert resolver.resolve(AutomaticDefault(), AtHead()) == (repo / "pkg" / "b.py",)
    assert scm.calls == [("changed_files", "HEAD"), ("changed_files", "HEAD")]


def test_against_revision_diffs_against_that_revision(repo: Path) -> None:
    scm = FakeSourceControl(changed={"v1": [repo / "pkg" / "a.py", repo / "pkg" / "a.py"]})
    resolver = PathResolver(repo, scm)

    assert resolver.resolve(AutomaticDefault(), AgainstRevision("v1")) == (repo / "pkg" / "a.py",)


def test_merge_base_selector_diffs_against_merge_base(repo: Path) -> None:
    scm = FakeSourceControl(
        changed={"abc123": [repo / "README.md"]},
        merge_bases={"origin/main": "abc123"},
    )
    resolver = PathResolver(repo, scm)

    paths = resolver.resolve(AutomaticDefault(), AgainstMergeBaseWith("origin/main"))

    assert paths == (repo / "README.md",)
    assert scm.calls == [("merge_base", "origin/main"), ("changed_files", "abc123")]


def test_unknown_revision_is_fatal(repo: Path) -> None:
    resolver = PathResolver(repo, FakeSourceControl())

    with pytest.raises(RevisionResolutionError):
        resolver.resolve(AutomaticDefault(), AgainstRevision("nope"))


def test_explicit_selectors_bypass_revision_diffing(repo: Path) -> None:
    scm = FakeSourceControl()
    resolver = PathResolver(repo, scm, cwd=repo)

    resolver.resolve(ExplicitList(("README.md",)), AgainstRevision("nope"))

    assert scm.calls == []
