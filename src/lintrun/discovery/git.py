# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Git-backed source-control collaborator."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from subprocess import CompletedProcess
from typing import Protocol, runtime_checkable

from ..core.process import CommandOptions, run_command
from ..errors import RevisionResolutionError

GitRunner = Callable[[Sequence[str], Path], CompletedProcess[str]]

HEAD_REVISION = "HEAD"

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class SourceControl(Protocol):
    """Minimal contract the path resolver needs from version control."""

    def head(self) -> str:
        """Return the commit currently checked out."""
        raise NotImplementedError

    def merge_base(self, revision: str) -> str:
        """Return the merge-base of ``revision`` and ``HEAD``."""
        raise NotImplementedError

    def changed_files(self, revision: str) -> list[Path]:
        """Return absolute paths differing between ``revision`` and the working tree."""
        raise NotImplementedError

    def tracked_files(self) -> list[Path]:
        """Return absolute paths of every tracked file."""
        raise NotImplementedError


def _default_runner(cmd: Sequence[str], root: Path) -> CompletedProcess[str]:
    return run_command(cmd, options=CommandOptions(cwd=root))


class GitRepository(SourceControl):
    """Answer source-control questions by shelling out to ``git``."""

    def __init__(self, root: Path, *, runner: GitRunner | None = None) -> None:
        """Create a repository view rooted at ``root``.

        Args:
            root: Directory inside the working tree; commands run from here.
            runner: Optional command runner used to execute git commands.
        """

        self._root = root
        self._runner = runner or _default_runner
        self._toplevel: Path | None = None

    def _run(self, *args: str) -> str:
        """Run ``git args`` and return its raw stdout.

        Raises:
            RevisionResolutionError: If git is unavailable or the command fails.
        """

        cmd = ["git", *args]
        try:
            completed = self._runner(cmd, self._root)
        except OSError as exc:
            raise RevisionResolutionError(f"git is unavailable: {exc}") from exc
        if completed.returncode != 0:
            detail = (completed.stderr or "").strip() or f"exit status {completed.returncode}"
            raise RevisionResolutionError(f"`{' '.join(cmd)}` failed: {detail}")
        return completed.stdout or ""

    def _git(self, *args: str) -> list[str]:
        return [line for line in self._run(*args).splitlines() if line.strip()]

    def _git_names(self, *args: str) -> list[str]:
        """Run a path-listing git command with ``-z`` and return the names verbatim.

        NUL separation keeps git from C-quoting names with non-ASCII bytes.
        """

        command, *rest = args
        return [name for name in self._run(command, "-z", *rest).split("\0") if name]

    @property
    def toplevel(self) -> Path:
        """Return the absolute root of the git working tree."""

        if self._toplevel is None:
            lines = self._git("rev-parse", "--show-toplevel")
            if not lines:
                raise RevisionResolutionError(f"{self._root} is not inside a git working tree")
            self._toplevel = Path(lines[0].strip()).resolve()
        return self._toplevel

    def _verify(self, revision: str) -> str:
        """Return the commit id ``revision`` names, or raise ``RevisionResolutionError``."""

        try:
            lines = self._git("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}")
        except RevisionResolutionError as exc:
            if isinstance(exc.__cause__, OSError):
                raise
            raise RevisionResolutionError(f"Unknown revision '{revision}'") from exc
        if not lines:
            raise RevisionResolutionError(f"Unknown revision '{revision}'")
        return lines[0].strip()

    def head(self) -> str:
        """Return the commit id of ``HEAD``."""

        return self._verify(HEAD_REVISION)

    def merge_base(self, revision: str) -> str:
        """Return the merge-base commit of ``HEAD`` and ``revision``.

        Raises:
            RevisionResolutionError: If ``revision`` is unknown or shares no history with ``HEAD``.
        """

        self._verify(revision)
        lines = self._git("merge-base", HEAD_REVISION, revision)
        if not lines:
            raise RevisionResolutionError(f"No merge-base between HEAD and '{revision}'")
        return lines[0].strip()

    def changed_files(self, revision: str) -> list[Path]:
        """Return files modified relative to ``revision`` plus untracked files.

        Deleted files are dropped because there is nothing left to lint.
        """

        commit = self._verify(revision)
        LOGGER.debug("Diffing working tree against %s (%s)", revision, commit)
        names = self._git_names("diff", "--name-only", "--no-renames", commit, "--")
        names += self._git_names("ls-files", "--others", "--exclude-standard", "--full-name")
        toplevel = self.toplevel
        changed: list[Path] = []
        for name in names:
            candidate = toplevel / name
            if candidate.is_file():
                changed.append(candidate)
        return changed

    def tracked_files(self) -> list[Path]:
        """Return every file git tracks, as absolute paths under the toplevel."""

        toplevel = self.toplevel
        return [toplevel / name for name in self._git_names("ls-files", "--full-name")]


__all__ = ["GitRepository", "HEAD_REVISION", "SourceControl"]
