# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve path and revision selectors into the set of files to lint."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..core.process import CommandOptions, run_shell
from ..errors import PathSourceError
from .git import HEAD_REVISION, SourceControl

LOGGER = logging.getLogger(__name__)

TargetPathSet = tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class AutomaticDefault:
    """Lint whatever changed relative to the selected revision."""


@dataclass(frozen=True, slots=True)
class AllFiles:
    """Lint every tracked file in the repository."""


@dataclass(frozen=True, slots=True)
class ExplicitList:
    """Lint the paths given on the command line."""

    paths: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class FromFile:
    """Lint the newline-separated paths listed in ``path``."""

    path: Path


@dataclass(frozen=True, slots=True)
class FromShellCommand:
    """Lint the newline-separated paths printed by a shell ``command``."""

    command: str


PathSelector = AutomaticDefault | AllFiles | ExplicitList | FromFile | FromShellCommand


@dataclass(frozen=True, slots=True)
class AtHead:
    """Compare the working tree against ``HEAD``."""


@dataclass(frozen=True, slots=True)
class AgainstRevision:
    """Compare the working tree against ``revision``."""

    revision: str


@dataclass(frozen=True, slots=True)
class AgainstMergeBaseWith:
    """Compare the working tree against the merge-base of ``revision`` and ``HEAD``."""

    revision: str


RevisionSelector = AtHead | AgainstRevision | AgainstMergeBaseWith


@dataclass(slots=True)
class PathResolver:
    """Turn selectors into a deduplicated, absolute :data:`TargetPathSet`.

    Attributes:
        root: Repository root; every returned path lies beneath it.
        scm: Source-control collaborator answering diff and listing requests.
        cwd: Directory relative paths are interpreted against. Defaults to the
            process working directory.
    """

    root: Path
    scm: SourceControl
    cwd: Path | None = None

    def resolve(
        self,
        selector: PathSelector | None = None,
        revision: RevisionSelector | None = None,
    ) -> TargetPathSet:
        """Return the files selected by ``selector`` and ``revision``.

        Args:
            selector: Path selection strategy; defaults to :class:`AutomaticDefault`.
            revision: Revision to diff against when ``selector`` is automatic.

        Returns:
            TargetPathSet: Ordered, deduplicated absolute paths inside ``root``.

        Raises:
            PathSourceError: If a path file is unreadable or a path command fails.
            RevisionResolutionError: If the revision diff cannot be computed.
        """

        active = selector if selector is not None else AutomaticDefault()
        match active:
            case ExplicitList(paths=paths):
                candidates: Iterable[Path] = self._from_strings(paths)
            case FromFile(path=path_file):
                candidates = self._from_strings(self._read_path_file(path_file))
            case FromShellCommand(command=command):
                candidates = self._from_strings(self._run_path_command(command))
            case AllFiles():
                candidates = sorted(self.scm.tracked_files())
            case AutomaticDefault():
                candidates = sorted(self._changed_files(revision or AtHead()))
            case _:
                raise TypeError(f"Unsupported path selector: {active!r}")
        return self._normalise(candidates)

    def _changed_files(self, revision: RevisionSelector) -> list[Path]:
        match revision:
            case AtHead():
                return self.scm.changed_files(HEAD_REVISION)
            case AgainstRevision(revision=rev):
                return self.scm.changed_files(rev)
            case AgainstMergeBaseWith(revision=rev):
                base = self.scm.merge_base(rev)
                LOGGER.debug("Merge base of HEAD with %s is %s", rev, base)
                return self.scm.changed_files(base)
        raise TypeError(f"Unsupported revision selector: {revision!r}")

    def _base(self) -> Path:
        return self.cwd if self.cwd is not None else Path.cwd()

    def _from_strings(self, entries: Iterable[str]) -> list[Path]:
        base = self._base()
        paths: list[Path] = []
        for raw in entries:
            stripped = raw.strip()
            if not stripped:
                continue
            candidate = Path(stripped).expanduser()
            paths.append(candidate if candidate.is_absolute() else base / candidate)
        return paths

    def _read_path_file(self, path_file: Path) -> list[str]:
        target = path_file if path_file.is_absolute() else self._base() / path_file
        try:
            return target.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise PathSourceError(f"Failed to read paths from '{path_file}': {exc}") from exc

    def _run_path_command(self, command: str) -> list[str]:
        LOGGER.debug("Running paths command: %s", command)
        try:
            completed = run_shell(command, options=CommandOptions(cwd=self._base()))
        except OSError as exc:
            raise PathSourceError(f"Failed to run paths command `{command}`: {exc}") from exc
        if completed.returncode != 0:
            detail = (completed.stderr or "").strip() or "<no stderr>"
            raise PathSourceError(
                f"Paths command `{command}` exited with status {completed.returncode}: {detail}",
            )
        return completed.stdout.splitlines()

    def _normalise(self, candidates: Iterable[Path]) -> TargetPathSet:
        root = self.root.resolve()
        seen: set[Path] = set()
        ordered: list[Path] = []
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            if not resolved.is_relative_to(root):
                LOGGER.warning("Ignoring %s: outside of repository root %s", candidate, root)
                continue
            if not resolved.is_file():
                LOGGER.warning("Ignoring %s: not an existing file", candidate)
                continue
            ordered.append(resolved)
        LOGGER.debug("Resolved %d path(s) to lint", len(ordered))
        return tuple(ordered)


__all__ = [
    "AgainstMergeBaseWith",
    "AgainstRevision",
    "AllFiles",
    "AtHead",
    "AutomaticDefault",
    "ExplicitList",
    "FromFile",
    "FromShellCommand",
    "PathResolver",
    "PathSelector",
    "RevisionSelector",
    "TargetPathSet",
]
