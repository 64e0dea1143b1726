# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Error taxonomy shared by the lint engine.

Fatal conditions derive from :class:`LintrunError` and abort an invocation
before any linter is scheduled. Non-fatal conditions derive from
:class:`UserWarning` and are carried around as values so callers decide how
to surface them.
"""

from __future__ import annotations

from pathlib import Path


class LintrunError(Exception):
    """Base class for fatal errors raised by the lint engine."""


class ConfigError(LintrunError):
    """Raised when configuration input is missing or invalid."""


class PathSourceError(LintrunError):
    """Raised when a path list cannot be read from a file or shell command."""


class RevisionResolutionError(LintrunError):
    """Raised when a revision cannot be resolved or the repository is unavailable."""


class InitError(LintrunError):
    """Raised when a linter initialisation command fails."""


class LedgerError(LintrunError):
    """Raised when the run history cannot be read or written."""


class NoSuchInvocation(LedgerError):
    """Raised when a requested invocation index exceeds the retained history."""

    def __init__(self, index: int, available: int) -> None:
        super().__init__(
            f"No invocation at index {index}; only {available} run(s) are retained",
        )
        self.index = index
        self.available = available


class PatchConflictWarning(UserWarning):
    """Two linters suggested different replacements for the same file."""

    def __init__(self, path: Path, kept: str, discarded: str) -> None:
        super().__init__(
            f"Conflicting patches for {path}: applied the suggestion from '{kept}', "
            f"discarded the one from '{discarded}'",
        )
        self.path = path
        self.kept = kept
        self.discarded = discarded


class StalePatchWarning(UserWarning):
    """A suggested replacement was computed against content that has since changed."""

    def __init__(self, path: Path, linter: str) -> None:
        super().__init__(f"Skipped patch from '{linter}' for {path}: file changed since it was linted")
        self.path = path
        self.linter = linter


class StalenessWarning(UserWarning):
    """The linter configuration changed since the last successful ``init``."""


__all__ = [
    "ConfigError",
    "InitError",
    "LedgerError",
    "LintrunError",
    "NoSuchInvocation",
    "PatchConflictWarning",
    "PathSourceError",
    "RevisionResolutionError",
    "StalePatchWarning",
    "StalenessWarning",
]
