# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Stubs and builders shared by the lintrun tests."""

from __future__ import annotations

import io
import subprocess
import sys
import textwrap
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console

from lintrun.errors import RevisionResolutionError


class FakeSourceControl:
    """Stub source-control collaborator answering from fixed tables."""

    def __init__(
        self,
        *,
        changed: dict[str, list[Path]] | None = None,
        tracked: list[Path] | None = None,
        merge_bases: dict[str, str] | None = None,
    ) -> None:
        self.changed = changed or {}
        self.tracked = tracked or []
        self.merge_bases = merge_bases or {}
        self.calls: list[tuple[str, str]] = []

    def head(self) -> str:
        return "HEAD"

    def merge_base(self, revision: str) -> str:
        self.calls.append(("merge_base", revision))
        try:
            return self.merge_bases[revision]
        except KeyError as exc:
            raise RevisionResolutionError(f"Unknown revision '{revision}'") from exc

    def changed_files(self, revision: str) -> list[Path]:
        self.calls.append(("changed_files", revision))
        if revision not in self.changed:
            raise RevisionResolutionError(f"Unknown revision '{revision}'")
        return list(self.changed[revision])

    def tracked_files(self) -> list[Path]:
        return list(self.tracked)


class RecordingRunner:
    """Runner stub returning canned results and remembering each command."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[list[str]] = []

    def __call__(self, cmd: Sequence[str], **_kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(cmd))
        return subprocess.CompletedProcess(list(cmd), self.returncode, stdout=self.stdout, stderr=self.stderr)


def python_linter(directory: Path, name: str, source: str) -> tuple[str, ...]:
    """Write a Python script acting as a linter and return its command."""

    script = directory / f"{name}.py"
    script.write_text(textwrap.dedent(source), encoding="utf-8")
    return (sys.executable, str(script))


def make_console() -> Console:
    """Return a plain, fixed-width console writing into a string buffer."""

    return Console(file=io.StringIO(), width=120, color_system=None, force_terminal=False, highlight=False)


def console_text(console: Console) -> str:
    """Return everything written to a console built by :func:`make_console`."""

    file = console.file
    assert isinstance(file, io.StringIO)
    return file.getvalue()
