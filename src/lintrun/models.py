# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the lintrun package."""

from __future__ import annotations

import shlex
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PATHSFILE_PLACEHOLDER = "{{PATHSFILE}}"
DRYRUN_PLACEHOLDER = "{{DRYRUN}}"


class Severity(str, Enum):
    """Severity levels a linter may attach to an issue."""

    ADVICE = "advice"
    WARNING = "warning"
    ERROR = "error"

    @property
    def label(self) -> str:
        """Return the capitalised label used by the human renderer."""
        return self.value.capitalize()


class OutputProtocol(str, Enum):
    """Declared shape of a linter's standard output."""

    JSON = "json"
    TEXT = "text"


def _coerce_command(value: object) -> object:
    """Accept shell-style strings for command declarations."""
    if isinstance(value, str):
        return tuple(shlex.split(value))
    return value


class LinterSpec(BaseModel):
    """Immutable description of one configured linter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    name: str = Field(alias="code", min_length=1)
    command: tuple[str, ...] = Field(min_length=1)
    init_command: tuple[str, ...] | None = None
    include_patterns: tuple[str, ...] = Field(default_factory=tuple)
    exclude_patterns: tuple[str, ...] = Field(default_factory=tuple)
    is_formatter: bool = False
    output: OutputProtocol = OutputProtocol.JSON

    @field_validator("command", "init_command", mode="before")
    @classmethod
    def _split_command(cls, value: object) -> object:
        return _coerce_command(value)

    def fingerprint_payload(self) -> dict[str, Any]:
        """Return the canonical mapping hashed into the configuration fingerprint."""
        return self.model_dump(mode="json", by_alias=True)


class LintIssue(BaseModel):
    """Normalised finding reported by one linter."""

    model_config = ConfigDict(frozen=True)

    linter: str
    severity: Severity
    path: Path | None = None
    line: int | None = None
    column: int | None = None
    message: str
    code: str | None = None
    original: str | None = None
    replacement: str | None = None

    @property
    def has_patch(self) -> bool:
        """Return ``True`` when the issue carries a suggested replacement."""
        return self.path is not None and self.replacement is not None


class Issues(BaseModel):
    """Outcome of a linter that ran and reported zero or more issues."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["issues"] = "issues"
    linter: str
    issues: tuple[LintIssue, ...] = Field(default_factory=tuple)


class ProcessFailure(BaseModel):
    """Outcome of a linter that could not be spawned or crashed without findings."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["process_failure"] = "process_failure"
    linter: str
    exit_code: int | None
    stderr: str = ""
    context: tuple[str, ...] = Field(default_factory=tuple)

    def describe(self) -> str:
        """Return a one-paragraph description of the failure."""
        if self.exit_code is None:
            head = "Linter could not be started"
        else:
            head = f"Linter command failed with exit code {self.exit_code}"
        detail = self.stderr.strip()
        return f"{head}: {detail}" if detail else head


LinterOutcome = Annotated[Issues | ProcessFailure, Field(discriminator="kind")]


class RunInfo(BaseModel):
    """Arguments and start timestamp captured when an invocation begins."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    timestamp: str


class ExitInfo(BaseModel):
    """Exit code and error text captured when an invocation ends."""

    model_config = ConfigDict(frozen=True)

    code: int
    err: str | None = None


class LedgerEntry(BaseModel):
    """One invocation recorded in the run ledger."""

    model_config = ConfigDict(frozen=True)

    run: RunInfo
    exit: ExitInfo | None = None

    @property
    def finished(self) -> bool:
        """Return ``True`` once the invocation recorded its exit status."""
        return self.exit is not None


__all__ = [
    "DRYRUN_PLACEHOLDER",
    "ExitInfo",
    "Issues",
    "LedgerEntry",
    "LintIssue",
    "LinterOutcome",
    "LinterSpec",
    "OutputProtocol",
    "PATHSFILE_PLACEHOLDER",
    "ProcessFailure",
    "RunInfo",
    "Severity",
]
