# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-linter spinners shown while linters execute."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from threading import Lock
from typing import Final, Literal

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from ..models import Issues, LinterOutcome, ProcessFailure, Severity
from ..orchestration.executor import ExecutionHooks

ProgressStatusLiteral = Literal["waiting", "running", "ok", "issues", "failed"]

STATUS_WAITING: Final[ProgressStatusLiteral] = "waiting"
STATUS_RUNNING: Final[ProgressStatusLiteral] = "running"
STATUS_OK: Final[ProgressStatusLiteral] = "ok"
STATUS_ISSUES: Final[ProgressStatusLiteral] = "issues"
STATUS_FAILED: Final[ProgressStatusLiteral] = "failed"

_STATUS_COLORS: Final[dict[ProgressStatusLiteral, str]] = {
    STATUS_WAITING: "dim",
    STATUS_RUNNING: "yellow",
    STATUS_OK: "green",
    STATUS_ISSUES: "red",
    STATUS_FAILED: "bold red",
}


def outcome_status(outcome: LinterOutcome) -> ProgressStatusLiteral:
    """Return the status label summarising ``outcome``."""

    if isinstance(outcome, ProcessFailure):
        return STATUS_FAILED
    if isinstance(outcome, Issues) and any(issue.severity is Severity.ERROR for issue in outcome.issues):
        return STATUS_ISSUES
    return STATUS_OK


@dataclass(slots=True)
class LinterProgress:
    """Drive one transient spinner row per scheduled linter.

    Callbacks may arrive from worker threads, so every update happens under
    ``lock``.
    """

    console: Console
    color: bool = True
    progress_factory: type[Progress] = Progress
    progress: Progress | None = field(init=False, default=None)
    tasks: dict[str, TaskID] = field(init=False, default_factory=dict)
    lock: Lock = field(init=False, default_factory=Lock)

    def start(self, linters: Sequence[str]) -> None:
        """Create a row for each linter name and start rendering."""

        self.progress = self.progress_factory(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TextColumn("{task.fields[current_status]}", justify="right"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        for name in linters:
            self.tasks[name] = self.progress.add_task(
                name,
                total=1,
                current_status=self._status_markup(STATUS_WAITING),
            )
        self.progress.start()

    def install(self, hooks: ExecutionHooks) -> None:
        """Attach progress callbacks to ``hooks``."""

        hooks.before_linter = self.before_linter
        hooks.after_linter = self.after_linter

    def before_linter(self, name: str) -> None:
        """Mark ``name`` as running."""

        self._update(name, STATUS_RUNNING, completed=0)

    def after_linter(self, outcome: LinterOutcome) -> None:
        """Mark the linter behind ``outcome`` as finished."""

        self._update(outcome.linter, outcome_status(outcome), completed=1)

    def stop(self) -> None:
        """Stop rendering and clear the transient rows."""

        if self.progress is not None:
            self.progress.stop()
            self.progress = None

    def _update(self, name: str, status: ProgressStatusLiteral, *, completed: int) -> None:
        with self.lock:
            task_id = self.tasks.get(name)
            if self.progress is None or task_id is None:
                return
            self.progress.update(task_id, completed=completed, current_status=self._status_markup(status))

    def _status_markup(self, label: ProgressStatusLiteral) -> str:
        if not self.color:
            return label
        color = _STATUS_COLORS[label]
        return f"[{color}]{label}[/]"


__all__ = ["LinterProgress", "outcome_status"]
