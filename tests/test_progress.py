# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the per-linter progress display."""

from __future__ import annotations

from helpers.support import make_console

from lintrun.models import Issues, LintIssue, ProcessFailure, Severity
from lintrun.orchestration import ExecutionHooks
from lintrun.reporting.progress import LinterProgress, outcome_status


def test_outcome_status() -> None:
    error = LintIssue(linter="A", severity=Severity.ERROR, message="bad")
    advice = LintIssue(linter="A", severity=Severity.ADVICE, message="meh")

    assert outcome_status(Issues(linter="A")) == "ok"
    assert outcome_status(Issues(linter="A", issues=(advice,))) == "ok"
    assert outcome_status(Issues(linter="A", issues=(error,))) == "issues"
    assert outcome_status(ProcessFailure(linter="A", exit_code=None)) == "failed"


def test_progress_tracks_each_linter() -> None:
    hooks = ExecutionHooks()
    progress = LinterProgress(console=make_console(), color=False)
    progress.install(hooks)
    progress.start(["A", "B"])
    assert progress.progress is not None
    active = progress.progress

    assert hooks.before_linter is not None
    assert hooks.after_linter is not None
    hooks.before_linter("A")
    hooks.after_linter(Issues(linter="A"))
    hooks.after_linter(ProcessFailure(linter="UNKNOWN", exit_code=1))

    task_a = active.tasks[0]
    assert task_a.completed == 1
    assert task_a.fields["current_status"] == "ok"
    assert active.tasks[1].fields["current_status"] == "waiting"
    progress.stop()
    assert progress.progress is None
