# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for aggregation, exit codes, and renderers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from helpers.support import console_text, make_console

from lintrun.models import Issues, LintIssue, ProcessFailure, Severity
from lintrun.reporting import OutputFormat, aggregate, exit_code_for, format_json, format_oneline, render, write_tee
from lintrun.reporting.renderers import COMMAND_FAILED_CODE


def _issue(linter: str, severity: Severity, path: Path | None = None, **extra: object) -> LintIssue:
    return LintIssue(linter=linter, severity=severity, path=path, message=f"{linter} says hi", **extra)


@pytest.mark.parametrize(
    ("outcomes", "expected"),
    [
        ([Issues(linter="A", issues=(_issue("A", Severity.WARNING),)), Issues(linter="B")], 0),
        ([Issues(linter="A", issues=(_issue("A", Severity.ADVICE),))], 0),
        ([Issues(linter="A", issues=(_issue("A", Severity.ERROR),)), Issues(linter="B")], 1),
        ([ProcessFailure(linter="A", exit_code=2), Issues(linter="B")], 1),
        ([], 0),
    ],
)
def test_exit_code_contract(outcomes: list, expected: int) -> None:
    assert exit_code_for(outcomes) == expected


def test_aggregate_preserves_registration_then_emission_order(repo: Path) -> None:
    a = repo / "pkg" / "a.py"
    outcomes = [
        Issues(linter="FIRST", issues=(_issue("FIRST", Severity.ERROR, a, code="2"), _issue("FIRST", Severity.ERROR, a, code="1"))),
        ProcessFailure(linter="SECOND", exit_code=None, stderr="not found", context=("parse note",)),
        Issues(linter="THIRD", issues=(_issue("THIRD", Severity.ADVICE, a),)),
    ]

    merged = aggregate(outcomes)

    assert [(issue.linter, issue.code) for issue in merged] == [
        ("FIRST", "2"),
        ("FIRST", "1"),
        ("SECOND", COMMAND_FAILED_CODE),
        ("THIRD", None),
    ]
    failure = merged[2]
    assert failure.severity is Severity.ERROR
    assert failure.path is None
    assert "Linter could not be started: not found" in failure.message
    assert "parse note" in failure.message


@pytest.mark.parametrize("output", list(OutputFormat))
def test_rendering_is_byte_identical_across_runs(repo: Path, output: OutputFormat) -> None:
    outcomes = [
        Issues(linter="PY", issues=(_issue("PY", Severity.ERROR, repo / "pkg" / "a.py", line=2, column=1, code="E1"),)),
        ProcessFailure(linter="BROKEN", exit_code=5, stderr="boom"),
        Issues(linter="MD", issues=(_issue("MD", Severity.WARNING, repo / "README.md", line=1),)),
    ]
    rendered: list[str] = []
    for _ in range(2):
        console = make_console()
        render(aggregate(outcomes), output, root=repo, console=console)
        rendered.append(console_text(console))

    assert rendered[0] == rendered[1]
    assert rendered[0]


def test_oneline_format(repo: Path) -> None:
    issue = _issue("FLAKE8", Severity.ERROR, repo / "pkg" / "a.py", line=3, column=9, code="F401")
    general = _issue("BROKEN", Severity.ERROR, code="command-failed")

    assert format_oneline(issue, repo) == "pkg/a.py:3:9 ERROR [FLAKE8/F401] FLAKE8 says hi"
    assert format_oneline(general, repo) == "BROKEN ERROR [BROKEN/command-failed] BROKEN says hi"


def test_json_format_uses_linter_wire_schema(repo: Path) -> None:
    issue = _issue("FLAKE8", Severity.WARNING, repo / "pkg" / "a.py", line=3, column=9, code="F401")

    line = format_json(issue)
    record = json.loads(line)

    assert list(record) == sorted(record)
    assert record["code"] == "FLAKE8"
    assert record["name"] == "F401"
    assert record["severity"] == "warning"
    assert record["char"] == 9
    assert record["path"] == (repo / "pkg" / "a.py").as_posix()


def test_default_report_groups_by_file_with_context(repo: Path) -> None:
    a = repo / "pkg" / "a.py"
    issues = aggregate(
        [
            Issues(linter="PY", issues=(_issue("PY", Severity.ERROR, a, line=1, code="F401"),)),
            ProcessFailure(linter="BROKEN", exit_code=1, stderr="kaput"),
            Issues(linter="PY2", issues=(_issue("PY2", Severity.WARNING, a, line=2),)),
        ],
    )
    console = make_console()

    render(issues, OutputFormat.DEFAULT, root=repo, console=console)
    text = console_text(console)

    assert text.index(">>> General linter failure:") < text.index(">>> Lint for pkg/a.py:")
    assert text.count(">>> Lint for pkg/a.py:") == 1
    assert "Error (PY) F401" in text
    assert "Warning (PY2)" in text
    assert "import os" in text
    assert "Linter command failed with exit code 1: kaput" in text


def test_default_report_shows_patch_diff_unless_applying(repo: Path) -> None:
    a = repo / "pkg" / "a.py"
    issue = _issue("FMT", Severity.WARNING, a, line=1, replacement="x = 1\n", original="import os\nx = 1\n")

    suggested = make_console()
    render([issue], OutputFormat.DEFAULT, root=repo, console=suggested)
    applying = make_console()
    render([issue], OutputFormat.DEFAULT, root=repo, console=applying, suggest_patches=False)

    assert "-import os" in console_text(suggested)
    assert "--apply-patches" in console_text(suggested)
    assert "-import os" not in console_text(applying)


def test_empty_default_report(repo: Path) -> None:
    console = make_console()

    render([], OutputFormat.DEFAULT, root=repo, console=console)

    assert console_text(console) == "ok No lint issues.\n"


def test_machine_formats_print_nothing_when_empty(repo: Path) -> None:
    for output in (OutputFormat.JSON, OutputFormat.ONELINE):
        console = make_console()
        render([], output, root=repo, console=console)
        assert console_text(console) == ""


def test_tee_mirrors_json_rendering(repo: Path, tmp_path: Path) -> None:
    issues = [_issue("A", Severity.ERROR, repo / "README.md", line=1), _issue("B", Severity.ADVICE)]
    console = make_console()
    tee = tmp_path / "tee.json"

    render(issues, OutputFormat.JSON, root=repo, console=console)
    write_tee(issues, tee)

    assert tee.read_text(encoding="utf-8") == console_text(console)
