# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Merge linter outcomes into one issue stream and render it."""

from __future__ import annotations

import difflib
import json
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import Final

from rich.console import Console
from rich.text import Text

from ..models import Issues, LintIssue, LinterOutcome, ProcessFailure, Severity

COMMAND_FAILED_CODE: Final[str] = "command-failed"
CONTEXT_LINES: Final[int] = 2
GENERAL_FAILURE_HEADER: Final[str] = ">>> General linter failure:"
_INDENT: Final[str] = "    "


class OutputFormat(str, Enum):
    """Supported renderings of the issue stream."""

    DEFAULT = "default"
    ONELINE = "oneline"
    JSON = "json"


def severity_color(severity: Severity) -> str:
    """Return the rich colour name associated with a severity level."""

    return {
        Severity.ERROR: "red",
        Severity.WARNING: "yellow",
        Severity.ADVICE: "cyan",
    }.get(severity, "yellow")


def failure_issue(failure: ProcessFailure) -> LintIssue:
    """Return the synthetic error issue that represents ``failure`` in the stream."""

    message = failure.describe()
    if failure.context:
        message += "\n" + "\n".join(failure.context)
    return LintIssue(
        linter=failure.linter,
        severity=Severity.ERROR,
        message=message,
        code=COMMAND_FAILED_CODE,
    )


def aggregate(outcomes: Iterable[LinterOutcome]) -> list[LintIssue]:
    """Flatten ``outcomes`` into one stream.

    Outcomes must already be in registration order; issues keep their
    emission order within each linter.

    Args:
        outcomes: Per-linter outcomes in registration order.

    Returns:
        list[LintIssue]: Merged stream, with failures as synthetic error issues.
    """

    merged: list[LintIssue] = []
    for outcome in outcomes:
        if isinstance(outcome, ProcessFailure):
            merged.append(failure_issue(outcome))
        else:
            merged.extend(outcome.issues)
    return merged


def exit_code_for(outcomes: Iterable[LinterOutcome]) -> int:
    """Return ``1`` if any error-severity issue or process failure occurred, else ``0``."""

    for outcome in outcomes:
        if isinstance(outcome, ProcessFailure):
            return 1
        if isinstance(outcome, Issues) and any(issue.severity is Severity.ERROR for issue in outcome.issues):
            return 1
    return 0


def display_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` when possible."""

    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def issue_to_record(issue: LintIssue) -> dict[str, object]:
    """Return the wire-format mapping for ``issue``.

    The keys mirror the records linters emit, with ``code`` naming the linter
    and ``name`` the issue code.
    """

    return {
        "path": issue.path.as_posix() if issue.path is not None else None,
        "line": issue.line,
        "char": issue.column,
        "code": issue.linter,
        "severity": issue.severity.value,
        "name": issue.code,
        "original": issue.original,
        "replacement": issue.replacement,
        "description": issue.message,
    }


def format_json(issue: LintIssue) -> str:
    """Return ``issue`` as a single-line JSON object."""

    return json.dumps(issue_to_record(issue), sort_keys=True, ensure_ascii=False)


def format_oneline(issue: LintIssue, root: Path) -> str:
    """Return ``issue`` as one compact, greppable line."""

    if issue.path is None:
        location = issue.linter
    else:
        location = display_path(issue.path, root)
        if issue.line is not None:
            location += f":{issue.line}"
            if issue.column is not None:
                location += f":{issue.column}"
    tag = f"{issue.linter}/{issue.code}" if issue.code else issue.linter
    message = " ".join(issue.message.split())
    return f"{location} {issue.severity.value.upper()} [{tag}] {message}"


def _read_lines(path: Path) -> list[str] | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return None


def _context_block(issue: LintIssue) -> list[Text]:
    """Return source lines surrounding the issue, with the reported line marked."""

    if issue.path is None or issue.line is None:
        return []
    lines = _read_lines(issue.path)
    if not lines or not 1 <= issue.line <= len(lines):
        return []
    start = max(1, issue.line - CONTEXT_LINES)
    end = min(len(lines), issue.line + CONTEXT_LINES)
    width = len(str(end))
    block: list[Text] = []
    for number in range(start, end + 1):
        marker = ">>>" if number == issue.line else "   "
        row = Text(f"{_INDENT}{marker} {str(number).rjust(width)}  |  ", style="dim")
        row.append(lines[number - 1], style="bold" if number == issue.line else "")
        block.append(row)
    return block


def _diff_style(line: str) -> str:
    if line.startswith("@@"):
        return "cyan"
    if line.startswith("+"):
        return "green"
    if line.startswith("-"):
        return "red"
    return ""


def _patch_block(issue: LintIssue) -> list[Text]:
    """Return a unified diff between the file on disk and the suggested replacement."""

    if issue.path is None or issue.replacement is None:
        return []
    if issue.original is not None:
        before = issue.original
    else:
        lines = _read_lines(issue.path)
        before = "\n".join(lines) + "\n" if lines else ""
    diff = difflib.unified_diff(
        before.splitlines(),
        issue.replacement.splitlines(),
        fromfile="original",
        tofile="replacement",
        lineterm="",
    )
    block = [Text(f"{_INDENT}You can run `lintrun --apply-patches` to apply this patch.", style="italic")]
    for line in diff:
        block.append(Text(f"{_INDENT}{line}", style=_diff_style(line)))
    return block


def _issue_block(issue: LintIssue, *, suggest_patches: bool) -> list[Text]:
    heading = Text("  ")
    heading.append(issue.severity.label, style=f"bold {severity_color(issue.severity)}")
    heading.append(f" ({issue.linter})")
    if issue.code:
        heading.append(f" {issue.code}", style="bold")
    block = [heading]
    block.extend(Text(f"{_INDENT}{line}") for line in issue.message.splitlines() or [""])
    block.extend(_context_block(issue))
    if suggest_patches:
        block.extend(_patch_block(issue))
    block.append(Text(""))
    return block


def build_default_report(
    issues: Sequence[LintIssue],
    root: Path,
    *,
    suggest_patches: bool = True,
) -> list[Text]:
    """Return the human-readable report as styled lines.

    Issues are grouped per file in first-appearance order; issues without a
    path come first under a general failure heading.

    Args:
        issues: Merged issue stream.
        root: Repository root used for display paths.
        suggest_patches: Show suggested replacements as diffs.

    Returns:
        list[Text]: Lines ready to print.
    """

    general = [issue for issue in issues if issue.path is None]
    grouped: dict[Path, list[LintIssue]] = {}
    for issue in issues:
        if issue.path is not None:
            grouped.setdefault(issue.path, []).append(issue)

    lines: list[Text] = []
    if general:
        lines.append(Text(GENERAL_FAILURE_HEADER, style="bold"))
        lines.append(Text(""))
        for issue in general:
            lines.extend(_issue_block(issue, suggest_patches=suggest_patches))
    for path, path_issues in grouped.items():
        header = Text(">>> Lint for ", style="bold")
        header.append(display_path(path, root), style="bold underline")
        header.append(":", style="bold")
        lines.append(header)
        lines.append(Text(""))
        for issue in path_issues:
            lines.extend(_issue_block(issue, suggest_patches=suggest_patches))
    return lines


def render(
    issues: Sequence[LintIssue],
    output: OutputFormat,
    *,
    root: Path,
    console: Console,
    suggest_patches: bool = True,
) -> None:
    """Print ``issues`` to ``console`` in the requested format.

    Args:
        issues: Merged issue stream.
        output: Rendering to produce.
        root: Repository root used for display paths.
        console: Destination console.
        suggest_patches: Show suggested replacements as diffs in the default format.
    """

    if output is OutputFormat.JSON:
        for issue in issues:
            console.out(format_json(issue), highlight=False)
        return
    if output is OutputFormat.ONELINE:
        for issue in issues:
            console.out(format_oneline(issue, root), highlight=False)
        return
    if not issues:
        ok_text = Text("ok", style="bold green")
        ok_text.append(" No lint issues.", style="")
        console.print(ok_text)
        return
    for line in build_default_report(issues, root, suggest_patches=suggest_patches):
        console.print(line, soft_wrap=True)


def write_tee(issues: Sequence[LintIssue], path: Path) -> None:
    """Mirror the json rendering of ``issues`` into ``path``."""

    payload = "".join(format_json(issue) + "\n" for issue in issues)
    path.write_text(payload, encoding="utf-8")


__all__ = [
    "COMMAND_FAILED_CODE",
    "OutputFormat",
    "aggregate",
    "build_default_report",
    "display_path",
    "exit_code_for",
    "failure_issue",
    "format_json",
    "format_oneline",
    "issue_to_record",
    "render",
    "severity_color",
    "write_tee",
]
