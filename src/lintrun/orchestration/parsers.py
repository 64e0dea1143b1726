# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers turning linter standard output into :class:`LintIssue` records."""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError

from ..models import LintIssue, OutputProtocol, Severity

PARSE_ERROR_CODE: Final[str] = "parse-error"
# Records a linter explicitly switched off; accepted on the wire, never reported.
DISABLED_SEVERITY: Final[str] = "disabled"
_MAX_SNIPPET: Final[int] = 200
_TEXT_LOCATION = re.compile(r"^(?P<path>[^:\s][^:]*):(?P<line>\d+)(?::(?P<col>\d+))?:\s*(?P<message>.*)$")


class LintMessage(BaseModel):
    """One structured record in the json output protocol."""

    model_config = ConfigDict(extra="ignore")

    path: str | None = None
    line: int | None = None
    char: int | None = None
    code: str | None = None
    severity: Severity
    name: str | None = None
    original: str | None = None
    replacement: str | None = None
    description: str | None = None

    def to_issue(self, linter: str, root: Path) -> LintIssue:
        """Return the normalised issue attributed to ``linter``.

        Args:
            linter: Name of the linter that produced the record.
            root: Repository root relative paths are resolved against.

        Returns:
            LintIssue: Normalised issue.
        """

        path: Path | None = None
        if self.path:
            candidate = Path(self.path)
            path = candidate if candidate.is_absolute() else root / candidate
        message = self.description or self.name or "(no description)"
        return LintIssue(
            linter=linter,
            severity=self.severity,
            path=path,
            line=self.line,
            column=self.char,
            message=message,
            code=self.name,
            original=self.original,
            replacement=self.replacement,
        )


@dataclass(slots=True)
class ParseResult:
    """Issues recovered from a linter's output, in emission order.

    ``issues`` includes parse-error issues for malformed records; ``errors``
    holds just those, so callers can tell whether any valid record was seen.
    ``disabled`` counts well-formed records the linter marked as disabled.
    """

    issues: list[LintIssue] = field(default_factory=list)
    errors: list[LintIssue] = field(default_factory=list)
    disabled: int = 0

    def add_error(self, issue: LintIssue) -> None:
        """Record a parse-error issue at its position in the stream."""
        self.issues.append(issue)
        self.errors.append(issue)

    @property
    def has_valid_output(self) -> bool:
        """Return ``True`` when at least one well-formed record was parsed."""
        return self.disabled > 0 or len(self.issues) > len(self.errors)


def _parse_error(linter: str, line: str, reason: str) -> LintIssue:
    snippet = line if len(line) <= _MAX_SNIPPET else line[:_MAX_SNIPPET] + "…"
    return LintIssue(
        linter=linter,
        severity=Severity.ERROR,
        message=f"Failed to parse linter output ({reason}): {snippet}",
        code=PARSE_ERROR_CODE,
    )


def parse_json_lines(stdout: str, *, linter: str, root: Path, returncode: int) -> ParseResult:
    """Parse newline-delimited JSON records.

    Malformed lines are kept as parse-error issues rather than dropped.

    Args:
        stdout: Captured standard output.
        linter: Name of the linter the output belongs to.
        root: Repository root used to resolve relative paths.
        returncode: Exit status of the process (unused by this protocol).

    Returns:
        ParseResult: Valid issues and parse errors in emission order.
    """

    del returncode
    result = ParseResult()
    for raw in stdout.splitlines():
        line = raw.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            result.add_error(_parse_error(linter, line, f"invalid JSON: {exc.msg}"))
            continue
        if not isinstance(payload, Mapping):
            result.add_error(_parse_error(linter, line, "expected a JSON object"))
            continue
        if payload.get("severity") == DISABLED_SEVERITY:
            result.disabled += 1
            continue
        try:
            message = LintMessage.model_validate(payload)
        except ValidationError as exc:
            reason = "; ".join(f"{'.'.join(map(str, err['loc'])) or 'record'}: {err['msg']}" for err in exc.errors())
            result.add_error(_parse_error(linter, line, reason))
            continue
        result.issues.append(message.to_issue(linter, root))
    return result


def parse_text_lines(stdout: str, *, linter: str, root: Path, returncode: int) -> ParseResult:
    """Treat each non-blank line of a failing run as one error issue.

    Lines shaped like ``path:line[:col]: message`` carry their location.

    Args:
        stdout: Captured standard output.
        linter: Name of the linter the output belongs to.
        root: Repository root used to resolve relative paths.
        returncode: Exit status of the process; zero yields no issues.

    Returns:
        ParseResult: One issue per non-blank output line.
    """

    result = ParseResult()
    if returncode == 0:
        return result
    for raw in stdout.splitlines():
        line = raw.rstrip()
        if not line.strip():
            continue
        match = _TEXT_LOCATION.match(line)
        if match is None:
            result.issues.append(LintIssue(linter=linter, severity=Severity.ERROR, message=line.strip()))
            continue
        candidate = Path(match.group("path"))
        column = match.group("col")
        result.issues.append(
            LintIssue(
                linter=linter,
                severity=Severity.ERROR,
                path=candidate if candidate.is_absolute() else root / candidate,
                line=int(match.group("line")),
                column=int(column) if column is not None else None,
                message=match.group("message").strip() or line.strip(),
            ),
        )
    return result


OutputParser = Callable[..., ParseResult]

PARSERS: Final[dict[OutputProtocol, OutputParser]] = {
    OutputProtocol.JSON: parse_json_lines,
    OutputProtocol.TEXT: parse_text_lines,
}


def parse_output(protocol: OutputProtocol, stdout: str, *, linter: str, root: Path, returncode: int) -> ParseResult:
    """Dispatch ``stdout`` to the parser registered for ``protocol``."""

    parser = PARSERS[protocol]
    return parser(stdout, linter=linter, root=root, returncode=returncode)


__all__ = [
    "LintMessage",
    "PARSERS",
    "PARSE_ERROR_CODE",
    "ParseResult",
    "parse_json_lines",
    "parse_output",
    "parse_text_lines",
]
