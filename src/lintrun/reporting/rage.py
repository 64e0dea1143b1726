# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic report for a past invocation."""

from __future__ import annotations

import shlex

from ..models import LedgerEntry


def format_rage_report(entry: LedgerEntry, log: str | None = None) -> str:
    """Return a plain-text report describing ``entry``.

    Args:
        entry: Ledger entry to describe.
        log: Captured log of the same run, if one was kept.

    Returns:
        str: Report suitable for pasting into a bug report.
    """

    lines = [
        "lintrun rage report",
        f"timestamp: {entry.run.timestamp}",
        f"args: {shlex.join(entry.run.args)}",
    ]
    if entry.exit is None:
        lines.append("exit code: <unterminated>")
    else:
        lines.append(f"exit code: {entry.exit.code}")
        if entry.exit.err:
            lines.append("err:")
            lines.extend(f"  {line}" for line in entry.exit.err.splitlines())
    if log:
        lines.append("")
        lines.append("log:")
        lines.append(log.rstrip("\n"))
    return "\n".join(lines) + "\n"


__all__ = ["format_rage_report"]
