# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Linter selection, scheduling, and output parsing."""

from __future__ import annotations

from .executor import ExecutionHooks, LinterExecutor, default_jobs
from .parsers import ParseResult, parse_output
from .selection import ScheduledLinter, filter_paths_for_linter, plan_linters, select_linters

__all__ = [
    "ExecutionHooks",
    "LinterExecutor",
    "ParseResult",
    "ScheduledLinter",
    "default_jobs",
    "filter_paths_for_linter",
    "parse_output",
    "plan_linters",
    "select_linters",
]
