# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Aggregation and rendering of lint results."""

from __future__ import annotations

from .renderers import (
    OutputFormat,
    aggregate,
    build_default_report,
    exit_code_for,
    format_json,
    format_oneline,
    render,
    write_tee,
)
from .rage import format_rage_report

__all__ = [
    "OutputFormat",
    "aggregate",
    "build_default_report",
    "exit_code_for",
    "format_json",
    "format_oneline",
    "format_rage_report",
    "render",
    "write_tee",
]
