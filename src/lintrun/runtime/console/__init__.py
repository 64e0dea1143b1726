# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Console helpers exposed for convenience."""

from __future__ import annotations

from .manager import RichConsoleManager, detect_tty, get_console_manager, set_force_color

__all__ = ["RichConsoleManager", "detect_tty", "get_console_manager", "set_force_color"]
