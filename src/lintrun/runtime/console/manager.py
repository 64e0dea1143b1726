# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for the issue stream, messages, and spinners.

Consoles are cached per stream and presentation flags. ``--force-color``
flips a process-wide switch that makes every stream behave like a terminal.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import cache

from rich.console import Console

_FORCE_COLOR = False


@dataclass(frozen=True, slots=True)
class ConsoleKey:
    """Presentation flags identifying one cached console."""

    stderr: bool
    color: bool
    emoji: bool
    terminal: bool


def detect_tty(*, stderr: bool = False) -> bool:
    """Return ``True`` when stdout (or stderr) is attached to a terminal."""

    stream = sys.stderr if stderr else sys.stdout
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


def set_force_color(enabled: bool) -> None:
    """Toggle ANSI colour output regardless of terminal detection."""

    global _FORCE_COLOR  # noqa: PLW0603 - process-wide presentation switch
    _FORCE_COLOR = enabled
    get_console_manager().clear()


def colors_forced() -> bool:
    """Return ``True`` when ``--force-color`` is in effect."""

    return _FORCE_COLOR


class RichConsoleManager:
    """Hand out Rich consoles, building each flag combination once."""

    def __init__(self) -> None:
        """Start with no consoles built."""

        self._consoles: dict[ConsoleKey, Console] = {}

    def get(self, *, color: bool, emoji: bool, stderr: bool = False) -> Console:
        """Return the console for the requested stream and presentation.

        Args:
            color: Allow ANSI styling when the stream is (or is forced to be) a terminal.
            emoji: Render ``:emoji:`` codes.
            stderr: Write to standard error rather than standard output.

        Returns:
            Console: A console that resolves its stream lazily, so redirected
            ``sys.stdout``/``sys.stderr`` objects are honoured.
        """

        key = ConsoleKey(
            stderr=stderr,
            color=color,
            emoji=emoji,
            terminal=_FORCE_COLOR or detect_tty(stderr=stderr),
        )
        console = self._consoles.get(key)
        if console is None:
            console = self._consoles[key] = _build_console(key)
        return console

    def clear(self) -> None:
        """Forget every cached console so the next lookup rebuilds it."""

        self._consoles.clear()


def _build_console(key: ConsoleKey) -> Console:
    styled = key.color and key.terminal
    return Console(
        stderr=key.stderr,
        force_terminal=key.terminal,
        color_system="auto" if styled else None,
        no_color=not styled,
        emoji=key.emoji,
        highlight=False,
        soft_wrap=True,
    )


@cache
def get_console_manager() -> RichConsoleManager:
    """Return the process-wide console manager."""

    return RichConsoleManager()


__all__ = [
    "ConsoleKey",
    "RichConsoleManager",
    "colors_forced",
    "detect_tty",
    "get_console_manager",
    "set_force_color",
]
