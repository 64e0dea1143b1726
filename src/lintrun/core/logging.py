# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing message helpers and logging setup.

The ``info``/``ok``/``warn``/``fail`` helpers print styled one-line messages to
standard error so machine-readable formats on standard output stay clean.
Diagnostic chatter goes through :mod:`logging`; :func:`configure_logging`
wires a Rich handler for the terminal and an optional file handler that keeps
a full debug log for the run ledger.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from rich.logging import RichHandler
from rich.text import Text

from ..runtime.console.manager import colors_forced, detect_tty, get_console_manager

PACKAGE_LOGGER: Final[str] = "lintrun"
_FILE_FORMAT: Final[str] = "%(asctime)s %(levelname)s %(name)s: %(message)s"


MESSAGE_STYLES: Final[dict[str, tuple[str, str]]] = {
    "info": ("i", "cyan"),
    "ok": ("ok", "green"),
    "warn": ("warning", "yellow"),
    "fail": ("error", "bold red"),
}


def _message(kind: str, msg: str) -> None:
    """Print ``msg`` on stderr with the label and style registered for ``kind``."""

    label, style = MESSAGE_STYLES[kind]
    styled = colors_forced() or detect_tty(stderr=True)
    line = Text()
    line.append(label, style=style if styled else None)
    line.append(f" {msg}")
    get_console_manager().get(color=styled, emoji=False, stderr=True).print(line)


def info(msg: str) -> None:
    """Report progress the user should see without asking for it."""

    _message("info", msg)


def ok(msg: str) -> None:
    """Report a step that completed successfully."""

    _message("ok", msg)


def warn(msg: str) -> None:
    """Report a problem that does not stop the current command."""

    _message("warn", msg)


def fail(msg: str) -> None:
    """Report an error that ends the current command."""

    _message("fail", msg)


def resolve_log_level(verbosity: int, *, machine_output: bool) -> int:
    """Return the terminal log level for ``verbosity``.

    Machine-readable output suppresses everything below errors unless the user
    asked for verbose output explicitly.

    Args:
        verbosity: Number of ``-v`` flags supplied.
        machine_output: ``True`` when a json or oneline format was requested.

    Returns:
        int: Logging level for the terminal handler.
    """

    if verbosity >= 1:
        return logging.DEBUG
    return logging.ERROR if machine_output else logging.INFO


def configure_logging(level: int, *, log_file: Path | None = None) -> logging.Logger:
    """Install handlers on the package logger.

    Args:
        level: Level applied to the terminal handler.
        log_file: Optional file receiving a full debug log of the invocation.

    Returns:
        logging.Logger: The configured package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console = get_console_manager().get(color=True, emoji=False, stderr=True)
    terminal = RichHandler(console=console, show_time=False, show_path=False, markup=False)
    terminal.setLevel(level)
    logger.addHandler(terminal)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
    return logger


__all__ = [
    "MESSAGE_STYLES",
    "PACKAGE_LOGGER",
    "configure_logging",
    "fail",
    "info",
    "ok",
    "resolve_log_level",
    "warn",
]
