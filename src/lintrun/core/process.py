# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Spawning of linter, init, git, and path-listing processes.

Exit statuses are never interpreted here: callers receive the
:class:`~subprocess.CompletedProcess` and classify it themselves. A command
that cannot be started surfaces as :class:`OSError` (usually
:class:`FileNotFoundError`).
"""

from __future__ import annotations

import shutil

# Bandit: commands come from the user's lint configuration or command line and
# are passed as argument lists.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final

SHELL_EXECUTABLE: Final[str] = "sh"


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """How a child process is started.

    Attributes:
        cwd: Working directory; repository-relative executables resolve here.
        env: Full replacement environment, or ``None`` to inherit.
        stdin_devnull: Detach stdin so interactive tools cannot block a run.
    """

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    stdin_devnull: bool = True


def resolve_executable(program: str, cwd: Path | None = None) -> str:
    """Return an absolute path for ``program``.

    Absolute paths pass through. Names with a directory part, such as
    ``tools/flake8_linter.py``, are taken relative to ``cwd``. Bare names are
    looked up on ``PATH``.

    Raises:
        FileNotFoundError: If nothing executable matches ``program``.
    """

    candidate = Path(program)
    if candidate.is_absolute():
        return program
    base = cwd or Path.cwd()
    if len(candidate.parts) > 1:
        local = base / candidate
        if local.exists():
            return str(local)
        raise FileNotFoundError(f"Executable '{program}' was not found in {base}")
    found = shutil.which(program)
    if found is None:
        raise FileNotFoundError(f"Executable '{program}' was not found on PATH")
    return found


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run ``args`` to completion and capture its output as text.

    Output is decoded as UTF-8; undecodable bytes become replacement
    characters instead of aborting the run.

    Args:
        args: Program followed by its arguments.
        options: Working directory, environment, and stdin handling.

    Returns:
        CompletedProcess: Exit status with captured stdout and stderr.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the program cannot be located.
        OSError: If the process cannot be started.
    """

    if not args:
        raise ValueError("cannot run an empty command")
    opts = options or CommandOptions()
    argv = [resolve_executable(args[0], opts.cwd), *args[1:]]
    return subprocess.run(  # nosec B603
        argv,
        cwd=opts.cwd,
        env=None if opts.env is None else dict(opts.env),
        capture_output=True,
        encoding="utf-8",
        errors="replace",
        stdin=subprocess.DEVNULL if opts.stdin_devnull else None,
        check=False,
    )


def run_shell(command: str, *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Run a user-typed ``command`` line through ``sh -c``."""

    return run_command([SHELL_EXECUTABLE, "-c", command], options=options)


__all__ = [
    "CommandOptions",
    "resolve_executable",
    "run_command",
    "run_shell",
]
