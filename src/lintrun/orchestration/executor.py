# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Execution helpers for running scheduled linters and recording outcomes."""

from __future__ import annotations

import logging
import os
import shlex
import tempfile
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CompletedProcess
from textwrap import shorten

from ..core.process import CommandOptions, run_command
from ..models import PATHSFILE_PLACEHOLDER, Issues, LinterOutcome, ProcessFailure
from .parsers import parse_output
from .selection import ScheduledLinter

LOGGER = logging.getLogger(__name__)

RunnerCallable = Callable[..., CompletedProcess[str]]


def default_jobs() -> int:
    """Return the worker pool size used when none is configured."""

    return max(1, os.cpu_count() or 1)


@dataclass(slots=True)
class ExecutionHooks:
    """Callbacks observing linter execution without influencing it.

    ``before_linter`` fires on the worker thread just before the process
    starts; ``after_linter`` fires on the coordinating thread as each outcome
    arrives, in completion order.
    """

    before_linter: Callable[[str], None] | None = None
    after_linter: Callable[[LinterOutcome], None] | None = None


@contextmanager
def _paths_file(paths: Sequence[Path]) -> Iterator[Path]:
    """Yield a temporary file listing ``paths`` one per line."""

    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        errors="surrogateescape",
        prefix="lintrun-paths-",
        suffix=".txt",
        delete=False,
    )
    try:
        with handle:
            handle.write("\n".join(str(path) for path in paths))
            handle.write("\n")
        yield Path(handle.name)
    finally:
        Path(handle.name).unlink(missing_ok=True)


def build_command(command: Sequence[str], paths: Sequence[Path], paths_file: Path | None) -> list[str]:
    """Return the argv for one linter invocation.

    Args:
        command: Command template from the linter spec.
        paths: Input paths for the linter.
        paths_file: File listing ``paths`` when the template uses the placeholder.

    Returns:
        list[str]: Concrete argv; paths are appended when no placeholder is used.
    """

    if paths_file is None:
        return [*command, *(str(path) for path in paths)]
    return [arg.replace(PATHSFILE_PLACEHOLDER, str(paths_file)) for arg in command]


def uses_paths_file(command: Sequence[str]) -> bool:
    """Return ``True`` when any argument references the paths-file placeholder."""

    return any(PATHSFILE_PLACEHOLDER in arg for arg in command)


@dataclass(slots=True)
class LinterExecutor:
    """Run scheduled linters under a bounded worker pool.

    Attributes:
        root: Repository root; every linter runs with it as working directory.
        jobs: Maximum number of linters running at once.
        runner: Callable used to spawn processes, replaceable in tests.
        hooks: Progress observers.
    """

    root: Path
    jobs: int = field(default_factory=default_jobs)
    runner: RunnerCallable = run_command
    hooks: ExecutionHooks = field(default_factory=ExecutionHooks)

    def execute(self, units: Sequence[ScheduledLinter]) -> list[LinterOutcome]:
        """Run every unit and return outcomes ordered by schedule position.

        Args:
            units: Linters paired with their input paths.

        Returns:
            list[LinterOutcome]: One outcome per unit, independent of completion order.
        """

        if not units:
            return []
        if self.jobs <= 1 or len(units) == 1:
            outcomes = self._execute_serial(units)
        else:
            outcomes = self._execute_in_parallel(units)
        return [outcomes[unit.order] for unit in sorted(units, key=lambda unit: unit.order)]

    def _execute_serial(self, units: Sequence[ScheduledLinter]) -> dict[int, LinterOutcome]:
        outcomes: dict[int, LinterOutcome] = {}
        for unit in units:
            outcome = self.run_linter(unit)
            outcomes[unit.order] = outcome
            self._notify_after(outcome)
        return outcomes

    def _execute_in_parallel(self, units: Sequence[ScheduledLinter]) -> dict[int, LinterOutcome]:
        outcomes: dict[int, LinterOutcome] = {}
        workers = min(self.jobs, len(units))
        LOGGER.debug("Running %d linter(s) with %d worker(s)", len(units), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lintrun") as executor:
            future_map = {executor.submit(self.run_linter, unit): unit for unit in units}
            for future in as_completed(future_map):
                unit = future_map[future]
                outcome = future.result()
                outcomes[unit.order] = outcome
                self._notify_after(outcome)
        return outcomes

    def _notify_after(self, outcome: LinterOutcome) -> None:
        if self.hooks.after_linter:
            self.hooks.after_linter(outcome)

    def run_linter(self, unit: ScheduledLinter) -> LinterOutcome:
        """Run ``unit``, turning any unexpected error into a :class:`ProcessFailure`."""

        try:
            return self._run_linter(unit)
        except Exception as exc:  # noqa: BLE001 - a crashing linter never aborts its siblings
            LOGGER.debug("Unexpected error running %s", unit.spec.name, exc_info=True)
            return ProcessFailure(linter=unit.spec.name, exit_code=None, stderr=repr(exc))

    def _run_linter(self, unit: ScheduledLinter) -> LinterOutcome:
        """Execute one linter and classify its result.

        A process that exits non-zero without a single well-formed record is a
        :class:`ProcessFailure`; any valid record means the tool completed and
        its findings are reported instead.

        Args:
            unit: Linter and input paths to run.

        Returns:
            LinterOutcome: Issues or a process failure, never both.
        """

        spec = unit.spec
        if self.hooks.before_linter:
            self.hooks.before_linter(spec.name)
        options = CommandOptions(cwd=self.root)
        try:
            if uses_paths_file(spec.command):
                with _paths_file(unit.paths) as paths_file:
                    cmd = build_command(spec.command, unit.paths, paths_file)
                    LOGGER.debug("Running %s: %s", spec.name, shlex.join(cmd))
                    completed = self.runner(cmd, options=options)
            else:
                cmd = build_command(spec.command, unit.paths, None)
                LOGGER.debug("Running %s: %s", spec.name, shlex.join(cmd))
                completed = self.runner(cmd, options=options)
        except OSError as exc:
            LOGGER.debug("Failed to start %s: %s", spec.name, exc)
            return ProcessFailure(linter=spec.name, exit_code=None, stderr=str(exc))

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        parsed = parse_output(
            spec.output,
            stdout,
            linter=spec.name,
            root=self.root,
            returncode=completed.returncode,
        )
        if completed.returncode != 0 and not parsed.has_valid_output:
            _log_failure(spec.name, cmd, completed)
            return ProcessFailure(
                linter=spec.name,
                exit_code=completed.returncode,
                stderr=stderr,
                context=tuple(issue.message for issue in parsed.errors),
            )
        LOGGER.debug(
            "%s finished with exit %d: %d issue(s), %d malformed record(s)",
            spec.name,
            completed.returncode,
            len(parsed.issues) - len(parsed.errors),
            len(parsed.errors),
        )
        return Issues(linter=spec.name, issues=tuple(parsed.issues))


def _log_failure(name: str, cmd: Sequence[str], completed: CompletedProcess[str]) -> None:
    """Emit a debug record describing a failed linter process."""

    details = [f"command: {shlex.join(cmd)}"]
    stderr_tail = _tail(completed.stderr)
    stdout_tail = _tail(completed.stdout)
    if stderr_tail:
        details.append(f"stderr: {stderr_tail}")
    if stdout_tail:
        details.append(f"stdout: {stdout_tail}")
    LOGGER.debug("%s failed (exit %d)\n  %s", name, completed.returncode, "\n  ".join(details))


def _tail(output: str | None) -> str | None:
    """Return the final non-blank line of ``output``, shortened to 160 columns."""

    lines = [line.strip() for line in (output or "").splitlines() if line.strip()]
    return shorten(lines[-1], width=160, placeholder="...") if lines else None


__all__ = [
    "ExecutionHooks",
    "LinterExecutor",
    "RunnerCallable",
    "build_command",
    "default_jobs",
    "uses_paths_file",
]
