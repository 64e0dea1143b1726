# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Entry points tying path resolution, execution, patching, and reporting together."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console

from .config import LintConfig, compute_fingerprint
from .core.logging import fail, info, ok, warn
from .core.process import CommandOptions, run_command
from .discovery import (
    AgainstMergeBaseWith,
    AtHead,
    AutomaticDefault,
    PathResolver,
    PathSelector,
    RevisionSelector,
    SourceControl,
)
from .errors import InitError, LedgerError, LintrunError
from .ledger import RunLedger, check_staleness
from .models import DRYRUN_PLACEHOLDER, ExitInfo, LinterOutcome, LintIssue, RunInfo
from .orchestration import ExecutionHooks, LinterExecutor, default_jobs, plan_linters, select_linters
from .orchestration.executor import RunnerCallable
from .orchestration.selection import ScheduledLinter
from .patching import apply_patches
from .reporting import OutputFormat, aggregate, exit_code_for, format_rage_report, render, write_tee
from .reporting.progress import LinterProgress

LOGGER = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_SETUP_ERROR = 2


@dataclass(frozen=True, slots=True)
class InvocationParams:
    """Resolved parameters for one lint or format invocation."""

    path_selector: PathSelector = field(default_factory=AutomaticDefault)
    revision: RevisionSelector | None = None
    skip: frozenset[str] | None = None
    take: frozenset[str] | None = None
    apply_patches: bool = False
    output: OutputFormat = OutputFormat.DEFAULT
    tee_json: Path | None = None
    format_only: bool = False
    jobs: int | None = None
    verbosity: int = 0
    show_progress: bool = False


def effective_revision(revision: RevisionSelector | None, config: LintConfig) -> RevisionSelector:
    """Return ``revision``, falling back to the configured merge-base target or ``HEAD``."""

    if revision is not None:
        return revision
    if config.merge_base_with:
        return AgainstMergeBaseWith(config.merge_base_with)
    return AtHead()


@dataclass(slots=True)
class LintEngine:
    """Run lint, format, init, and rage requests against one configuration.

    Attributes:
        config: Validated linter configuration.
        root: Repository root; globs and relative paths are anchored here.
        scm: Source-control collaborator used for revision diffs.
        console: Console receiving the rendered issue stream.
        ledger: Optional run history used for staleness checks and ``rage``.
        runner: Callable used to spawn linter and init processes.
        cwd: Directory explicit relative paths are resolved against.
        progress_console: Console for spinners; ``None`` disables them.
    """

    config: LintConfig
    root: Path
    scm: SourceControl
    console: Console
    ledger: RunLedger | None = None
    runner: RunnerCallable = run_command
    cwd: Path | None = None
    progress_console: Console | None = None

    def lint(self, params: InvocationParams) -> int:
        """Lint the selected files and return the process exit code.

        Args:
            params: Resolved invocation parameters.

        Returns:
            int: ``1`` when any error issue or process failure occurred, else ``0``.

        Raises:
            PathSourceError: If the path list cannot be produced.
            RevisionResolutionError: If the revision diff cannot be computed.
        """

        self._warn_if_stale()
        candidates = self.config.formatters if params.format_only else self.config.linters
        resolver = PathResolver(self.root, self.scm, cwd=self.cwd)
        paths = resolver.resolve(params.path_selector, effective_revision(params.revision, self.config))
        if params.verbosity >= 2:
            for path in paths:
                LOGGER.debug("Target path: %s", path)
        units = plan_linters(candidates, paths, self.root, skip=params.skip, take=params.take)
        LOGGER.debug("Scheduled %d of %d linter(s)", len(units), len(candidates))

        outcomes = self._execute(units, params)
        issues = aggregate(outcomes)
        render(
            issues,
            params.output,
            root=self.root,
            console=self.console,
            suggest_patches=not params.apply_patches,
        )
        if params.tee_json is not None:
            try:
                write_tee(issues, params.tee_json)
            except OSError as exc:
                raise LintrunError(f"Failed to write json output to '{params.tee_json}': {exc}") from exc

        exit_code = exit_code_for(outcomes)
        if params.apply_patches and not self._apply(issues, params):
            exit_code = EXIT_FAILURE
        return exit_code

    def init(
        self,
        *,
        dry_run: bool = False,
        skip: Iterable[str] | None = None,
        take: Iterable[str] | None = None,
    ) -> int:
        """Run every selected linter's init command and record the fingerprint.

        Args:
            dry_run: Substitute ``1`` for the dry-run placeholder and skip recording.
            skip: Optional linter names to leave out.
            take: Optional linter names to run exclusively.

        Returns:
            int: ``0`` once every init command succeeded.

        Raises:
            InitError: If an init command cannot start or exits non-zero.
        """

        flag = "1" if dry_run else "0"
        options = CommandOptions(cwd=self.root)
        for spec in select_linters(self.config.linters, skip=skip, take=take):
            if not spec.init_command:
                continue
            cmd = [arg.replace(DRYRUN_PLACEHOLDER, flag) for arg in spec.init_command]
            info(f"Initializing linter: '{spec.name}'")
            try:
                completed = self.runner(cmd, options=options)
            except OSError as exc:
                raise InitError(f"Failed to start init command for '{spec.name}': {exc}") from exc
            if completed.stdout:
                LOGGER.debug("%s init stdout:\n%s", spec.name, completed.stdout.rstrip())
            if completed.returncode != 0:
                detail = (completed.stderr or "").strip() or "<no stderr>"
                raise InitError(
                    f"Init command for '{spec.name}' exited with status {completed.returncode}: {detail}",
                )
        if dry_run:
            ok("Dry run complete; init fingerprint left unchanged.")
            return EXIT_SUCCESS
        if self.ledger is not None:
            self.ledger.write_fingerprint(compute_fingerprint(self.config.linters))
        ok("Successfully initialized linters.")
        return EXIT_SUCCESS

    def rage(self, index: int = 0) -> int:
        """Print the ledger entry ``index`` runs back together with its log.

        The run recording this ``rage`` call is skipped, so ``0`` is the
        invocation before it.

        Raises:
            LedgerError: If no ledger is configured or the entry cannot be read.
            NoSuchInvocation: If ``index`` exceeds the retained history.
        """

        if self.ledger is None:
            raise LedgerError("No run history is available")
        entry = self.ledger.get(index, skip_current=True)
        log = self.ledger.log_for(index, skip_current=True)
        self.console.out(format_rage_report(entry, log), end="", highlight=False)
        return EXIT_SUCCESS

    def _warn_if_stale(self) -> None:
        if self.ledger is None:
            return
        try:
            warning = check_staleness(self.ledger, compute_fingerprint(self.config.linters))
        except LedgerError as exc:
            LOGGER.warning("Skipping staleness check: %s", exc)
            return
        if warning is not None:
            warn(str(warning))

    def _execute(self, units: Sequence[ScheduledLinter], params: InvocationParams) -> list[LinterOutcome]:
        hooks = ExecutionHooks()
        progress: LinterProgress | None = None
        if params.show_progress and units and self.progress_console is not None:
            progress = LinterProgress(console=self.progress_console, color=self.progress_console.is_terminal)
            progress.install(hooks)
            progress.start([unit.spec.name for unit in units])
        executor = LinterExecutor(
            root=self.root,
            jobs=params.jobs if params.jobs is not None else default_jobs(),
            runner=self.runner,
            hooks=hooks,
        )
        try:
            return executor.execute(units)
        finally:
            if progress is not None:
                progress.stop()

    def _apply(self, issues: Sequence[LintIssue], params: InvocationParams) -> bool:
        report = apply_patches(issues)
        for warning in report.warnings:
            warn(str(warning))
        for path, reason in report.failed.items():
            fail(f"Failed to apply patch to {path}: {reason}")
        if report.applied and report.clean and params.output is OutputFormat.DEFAULT:
            ok("Successfully applied all patches.")
        return not report.failed


def timestamp_now() -> str:
    """Return the current UTC time in ISO-8601 form."""

    return datetime.now(UTC).isoformat(timespec="seconds")


def run_recorded(
    ledger: RunLedger | None,
    args: Sequence[str],
    action: Callable[[], int],
    *,
    on_started: Callable[[Path | None], None] | None = None,
) -> int:
    """Run ``action`` bracketed by ledger start and finalize records.

    Ledger failures are logged and never block ``action``. Fatal
    :class:`LintrunError` conditions are printed and mapped to exit code ``1``.

    Args:
        ledger: Run history to record into, if any.
        args: Command-line arguments of the invocation.
        action: Callable performing the work and returning an exit code.
        on_started: Called with the run's log path once the entry exists.

    Returns:
        int: Exit code of the invocation.
    """

    started = False
    if ledger is not None:
        try:
            ledger.begin(RunInfo(args=tuple(args), timestamp=timestamp_now()))
            started = True
        except LedgerError as exc:
            LOGGER.warning("Run history unavailable: %s", exc)
    if on_started is not None:
        on_started(ledger.current_log_path if started and ledger is not None else None)

    error: str | None = None
    try:
        code = action()
    except LintrunError as exc:
        fail(str(exc))
        code, error = EXIT_FAILURE, str(exc)
    except Exception as exc:
        _finalize(ledger if started else None, ExitInfo(code=EXIT_FAILURE, err=repr(exc)))
        raise
    _finalize(ledger if started else None, ExitInfo(code=code, err=error))
    return code


def _finalize(ledger: RunLedger | None, exit_info: ExitInfo) -> None:
    if ledger is None:
        return
    try:
        ledger.finalize(exit_info)
    except LedgerError as exc:
        LOGGER.warning("Failed to record run result: %s", exc)


__all__ = [
    "EXIT_FAILURE",
    "EXIT_SETUP_ERROR",
    "EXIT_SUCCESS",
    "InvocationParams",
    "LintEngine",
    "effective_revision",
    "run_recorded",
    "timestamp_now",
]
