# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Annotated

import typer

from .. import __version__
from ..config import DEFAULT_CONFIG_NAME, load_config
from ..core.logging import configure_logging, fail, resolve_log_level
from ..discovery import GitRepository
from ..engine import EXIT_SETUP_ERROR, LintEngine, run_recorded
from ..ledger import RunLedger
from ..reporting import OutputFormat
from ..runtime.console.manager import detect_tty, get_console_manager, set_force_color
from .options import GlobalOptions, build_invocation, parse_names
from .typer_ext import GlobalOptionsGroup

app = typer.Typer(
    name="lintrun",
    help="Run configured linters over changed files and report their findings.",
    add_completion=False,
    no_args_is_help=False,
    cls=GlobalOptionsGroup,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lintrun {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity.")] = 0,
    config: Annotated[
        Path,
        typer.Option("--config", help="Path to the lintrun configuration file."),
    ] = Path(DEFAULT_CONFIG_NAME),
    apply_patches: Annotated[
        bool,
        typer.Option("--apply-patches", "-a", help="Apply suggested patches to the working tree."),
    ] = False,
    paths_cmd: Annotated[
        str | None,
        typer.Option("--paths-cmd", help="Shell command whose output lists the paths to lint."),
    ] = None,
    paths_from: Annotated[
        Path | None,
        typer.Option("--paths-from", help="File listing the paths to lint, one per line."),
    ] = None,
    revision: Annotated[
        str | None,
        typer.Option("--revision", "-r", help="Lint files changed since this revision."),
    ] = None,
    merge_base_with: Annotated[
        str | None,
        typer.Option("--merge-base-with", "-m", help="Lint files changed since the merge-base with this revision."),
    ] = None,
    skip: Annotated[str | None, typer.Option("--skip", help="Comma-separated linters to skip.")] = None,
    take: Annotated[str | None, typer.Option("--take", help="Comma-separated linters to run exclusively.")] = None,
    output: Annotated[
        OutputFormat,
        typer.Option("--output", case_sensitive=False, help="Output format for lint results."),
    ] = OutputFormat.DEFAULT,
    force_color: Annotated[
        bool,
        typer.Option("--force-color", help="Emit ANSI colours even when not writing to a terminal."),
    ] = False,
    data_path: Annotated[
        Path | None,
        typer.Option("--data-path", help="Directory holding run history and init state."),
    ] = None,
    tee_json: Annotated[
        Path | None,
        typer.Option("--tee-json", help="Also write json-formatted results to this file."),
    ] = None,
    all_files: Annotated[bool, typer.Option("--all-files", help="Lint every tracked file.")] = False,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", help="Maximum number of linters running at once."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Lint changed files with every configured linter."""

    del version
    options = GlobalOptions(
        verbose=verbose,
        config=config,
        apply_patches=apply_patches,
        paths_cmd=paths_cmd,
        paths_from=paths_from,
        revision=revision,
        merge_base_with=merge_base_with,
        skip=skip,
        take=take,
        output=output,
        force_color=force_color,
        data_path=data_path,
        tee_json=tee_json,
        all_files=all_files,
        jobs=jobs,
    )
    ctx.obj = options
    set_force_color(force_color)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=_lint(options, (), format_only=False))


@app.command("lint")
def lint_command(
    ctx: typer.Context,
    paths: Annotated[list[str] | None, typer.Argument(help="Paths to lint.")] = None,
) -> None:
    """Lint the selected files (the default command)."""

    raise typer.Exit(code=_lint(ctx.obj, paths or (), format_only=False))


@app.command("format")
def format_command(
    ctx: typer.Context,
    paths: Annotated[list[str] | None, typer.Argument(help="Paths to format.")] = None,
) -> None:
    """Run formatters only and apply their patches."""

    raise typer.Exit(code=_lint(ctx.obj, paths or (), format_only=True))


@app.command("init")
def init_command(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Print init commands' intent without recording the init state."),
    ] = False,
) -> None:
    """Run linter initialisation commands."""

    options: GlobalOptions = ctx.obj

    def action(engine: LintEngine) -> int:
        return engine.init(dry_run=dry_run, skip=parse_names(options.skip), take=parse_names(options.take))

    raise typer.Exit(code=_run(options, action, machine_output=False))


@app.command("rage")
def rage_command(
    ctx: typer.Context,
    invocation: Annotated[
        int,
        typer.Option("--invocation", "-i", min=0, help="How many runs back to report (0 is the latest)."),
    ] = 0,
) -> None:
    """Print diagnostics for a past invocation."""

    raise typer.Exit(code=_run(ctx.obj, lambda engine: engine.rage(invocation), machine_output=False))


def _lint(options: GlobalOptions, paths: Sequence[str], *, format_only: bool) -> int:
    show_progress = options.output is OutputFormat.DEFAULT and options.verbose == 0 and detect_tty()
    params = build_invocation(options, paths, format_only=format_only, show_progress=show_progress)
    return _run(
        options,
        lambda engine: engine.lint(params),
        machine_output=options.output is not OutputFormat.DEFAULT,
    )


def _run(
    options: GlobalOptions,
    action: Callable[[LintEngine], int],
    *,
    machine_output: bool,
) -> int:
    """Open the run history, build the engine, and run ``action`` inside a recorded run.

    Args:
        options: Global CLI options.
        action: Work to perform with the constructed engine.
        machine_output: ``True`` when stdout carries json or oneline output.

    Returns:
        int: Process exit code.
    """

    level = resolve_log_level(options.verbose, machine_output=machine_output)
    config_path = options.config.expanduser()
    if not config_path.is_file():
        configure_logging(level)
        fail(f"Could not read lintrun config at: '{config_path}'")
        return EXIT_SETUP_ERROR
    config_path = config_path.resolve()
    ledger = RunLedger.for_config(config_path, options.data_path)

    def configure(log_file: Path | None) -> None:
        configure_logging(level, log_file=log_file)

    def invoke() -> int:
        config = load_config(config_path)
        root = config_path.parent
        manager = get_console_manager()
        engine = LintEngine(
            config=config,
            root=root,
            scm=GitRepository(root),
            console=manager.get(color=True, emoji=False),
            ledger=ledger,
            progress_console=manager.get(color=True, emoji=False, stderr=True),
        )
        return action(engine)

    return run_recorded(ledger, sys.argv, invoke, on_started=configure)


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
