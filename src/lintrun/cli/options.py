# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Structured CLI options and their translation into engine parameters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import typer

from ..config import DEFAULT_CONFIG_NAME
from ..discovery import (
    AgainstMergeBaseWith,
    AgainstRevision,
    AllFiles,
    AutomaticDefault,
    ExplicitList,
    FromFile,
    FromShellCommand,
    PathSelector,
    RevisionSelector,
)
from ..engine import InvocationParams
from ..reporting import OutputFormat


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Options shared by every subcommand."""

    verbose: int = 0
    config: Path = Path(DEFAULT_CONFIG_NAME)
    apply_patches: bool = False
    paths_cmd: str | None = None
    paths_from: Path | None = None
    revision: str | None = None
    merge_base_with: str | None = None
    skip: str | None = None
    take: str | None = None
    output: OutputFormat = OutputFormat.DEFAULT
    force_color: bool = False
    data_path: Path | None = None
    tee_json: Path | None = None
    all_files: bool = False
    jobs: int | None = None


def parse_names(raw: str | None) -> frozenset[str] | None:
    """Split a comma-separated linter list, ignoring blanks."""

    if raw is None:
        return None
    return frozenset(name.strip() for name in raw.split(",") if name.strip())


def build_path_selector(options: GlobalOptions, paths: Sequence[str]) -> PathSelector:
    """Return the path selector implied by the CLI flags.

    Raises:
        typer.BadParameter: If more than one path source was given.
    """

    sources: list[tuple[str, PathSelector]] = []
    if options.paths_from is not None:
        sources.append(("--paths-from", FromFile(options.paths_from)))
    if options.paths_cmd is not None:
        sources.append(("--paths-cmd", FromShellCommand(options.paths_cmd)))
    if paths:
        sources.append(("PATHS", ExplicitList(tuple(paths))))
    if options.all_files:
        sources.append(("--all-files", AllFiles()))
    if len(sources) > 1:
        names = ", ".join(name for name, _ in sources)
        raise typer.BadParameter(f"{names} are mutually exclusive")
    return sources[0][1] if sources else AutomaticDefault()


def build_revision_selector(options: GlobalOptions, selector: PathSelector) -> RevisionSelector | None:
    """Return the revision selector implied by the CLI flags, if any.

    ``None`` lets the engine fall back to the configured ``merge_base_with``.

    Raises:
        typer.BadParameter: If revision flags conflict with each other or with
            an explicit path source.
    """

    if options.revision is not None and options.merge_base_with is not None:
        raise typer.BadParameter("--revision and --merge-base-with are mutually exclusive")
    requested = options.revision is not None or options.merge_base_with is not None
    if requested and not isinstance(selector, AutomaticDefault):
        raise typer.BadParameter("--revision/--merge-base-with cannot be combined with an explicit path source")
    if options.revision is not None:
        return AgainstRevision(options.revision)
    if options.merge_base_with is not None:
        return AgainstMergeBaseWith(options.merge_base_with)
    return None


def build_invocation(
    options: GlobalOptions,
    paths: Sequence[str],
    *,
    format_only: bool,
    show_progress: bool,
) -> InvocationParams:
    """Translate CLI options into engine :class:`InvocationParams`."""

    if options.jobs is not None and options.jobs < 1:
        raise typer.BadParameter("--jobs must be at least 1")
    selector = build_path_selector(options, paths)
    return InvocationParams(
        path_selector=selector,
        revision=build_revision_selector(options, selector),
        skip=parse_names(options.skip),
        take=parse_names(options.take),
        apply_patches=options.apply_patches or format_only,
        output=options.output,
        tee_json=options.tee_json,
        format_only=format_only,
        jobs=options.jobs,
        verbosity=options.verbose,
        show_progress=show_progress,
    )


__all__ = [
    "GlobalOptions",
    "build_invocation",
    "build_path_selector",
    "build_revision_selector",
    "parse_names",
]
