# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Linter filtering: skip/take selection and per-linter path matching."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from ..models import LinterSpec

LOGGER = logging.getLogger(__name__)

_GLOBSTAR_DIR = "**/"
_GLOBSTAR = "**"


@lru_cache(maxsize=512)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a path glob into an anchored regular expression.

    ``**/`` matches zero or more leading directories, a trailing ``**`` matches
    everything below a directory, and ``*``/``?`` never cross a ``/``.

    Args:
        pattern: Glob written relative to the repository root.

    Returns:
        re.Pattern[str]: Compiled expression matching root-relative POSIX paths.
    """

    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        if pattern.startswith(_GLOBSTAR_DIR, index):
            parts.append("(?:.*/)?")
            index += len(_GLOBSTAR_DIR)
        elif pattern.startswith(_GLOBSTAR, index):
            parts.append(".*")
            index += len(_GLOBSTAR)
        else:
            char = pattern[index]
            index += 1
            if char == "*":
                parts.append("[^/]*")
            elif char == "?":
                parts.append("[^/]")
            elif char == "[":
                end = pattern.find("]", index + 1)
                if end == -1:
                    parts.append(re.escape(char))
                else:
                    body = pattern[index:end]
                    if body.startswith("!"):
                        body = "^" + body[1:]
                    parts.append(f"[{body}]")
                    index = end + 1
            else:
                parts.append(re.escape(char))
    return re.compile("".join(parts) + r"\Z")


def matches_any(relative: str, patterns: Iterable[str]) -> bool:
    """Return ``True`` when ``relative`` matches at least one glob in ``patterns``."""

    return any(compile_glob(pattern).match(relative) for pattern in patterns)


def filter_paths_for_linter(spec: LinterSpec, paths: Sequence[Path], root: Path) -> tuple[Path, ...]:
    """Return the subset of ``paths`` the linter should receive.

    A path is kept when it matches at least one include glob (or the linter
    declares none) and matches no exclude glob.

    Args:
        spec: Linter whose include/exclude rules apply.
        paths: Target path set for the run.
        root: Repository root globs are relative to.

    Returns:
        tuple[Path, ...]: Filtered paths in their original order.
    """

    selected: list[Path] = []
    for path in paths:
        try:
            relative = path.relative_to(root).as_posix()
        except ValueError:
            continue
        if spec.include_patterns and not matches_any(relative, spec.include_patterns):
            continue
        if matches_any(relative, spec.exclude_patterns):
            continue
        selected.append(path)
    return tuple(selected)


def select_linters(
    linters: Sequence[LinterSpec],
    *,
    skip: Iterable[str] | None = None,
    take: Iterable[str] | None = None,
) -> list[LinterSpec]:
    """Apply skip/take filters to ``linters`` preserving registration order.

    Skip is applied first and take narrows the remainder. Unknown names are
    ignored, with a debug message.

    Args:
        linters: Candidate linter specs.
        skip: Optional names to remove.
        take: Optional names to keep exclusively.

    Returns:
        list[LinterSpec]: Active linters in registration order.
    """

    known = {spec.name for spec in linters}
    skip_set = set(skip) if skip is not None else None
    take_set = set(take) if take is not None else None
    for label, names in (("skip", skip_set), ("take", take_set)):
        for unknown in sorted((names or set()) - known):
            LOGGER.debug("Ignoring unknown linter '%s' passed to --%s", unknown, label)
    active = [spec for spec in linters if skip_set is None or spec.name not in skip_set]
    if take_set is not None:
        active = [spec for spec in active if spec.name in take_set]
    return active


@dataclass(frozen=True, slots=True)
class ScheduledLinter:
    """A linter paired with the input paths it will receive."""

    order: int
    spec: LinterSpec
    paths: tuple[Path, ...]


def plan_linters(
    linters: Sequence[LinterSpec],
    paths: Sequence[Path],
    root: Path,
    *,
    skip: Iterable[str] | None = None,
    take: Iterable[str] | None = None,
) -> list[ScheduledLinter]:
    """Return the ``(spec, input paths)`` units to execute for this run.

    Linters whose filtered input set is empty are not scheduled.

    Args:
        linters: Candidate linter specs in registration order.
        paths: Target path set for the run.
        root: Repository root.
        skip: Optional names to remove.
        take: Optional names to keep exclusively.

    Returns:
        list[ScheduledLinter]: Units to execute, ordered by registration.
    """

    scheduled: list[ScheduledLinter] = []
    for spec in select_linters(linters, skip=skip, take=take):
        inputs = filter_paths_for_linter(spec, paths, root)
        if not inputs:
            LOGGER.debug("Skipping %s: no matching paths", spec.name)
            continue
        scheduled.append(ScheduledLinter(order=len(scheduled), spec=spec, paths=inputs))
    return scheduled


__all__ = [
    "ScheduledLinter",
    "compile_glob",
    "filter_paths_for_linter",
    "matches_any",
    "plan_linters",
    "select_linters",
]
