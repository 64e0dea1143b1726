# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Apply suggested full-file replacements carried by lint issues."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .errors import PatchConflictWarning, StalePatchWarning
from .filesystem import read_text_exact, write_atomic
from .models import LintIssue

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PatchPlan:
    """The replacement chosen for one file."""

    path: Path
    linter: str
    replacement: str
    original: str | None = None


@dataclass(slots=True)
class PatchReport:
    """Summary of a patch application pass."""

    applied: list[Path] = field(default_factory=list)
    warnings: list[PatchConflictWarning | StalePatchWarning] = field(default_factory=list)
    failed: dict[Path, str] = field(default_factory=dict)

    @property
    def clean(self) -> bool:
        """Return ``True`` when every patch applied without warnings or failures."""
        return not self.warnings and not self.failed


def plan_patches(issues: Iterable[LintIssue]) -> tuple[list[PatchPlan], list[PatchConflictWarning]]:
    """Choose one replacement per file from the merged issue stream.

    The first suggestion seen for a file wins. Later suggestions with different
    content produce a :class:`PatchConflictWarning`; identical ones are merged
    silently.

    Args:
        issues: Issues in the deterministic aggregation order.

    Returns:
        tuple[list[PatchPlan], list[PatchConflictWarning]]: Plans in first-seen
        file order, plus conflicts.
    """

    plans: dict[Path, PatchPlan] = {}
    conflicts: list[PatchConflictWarning] = []
    reported: set[tuple[Path, str, str]] = set()
    for issue in issues:
        if issue.path is None or issue.replacement is None:
            continue
        current = plans.get(issue.path)
        if current is None:
            plans[issue.path] = PatchPlan(
                path=issue.path,
                linter=issue.linter,
                replacement=issue.replacement,
                original=issue.original,
            )
            continue
        if current.replacement == issue.replacement:
            continue
        key = (issue.path, issue.linter, issue.replacement)
        if key in reported:
            continue
        reported.add(key)
        conflicts.append(PatchConflictWarning(issue.path, kept=current.linter, discarded=issue.linter))
    return list(plans.values()), conflicts


def apply_patches(issues: Iterable[LintIssue]) -> PatchReport:
    """Write every suggested replacement, one file at a time.

    Args:
        issues: Merged issue stream in aggregation order.

    Returns:
        PatchReport: Files written plus conflicts, stale suggestions, and write failures.
    """

    plans, conflicts = plan_patches(issues)
    report = PatchReport(warnings=list(conflicts))
    for plan in plans:
        try:
            if plan.original is not None and read_text_exact(plan.path) != plan.original:
                report.warnings.append(StalePatchWarning(plan.path, plan.linter))
                continue
            write_atomic(plan.path, plan.replacement)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.error("Failed to apply patch from %s to %s: %s", plan.linter, plan.path, exc)
            report.failed[plan.path] = str(exc)
            continue
        LOGGER.debug("Applied patch from %s to %s", plan.linter, plan.path)
        report.applied.append(plan.path)
    return report


__all__ = [
    "PatchPlan",
    "PatchReport",
    "apply_patches",
    "plan_patches",
]
