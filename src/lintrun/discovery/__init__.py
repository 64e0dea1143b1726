# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File discovery: source-control access and path selection."""

from __future__ import annotations

from .git import GitRepository, SourceControl
from .paths import (
    AgainstMergeBaseWith,
    AgainstRevision,
    AllFiles,
    AtHead,
    AutomaticDefault,
    ExplicitList,
    FromFile,
    FromShellCommand,
    PathResolver,
    PathSelector,
    RevisionSelector,
    TargetPathSet,
)

__all__ = [
    "AgainstMergeBaseWith",
    "AgainstRevision",
    "AllFiles",
    "AtHead",
    "AutomaticDefault",
    "ExplicitList",
    "FromFile",
    "FromShellCommand",
    "GitRepository",
    "PathResolver",
    "PathSelector",
    "RevisionSelector",
    "SourceControl",
    "TargetPathSet",
]
