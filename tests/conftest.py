# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from lintrun.runtime.console.manager import set_force_color


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Return a repository root holding a couple of source files."""

    root = tmp_path / "repo"
    (root / "pkg").mkdir(parents=True)
    (root / "pkg" / "a.py").write_text("import os\nx = 1\n", encoding="utf-8")
    (root / "pkg" / "b.py").write_text("y = 2\n", encoding="utf-8")
    (root / "README.md").write_text("# readme\n", encoding="utf-8")
    return root.resolve()


@pytest.fixture
def tools_dir(tmp_path: Path) -> Path:
    """Return a directory for linter scripts kept outside the repository."""

    directory = tmp_path / "tools"
    directory.mkdir()
    return directory


@pytest.fixture(autouse=True)
def _reset_force_color() -> Iterator[None]:
    yield
    set_force_color(False)
