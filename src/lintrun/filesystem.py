# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers for reading and replacing files without partial writes."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path


def read_text_exact(path: Path) -> str:
    """Return the contents of ``path`` without newline translation."""

    with path.open(encoding="utf-8", newline="") as handle:
        return handle.read()


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` so readers never see a partial file.

    The content goes to a temporary file in the same directory, inherits the
    original file's permissions, and is renamed over the original.

    Args:
        path: File to replace or create.
        content: New file contents.
    """

    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(handle.name)
    try:
        with handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


__all__ = ["read_text_exact", "write_atomic"]
