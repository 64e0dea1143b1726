# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File-backed history of invocations and the last-init fingerprint."""

from __future__ import annotations

import hashlib
import logging
import os
import re
import sys
from pathlib import Path
from typing import Final

from pydantic import ValidationError

from .errors import LedgerError, NoSuchInvocation, StalenessWarning
from .filesystem import write_atomic
from .models import ExitInfo, LedgerEntry, RunInfo

LOGGER = logging.getLogger(__name__)

APP_DIR_NAME: Final[str] = "lintrun"
MAX_RUNS_TO_STORE: Final[int] = 10
RUNS_DIR_NAME: Final[str] = "runs"
LAST_INIT_FILE: Final[str] = "last_init"
_RUN_FILE = re.compile(r"^run-(?P<seq>\d+)\.json$")


def default_data_dir() -> Path:
    """Return the platform application-data directory for lintrun.

    Returns:
        Path: ``$XDG_DATA_HOME/lintrun`` when set, otherwise the platform default.
    """

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        return (Path(appdata) if appdata else home / "AppData" / "Roaming") / APP_DIR_NAME
    return home / ".local" / "share" / APP_DIR_NAME


def config_key(config_path: Path) -> str:
    """Return the directory name used to keep one config's history apart."""

    absolute = config_path.expanduser().resolve()
    return hashlib.sha256(str(absolute).encode("utf-8")).hexdigest()


class RunLedger:
    """Bounded, append-only record of invocations for one configuration.

    Entries live in ``runs/run-<seq>.json`` beside an optional ``.log`` of the
    same run. Index ``0`` is always the most recent entry. The ledger is safe
    for one invocation at a time; concurrent invocations sharing a directory
    may interleave.
    """

    def __init__(self, directory: Path, *, retention: int = MAX_RUNS_TO_STORE) -> None:
        """Initialise the ledger rooted at ``directory``.

        Args:
            directory: Directory holding the run history and fingerprint.
            retention: Number of runs kept before the oldest are evicted.
        """

        if retention < 1:
            raise ValueError("retention must be at least 1")
        self._dir = directory
        self._retention = retention
        self._current: Path | None = None

    @classmethod
    def for_config(cls, config_path: Path, data_path: Path | None = None) -> RunLedger:
        """Return the ledger that belongs to ``config_path``."""

        base = data_path if data_path is not None else default_data_dir()
        return cls(base / config_key(config_path))

    @property
    def directory(self) -> Path:
        """Return the directory holding this configuration's history."""

        return self._dir

    @property
    def runs_dir(self) -> Path:
        """Return the directory holding run records and their logs."""

        return self._dir / RUNS_DIR_NAME

    @property
    def current_log_path(self) -> Path | None:
        """Return the log file of the run started by :meth:`begin`, if any."""

        if self._current is None:
            return None
        return self._current.with_suffix(".log")

    def begin(self, run: RunInfo) -> LedgerEntry:
        """Append an unfinished entry for ``run`` and evict old history.

        Args:
            run: Arguments and timestamp of the starting invocation.

        Returns:
            LedgerEntry: The entry as written.

        Raises:
            LedgerError: If the entry cannot be written.
        """

        entry = LedgerEntry(run=run)
        try:
            self.runs_dir.mkdir(parents=True, exist_ok=True)
            existing = self._run_files()
            seq = existing[0][0] + 1 if existing else 1
            path = self.runs_dir / f"run-{seq:08d}.json"
            write_atomic(path, entry.model_dump_json(indent=2) + "\n")
        except OSError as exc:
            raise LedgerError(f"Failed to record run in {self.runs_dir}: {exc}") from exc
        self._current = path
        self._evict()
        LOGGER.debug("Recorded run %s", path.name)
        return entry

    def finalize(self, exit_info: ExitInfo) -> LedgerEntry:
        """Attach ``exit_info`` to the entry written by :meth:`begin`.

        Raises:
            LedgerError: If no run was started or the entry cannot be rewritten.
        """

        if self._current is None:
            raise LedgerError("Cannot finalize a run that was never started")
        entry = self._read_entry(self._current).model_copy(update={"exit": exit_info})
        try:
            write_atomic(self._current, entry.model_dump_json(indent=2) + "\n")
        except OSError as exc:
            raise LedgerError(f"Failed to finalize run {self._current.name}: {exc}") from exc
        return entry

    def entries(self) -> list[LedgerEntry]:
        """Return retained entries, most recent first."""

        return [self._read_entry(path) for _, path in self._run_files()]

    def get(self, index: int, *, skip_current: bool = False) -> LedgerEntry:
        """Return the entry ``index`` runs back (``0`` is the latest).

        Args:
            index: Recency index into the retained history.
            skip_current: Leave out the run started by :meth:`begin` on this ledger,
                so ``0`` names the invocation before it.

        Raises:
            NoSuchInvocation: If ``index`` is outside the retained history.
        """

        files = self._run_files(skip_current=skip_current)
        if index < 0 or index >= len(files):
            raise NoSuchInvocation(index, len(files))
        return self._read_entry(files[index][1])

    def log_for(self, index: int, *, skip_current: bool = False) -> str | None:
        """Return the captured log of run ``index``, or ``None`` when absent.

        ``skip_current`` has the same meaning as in :meth:`get`.
        """

        files = self._run_files(skip_current=skip_current)
        if index < 0 or index >= len(files):
            raise NoSuchInvocation(index, len(files))
        log_path = files[index][1].with_suffix(".log")
        try:
            return log_path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise LedgerError(f"Failed to read {log_path}: {exc}") from exc

    def read_fingerprint(self) -> str | None:
        """Return the fingerprint recorded by the last successful init."""

        path = self._dir / LAST_INIT_FILE
        try:
            value = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise LedgerError(f"Failed to read {path}: {exc}") from exc
        return value or None

    def write_fingerprint(self, fingerprint: str) -> None:
        """Record ``fingerprint`` as the configuration last initialised."""

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            write_atomic(self._dir / LAST_INIT_FILE, fingerprint + "\n")
        except OSError as exc:
            raise LedgerError(f"Failed to record init fingerprint in {self._dir}: {exc}") from exc

    def _run_files(self, *, skip_current: bool = False) -> list[tuple[int, Path]]:
        """Return ``(seq, path)`` pairs for retained runs, newest first."""

        try:
            children = list(self.runs_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise LedgerError(f"Failed to list {self.runs_dir}: {exc}") from exc
        found: list[tuple[int, Path]] = []
        for child in children:
            match = _RUN_FILE.match(child.name)
            if match is not None and not (skip_current and child == self._current):
                found.append((int(match.group("seq")), child))
        found.sort(key=lambda item: item[0], reverse=True)
        return found

    def _read_entry(self, path: Path) -> LedgerEntry:
        try:
            return LedgerEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise LedgerError(f"Failed to read {path}: {exc}") from exc
        except ValidationError as exc:
            raise LedgerError(f"Corrupt run record {path}: {exc}") from exc

    def _evict(self) -> None:
        for _, path in self._run_files()[self._retention :]:
            LOGGER.debug("Evicting old run %s", path.name)
            try:
                path.unlink(missing_ok=True)
                path.with_suffix(".log").unlink(missing_ok=True)
            except OSError as exc:
                LOGGER.warning("Failed to evict %s: %s", path, exc)


def check_staleness(ledger: RunLedger, fingerprint: str) -> StalenessWarning | None:
    """Compare ``fingerprint`` with the one stored at the last init.

    Args:
        ledger: Store holding the recorded fingerprint.
        fingerprint: Fingerprint of the configuration in effect now.

    Returns:
        StalenessWarning | None: A warning when the configuration drifted or
        was never initialised, else ``None``.

    Raises:
        LedgerError: If the stored fingerprint cannot be read.
    """

    stored = ledger.read_fingerprint()
    if stored is None:
        return StalenessWarning(
            "No previous init data found. If this is the first time you're running lintrun, "
            "you should run `lintrun init`.",
        )
    if stored != fingerprint:
        return StalenessWarning(
            "The linter configuration has changed since the last `lintrun init`. "
            "You may want to run `lintrun init` again.",
        )
    return None


__all__ = [
    "MAX_RUNS_TO_STORE",
    "RunLedger",
    "check_staleness",
    "config_key",
    "default_data_dir",
]
