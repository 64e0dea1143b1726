# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Loading and validation of ``.lintrun.toml`` configuration files."""

from __future__ import annotations

import hashlib
import json
import tomllib
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .errors import ConfigError
from .models import LinterSpec

DEFAULT_CONFIG_NAME: Final[str] = ".lintrun.toml"


class LintConfig(BaseModel):
    """Validated linter configuration for one repository."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    linters: tuple[LinterSpec, ...] = Field(default_factory=tuple, alias="linter")
    merge_base_with: str | None = None

    @model_validator(mode="after")
    def _reject_duplicates(self) -> LintConfig:
        seen: set[str] = set()
        for spec in self.linters:
            if spec.name in seen:
                raise ValueError(f"linter code '{spec.name}' is defined more than once")
            seen.add(spec.name)
        return self

    @property
    def formatters(self) -> tuple[LinterSpec, ...]:
        """Return the linters flagged as formatters, in registration order."""
        return tuple(spec for spec in self.linters if spec.is_formatter)


def load_config(path: Path) -> LintConfig:
    """Read and validate the configuration stored at ``path``.

    Args:
        path: Location of the TOML configuration file.

    Returns:
        LintConfig: Validated configuration.

    Raises:
        ConfigError: If the file is unreadable, is not valid TOML, or fails validation.
    """

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Could not read lintrun config at '{path}': {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Config at '{path}' is not valid TOML: {exc}") from exc
    try:
        config = LintConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid lintrun config at '{path}':\n{exc}") from exc
    if config.merge_base_with is not None and not config.merge_base_with.strip():
        config = config.model_copy(update={"merge_base_with": None})
    return config


def compute_fingerprint(linters: Sequence[LinterSpec]) -> str:
    """Return a deterministic hash summarising the effective linter configuration.

    Args:
        linters: Linter specs whose declarations should be fingerprinted.

    Returns:
        str: Hex-encoded SHA-256 digest.
    """

    payload = [spec.fingerprint_payload() for spec in linters]
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


__all__ = ["DEFAULT_CONFIG_NAME", "LintConfig", "compute_fingerprint", "load_config"]
