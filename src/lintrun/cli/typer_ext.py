# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typer extensions letting global options and bare paths appear anywhere."""

from __future__ import annotations

from collections.abc import Sequence
from typing import ClassVar

import click
from typer.core import TyperGroup

DEFAULT_COMMAND = "lint"


def hoist_group_options(params: Sequence[click.Parameter], args: Sequence[str]) -> list[str]:
    """Move options declared on the group in front of the subcommand.

    ``lintrun lint --all-files`` becomes ``lintrun --all-files lint`` before
    click parses it. Values of value-taking options travel with them, both as
    ``--opt value`` and ``--opt=value``. Stacked short flags such as
    ``-vv`` move as a unit. Everything after ``--`` stays put.

    Args:
        params: Parameters declared on the group callback.
        args: Raw command-line arguments.

    Returns:
        list[str]: Group options first, then the remaining arguments in order.
    """

    takes_value: dict[str, bool] = {}
    for param in params:
        if isinstance(param, click.Option):
            for name in (*param.opts, *param.secondary_opts):
                takes_value[name] = not (param.is_flag or param.count)

    hoisted: list[str] = []
    remaining: list[str] = []
    index = 0
    while index < len(args):
        token = args[index]
        if token == "--":
            remaining.extend(args[index:])
            break
        name = token.split("=", 1)[0] if token.startswith("--") else token
        if _is_flag_cluster(token, takes_value):
            hoisted.append(token)
        elif name not in takes_value:
            remaining.append(token)
        else:
            hoisted.append(token)
            if takes_value[name] and name == token and index + 1 < len(args):
                index += 1
                hoisted.append(args[index])
        index += 1
    return hoisted + remaining


def _is_flag_cluster(token: str, takes_value: dict[str, bool]) -> bool:
    """Return ``True`` for stacked short group flags such as ``-vv`` or ``-av``."""

    if len(token) < 3 or not token.startswith("-") or token.startswith("--"):
        return False
    return all(takes_value.get(f"-{char}") is False for char in token[1:])


class GlobalOptionsGroup(TyperGroup):
    """Group accepting its options after the subcommand and paths in place of one.

    An unrecognised first word that is not an option is taken as the first
    path for :data:`DEFAULT_COMMAND`, so ``lintrun pkg/a.py`` lints ``pkg/a.py``.
    """

    default_command: ClassVar[str] = DEFAULT_COMMAND

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        """Parse ``args`` after hoisting group options in front of the subcommand."""

        return super().parse_args(ctx, hoist_group_options(self.params, args))

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        """Resolve the subcommand, routing unknown words to the default command."""

        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            fallback = self.get_command(ctx, self.default_command)
            if fallback is not None:
                return self.default_command, fallback, list(args)
        return super().resolve_command(ctx, args)


__all__ = ["DEFAULT_COMMAND", "GlobalOptionsGroup", "hoist_group_options"]
