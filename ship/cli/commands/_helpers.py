"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import Sequence

import typer

from ship.platform.arch import BuildTarget, parse_target


def parse_targets(values: Sequence[str], matrix: Sequence[BuildTarget]) -> tuple[BuildTarget, ...]:
    """Parse ``--target`` values; each must be declared in the matrix.

    An empty selection means the whole matrix.
    """
    if not values:
        return tuple(matrix)

    selected: list[BuildTarget] = []
    for value in values:
        target = parse_target(value)
        if target is None or target not in matrix:
            declared = ", ".join(str(t) for t in matrix)
            raise typer.BadParameter(
                f"{value!r} is not in the build matrix ({declared})",
                param_hint="--target",
            )
        if target not in selected:
            selected.append(target)
    return tuple(selected)


def parse_single_target(value: str, matrix: Sequence[BuildTarget]) -> BuildTarget:
    return parse_targets([value], matrix)[0]
