from __future__ import annotations

import json

import typer

from ship.cli.context import build_context
from ship.output.console import Style
from ship.platform.arch import machine_arch_for


def matrix(
    json_output: bool = typer.Option(
        False, "--json", help="Emit JSON for a CI job matrix (fromJSON)."
    ),
) -> None:
    """List the build matrix."""
    ctx = build_context()
    rows = [
        {
            "target": str(target),
            "machine": str(machine_arch_for(target)),
            "platform": target.oci_platform,
        }
        for target in ctx.config.matrix.targets
    ]

    if json_output:
        typer.echo(json.dumps({"include": rows}, separators=(",", ":")))
        return

    for row in rows:
        ctx.console.print(row["target"])
        ctx.console.print(f"  machine {row['machine']}, platform {row['platform']}", Style.DIM)
