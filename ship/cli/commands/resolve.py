from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.context import build_context
from ship.core.result import Err, Ok
from ship.output.errors import print_resolve_error, resolve_error_exit_code
from ship.platform.arch import query_machine
from ship.services.resolver import ArchitectureResolver
from ship.services.staging import StagingArea


def resolve(
    machine: str | None = typer.Option(
        None,
        "--machine",
        envvar="SHIP_MACHINE",
        help="Machine type to resolve for. Default: the host's (uname -m).",
    ),
    staging: Path | None = typer.Option(None, "--staging", help="Staging area directory."),
    install: Path | None = typer.Option(None, "--install", help="Canonical execution path."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the selection, install nothing."),
) -> None:
    """Install the staged binary matching this host."""
    ctx = build_context(stderr=True)

    staging_dir = staging if staging is not None else ctx.config.staging_dir(ctx.project.root)
    install_path = install if install is not None else ctx.config.install_path

    resolver = ArchitectureResolver(
        staging=StagingArea(staging_dir, ctx.config.binary),
        install_path=install_path,
        supported=ctx.config.matrix.targets,
        console=ctx.console,
    )

    host = machine if machine is not None else query_machine()
    result = resolver.locate(host) if dry_run else resolver.install(host)

    match result:
        case Ok(path):
            ctx.console.success(f"{host}: {path}")
        case Err(error):
            print_resolve_error(error, ctx.console)
            raise typer.Exit(code=resolve_error_exit_code(error))
