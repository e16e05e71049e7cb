from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.commands._helpers import parse_single_target
from ship.cli.context import build_context
from ship.core.errors import ErrorCode
from ship.core.result import Err, Ok
from ship.output.console import Style
from ship.output.errors import print_staging_error
from ship.services.matrix import BuildMatrixDriver
from ship.services.staging import StagingArea


def stage(
    target: str = typer.Option(..., "--target", "-t", help="Build target of the artifact."),
    source: Path | None = typer.Option(
        None, "--from", help="Artifact to stage. Default: the toolchain's release output."
    ),
) -> None:
    """Stage one built artifact under its build target."""
    ctx = build_context()
    build_target = parse_single_target(target, ctx.config.matrix.targets)

    if source is None:
        driver = BuildMatrixDriver(root=ctx.project.root, config=ctx.config, console=ctx.console)
        source = driver.output_path(build_target)

    area = StagingArea(ctx.config.staging_dir(ctx.project.root), ctx.config.binary)
    match area.stage(build_target, source):
        case Ok(entry):
            ctx.console.success(str(entry.path))
            ctx.console.print(f"sha256 {entry.sha256}", Style.DIM)
        case Err(error):
            print_staging_error(error, ctx.console)
            raise typer.Exit(code=int(ErrorCode.STAGING_ERROR))


def verify(
    restore_modes: bool = typer.Option(
        False,
        "--restore-modes",
        help="Re-apply recorded permission bits first (after an artifact download).",
    ),
) -> None:
    """Check the staging area holds exactly the matrix, intact and executable."""
    ctx = build_context()
    area = StagingArea(ctx.config.staging_dir(ctx.project.root), ctx.config.binary)

    if restore_modes:
        restored = area.restore_modes()
        if isinstance(restored, Err):
            print_staging_error(restored.error, ctx.console)
            raise typer.Exit(code=int(ErrorCode.STAGING_ERROR))
        for target in restored.value:
            ctx.console.info(f"{target}: permissions restored")

    match area.verify(ctx.config.matrix.targets):
        case Ok(entries):
            for entry in entries:
                ctx.console.success(f"{entry.target} {entry.sha256[:12]} {entry.mode:04o}")
        case Err(error):
            print_staging_error(error, ctx.console)
            raise typer.Exit(code=int(ErrorCode.STAGING_ERROR))
