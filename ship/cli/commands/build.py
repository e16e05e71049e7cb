from __future__ import annotations

import typer

from ship.cli.commands._helpers import parse_targets
from ship.cli.context import build_context
from ship.core.errors import ErrorCode
from ship.core.result import Err, Ok
from ship.output.errors import build_error_exit_code, print_build_error, print_staging_error
from ship.services.matrix import BuildMatrixDriver
from ship.services.staging import StagingArea


def build(
    target: list[str] | None = typer.Option(
        None, "--target", "-t", help="Build only this target (repeatable). Default: whole matrix."
    ),
    stage: bool = typer.Option(False, "--stage", help="Stage each built artifact."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands without running."),
    no_version_check: bool = typer.Option(
        False, "--no-version-check", help="Do not compare the toolchain version with the pin."
    ),
) -> None:
    """Build the matrix with the pinned cross toolchain."""
    ctx = build_context()
    targets = parse_targets(target or [], ctx.config.matrix.targets)

    driver = BuildMatrixDriver(root=ctx.project.root, config=ctx.config, console=ctx.console)
    if dry_run:
        for _, cmd in driver.plan(targets):
            ctx.console.print(" ".join(cmd))
        return

    report = driver.build_all(targets, check_version=not no_version_check)

    exit_code = int(ErrorCode.OK)
    for leg in report.legs:
        match leg.result:
            case Ok(artifact):
                ctx.console.success(f"{artifact.target}: {artifact.path}")
            case Err(error):
                print_build_error(error, ctx.console)
                if exit_code == ErrorCode.OK:
                    exit_code = build_error_exit_code(error)

    if stage:
        area = StagingArea(ctx.config.staging_dir(ctx.project.root), ctx.config.binary)
        for artifact in report.artifacts:
            staged = area.stage(artifact.target, artifact.path)
            match staged:
                case Ok(entry):
                    ctx.console.success(f"staged {entry.target} ({entry.sha256[:12]})")
                case Err(error):
                    print_staging_error(error, ctx.console)
                    if exit_code == ErrorCode.OK:
                        exit_code = int(ErrorCode.STAGING_ERROR)

    if exit_code != ErrorCode.OK:
        raise typer.Exit(code=exit_code)
