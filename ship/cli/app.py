from __future__ import annotations

import os
from pathlib import Path

import typer

from ship import __version__
from ship.cli.commands.build import build
from ship.cli.commands.image import image_app
from ship.cli.commands.matrix import matrix
from ship.cli.commands.resolve import resolve
from ship.cli.commands.staging import stage, verify
from ship.core.errors import ErrorCode
from ship.core.project import ENV_PROJECT_ROOT

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(matrix)
app.command()(build)
app.command()(stage)
app.command()(verify)
app.command()(resolve)

# Sub-apps
app.add_typer(image_app, name="image", help="Multi-architecture image helpers.")


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    project: Path | None = typer.Option(
        None,
        "--project",
        help="Project root holding ship.toml (overrides auto detection)",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if project is not None:
        root = project.expanduser().resolve()
        if not root.is_dir():
            typer.echo(f"error: --project '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        os.environ[ENV_PROJECT_ROOT] = str(root)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def main() -> None:
    app()
