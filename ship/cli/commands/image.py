from __future__ import annotations

from pathlib import Path

import typer

from ship.cli.context import build_context
from ship.core.errors import ErrorCode
from ship.platform.files import atomic_write_text
from ship.services.image import DEFAULT_REGISTRY, generate_dockerfile, image_tags, oci_platforms

image_app = typer.Typer(add_completion=False, no_args_is_help=True)


@image_app.command("platforms")
def platforms_cmd() -> None:
    """Print the buildx --platform value for the matrix."""
    ctx = build_context()
    typer.echo(oci_platforms(ctx.config.matrix.targets))


@image_app.command("tags")
def tags_cmd(
    owner: str = typer.Option(..., "--owner", envvar="GITHUB_REPOSITORY_OWNER"),
    image: str = typer.Option(..., "--image", envvar="IMAGE_NAME"),
    ref: str = typer.Option(..., "--ref", envvar="GITHUB_REF", help="Git ref being built."),
    sha: str = typer.Option(..., "--sha", envvar="GITHUB_SHA", help="Commit sha being built."),
    registry: str = typer.Option(DEFAULT_REGISTRY, "--registry"),
) -> None:
    """Print the image tags for this commit, one per line."""
    try:
        tags = image_tags(owner, image, ref=ref, sha=sha, registry=registry)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--sha") from e
    for tag in tags:
        typer.echo(tag)


@image_app.command("dockerfile")
def dockerfile_cmd(
    out: Path | None = typer.Option(None, "--out", help="Write here instead of stdout."),
) -> None:
    """Render the multi-architecture Dockerfile."""
    ctx = build_context()
    try:
        content = generate_dockerfile(ctx.config)
    except ValueError as e:
        ctx.console.error(str(e))
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR)) from e

    if out is None:
        typer.echo(content, nl=False)
        return

    path = out if out.is_absolute() else ctx.project.root / out
    atomic_write_text(path, content)
    ctx.console.success(str(path))
