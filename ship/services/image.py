"""Multi-architecture image assembly helpers.

The image is built once per platform by ``docker buildx`` (emulated with
QEMU for foreign CPUs). Its first stage runs ``ship resolve`` against the
staging area, so ``uname -m`` inside that stage reports the platform being
built. The final stage carries only the resolved binary.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath

from ship.core.config import CONFIG_FILENAME, Config
from ship.platform.arch import BuildTarget

__all__ = [
    "DEFAULT_REGISTRY",
    "branch_tag",
    "generate_dockerfile",
    "image_reference",
    "image_tags",
    "oci_platforms",
]

DEFAULT_REGISTRY = "ghcr.io"
DEFAULT_RUNTIME_IMAGE = "debian:bookworm-slim"
DEFAULT_RESOLVER_IMAGE = "python:3.12-slim"

_SHORT_SHA_LENGTH = 7


def oci_platforms(targets: Iterable[BuildTarget]) -> str:
    """Value for ``buildx --platform``, in matrix order."""
    return ",".join(t.oci_platform for t in targets)


def image_reference(owner: str, image: str, *, registry: str = DEFAULT_REGISTRY) -> str:
    """Registry reference; registries require lowercase repository names."""
    return f"{registry}/{owner}/{image}".lower()


def branch_tag(ref: str) -> str:
    """Tag-safe branch name from a git ref (``refs/heads/feature/x`` -> ``feature-x``)."""
    branch = ref.removeprefix("refs/heads/")
    return branch.replace("/", "-")


def image_tags(
    owner: str,
    image: str,
    *,
    ref: str,
    sha: str,
    registry: str = DEFAULT_REGISTRY,
) -> list[str]:
    """Tags pushed for one build: ``latest`` and ``<branch>-<short sha>``."""
    if not sha:
        raise ValueError("commit sha is required")
    base = image_reference(owner, image, registry=registry)
    short = sha[:_SHORT_SHA_LENGTH]
    return [f"{base}:latest", f"{base}:{branch_tag(ref)}-{short}"]


def generate_dockerfile(
    config: Config,
    *,
    runtime_image: str = DEFAULT_RUNTIME_IMAGE,
    resolver_image: str = DEFAULT_RESOLVER_IMAGE,
) -> str:
    """Render the two-stage Dockerfile for the configured matrix.

    The build context is the project root, holding ``ship.toml``, the
    ``ship`` sources and the populated staging area.

    Returns:
        Dockerfile content with LF line endings
    """
    staging = PurePosixPath(config.paths.staging)
    if staging.is_absolute():
        raise ValueError("staging path must be relative to the build context")

    install = PurePosixPath(str(config.install_path))
    resolved = PurePosixPath("/out") / config.binary

    lines = [
        "# syntax=docker/dockerfile:1",
        "# Generated by: ship image dockerfile",
        f"# Platforms: {oci_platforms(config.matrix.targets)}",
        "",
        f"FROM {resolver_image} AS resolve",
        "WORKDIR /ship",
        "COPY pyproject.toml /ship/",
        "COPY ship /ship/ship",
        "RUN pip install --no-cache-dir /ship",
        "WORKDIR /work",
        f"COPY {CONFIG_FILENAME} /work/{CONFIG_FILENAME}",
        f"COPY {staging.as_posix()} /work/{staging.as_posix()}",
        f"RUN ship resolve --install {resolved}",
        "",
        f"FROM {runtime_image}",
        f"COPY --from=resolve {resolved} {install}",
        f'ENTRYPOINT ["{install}"]',
    ]
    return "\n".join(lines) + "\n"
