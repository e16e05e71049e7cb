"""Project root detection.

The project root is the directory holding ``ship.toml``. Inside a container
image there usually is none; the current directory is used then and all
settings fall back to their defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from .config import CONFIG_FILENAME

__all__ = ["ENV_PROJECT_ROOT", "Project", "ProjectSource", "detect_project", "find_project_upward"]

ENV_PROJECT_ROOT = "SHIP_PROJECT_ROOT"

ProjectSource = Literal["env", "cwd", "cwd-fallback"]


@dataclass(frozen=True, slots=True)
class Project:
    """A detected project checkout (or the container working directory)."""

    root: Path
    source: ProjectSource

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def has_config(self) -> bool:
        return self.config_path.is_file()


def find_project_upward(start: Path) -> Path | None:
    """Search upward from ``start`` for a directory containing ``ship.toml``."""
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / CONFIG_FILENAME).is_file():
            return candidate
    return None


def detect_project(start: Path | None = None) -> Project:
    """Detect the project root.

    Order: ``SHIP_PROJECT_ROOT``, then the nearest ``ship.toml`` above the
    current directory, then the current directory itself.
    """
    env = os.environ.get(ENV_PROJECT_ROOT, "").strip()
    if env:
        return Project(root=Path(env).expanduser().resolve(), source="env")

    cwd = (start or Path.cwd()).resolve()
    found = find_project_upward(cwd)
    if found is not None:
        return Project(root=found, source="cwd")
    return Project(root=cwd, source="cwd-fallback")
