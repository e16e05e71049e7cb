from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from ship.core.config import Config, apply_env, load_optional_config
from ship.core.errors import ErrorCode
from ship.core.project import Project, detect_project
from ship.core.result import Err
from ship.output.console import ConsoleProtocol, RichConsole
from ship.output.errors import print_config_error


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    config: Config
    console: ConsoleProtocol


def build_context(*, stderr: bool = False) -> CLIContext:
    """Detect the project, load ``ship.toml`` and apply env overrides.

    ``stderr=True`` routes all console output to standard error (used by the
    resolver, which runs as a container entrypoint).
    """
    console = RichConsole(stderr=stderr)
    project = detect_project()

    config_result = load_optional_config(project.config_path)
    if isinstance(config_result, Err):
        print_config_error(config_result.error, console)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        project=project,
        config=apply_env(config_result.value, os.environ),
        console=console,
    )
