"""Typed configuration loading and access.

``ship.toml`` declares the build matrix and the paths every pipeline stage
agrees on:

    [project]
    binary = "regexsoup"

    [toolchain]
    tool = "cross"
    version = "0.2.5"
    locked = true

    [matrix]
    targets = ["x86_64-unknown-linux-gnu", "aarch64-unknown-linux-gnu"]

    [paths]
    target_dir = "target"
    staging = "artifacts"
    install = "/usr/local/bin/regexsoup"

Every key has a default, so a container with no ``ship.toml`` still resolves.
Precedence is CLI option > environment > file > default.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from ship.platform.arch import BuildTarget, parse_target

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_BINARY",
    "DEFAULT_TOOL",
    "DEFAULT_TOOL_VERSION",
    "Config",
    "ConfigError",
    "MatrixConfig",
    "PathsConfig",
    "ToolchainConfig",
    "apply_env",
    "load_config",
    "load_optional_config",
]

CONFIG_FILENAME = "ship.toml"

DEFAULT_BINARY = "app"
DEFAULT_TOOL = "cross"
DEFAULT_TOOL_VERSION = "0.2.5"

SUPPORTED_TOOLS = ("cross", "cargo")

ENV_STAGING_DIR = "SHIP_STAGING_DIR"
ENV_INSTALL_PATH = "SHIP_INSTALL_PATH"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolchainConfig:
    """The pinned external cross-compilation tool."""

    tool: str = DEFAULT_TOOL
    version: str = DEFAULT_TOOL_VERSION
    locked: bool = True


def _all_targets() -> tuple[BuildTarget, ...]:
    return tuple(BuildTarget)


@dataclass(frozen=True, slots=True)
class MatrixConfig:
    """Build targets, in declaration order, without duplicates."""

    targets: tuple[BuildTarget, ...] = field(default_factory=_all_targets)


@dataclass(frozen=True, slots=True)
class PathsConfig:
    """Paths relative to the project root (``install`` is absolute)."""

    target_dir: str = "target"
    staging: str = "artifacts"
    install: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    binary: str = DEFAULT_BINARY
    toolchain: ToolchainConfig = field(default_factory=ToolchainConfig)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @property
    def install_path(self) -> Path:
        """Canonical execution path inside the container."""
        if self.paths.install:
            return Path(self.paths.install)
        return Path("/usr/local/bin") / self.binary

    def staging_dir(self, root: Path) -> Path:
        return root / self.paths.staging

    def target_dir(self, root: Path) -> Path:
        return root / self.paths.target_dir

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: On unknown tools, unknown or duplicate targets, or an
                empty matrix.
        """
        project: StrDict = get_table(data, "project") or {}
        toolchain: StrDict = get_table(data, "toolchain") or {}
        matrix: StrDict = get_table(data, "matrix") or {}
        paths: StrDict = get_table(data, "paths") or {}

        binary = get_str(project, "binary") or DEFAULT_BINARY
        if "/" in binary:
            raise ValueError(f"[project].binary must be a file name, got {binary!r}")

        tool = get_str(toolchain, "tool") or DEFAULT_TOOL
        if tool not in SUPPORTED_TOOLS:
            raise ValueError(
                f"[toolchain].tool must be one of {', '.join(SUPPORTED_TOOLS)}, got {tool!r}"
            )

        return cls(
            binary=binary,
            toolchain=ToolchainConfig(
                tool=tool,
                version=get_str(toolchain, "version") or DEFAULT_TOOL_VERSION,
                locked=get_bool(toolchain, "locked") is not False,
            ),
            matrix=MatrixConfig(targets=_parse_matrix(matrix)),
            paths=PathsConfig(
                target_dir=get_str(paths, "target_dir") or "target",
                staging=get_str(paths, "staging") or "artifacts",
                install=get_str(paths, "install"),
            ),
        )


def _parse_matrix(matrix: StrDict) -> tuple[BuildTarget, ...]:
    if "targets" not in matrix:
        return _all_targets()

    raw = get_str_list(matrix, "targets")
    if raw is None:
        raise ValueError("[matrix].targets must be a list of strings")
    if not raw:
        raise ValueError("[matrix].targets must not be empty")

    targets: list[BuildTarget] = []
    for value in raw:
        target = parse_target(value)
        if target is None:
            known = ", ".join(str(t) for t in BuildTarget)
            raise ValueError(f"unknown build target {value!r} (known: {known})")
        if target in targets:
            raise ValueError(f"duplicate build target {value!r}")
        targets.append(target)
    return tuple(targets)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except ValueError as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_optional_config(path: Path) -> Result[Config, ConfigError]:
    """Like ``load_config`` but a missing file yields the defaults.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def apply_env(config: Config, environ: Mapping[str, str]) -> Config:
    """Overlay ``SHIP_STAGING_DIR`` / ``SHIP_INSTALL_PATH`` onto config."""
    paths = config.paths
    staging = environ.get(ENV_STAGING_DIR, "").strip()
    if staging:
        paths = replace(paths, staging=staging)
    install = environ.get(ENV_INSTALL_PATH, "").strip()
    if install:
        paths = replace(paths, install=install)
    if paths is config.paths:
        return config
    return replace(config, paths=paths)
