"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ship.core.errors import ErrorCode
from ship.output.console import Style
from ship.services.errors import (
    ArtifactNotFound,
    BuildError,
    CompileFailed,
    CopyFailure,
    DigestMismatch,
    MetadataInvalid,
    MissingArtifact,
    NotExecutable,
    OutputMissing,
    PartialStaging,
    ResolveError,
    StageFailed,
    StagingError,
    ToolchainMismatch,
    ToolchainMissing,
    UnexpectedArtifact,
    UnsupportedArchitecture,
)

if TYPE_CHECKING:
    from ship.core.config import ConfigError
    from ship.output.console import ConsoleProtocol

__all__ = [
    "build_error_exit_code",
    "print_build_error",
    "print_config_error",
    "print_resolve_error",
    "print_staging_error",
    "resolve_error_exit_code",
]


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.path is not None:
        console.print(f"config: {error.path}", Style.DIM)


def print_build_error(error: BuildError, console: ConsoleProtocol) -> None:
    match error:
        case ToolchainMissing(tool=tool, hint=hint):
            console.error(f"{tool}: not found on PATH")
            if hint:
                console.print(f"hint: {hint}", Style.DIM)
        case ToolchainMismatch(tool=tool, expected=expected, found=found):
            console.error(f"{tool}: expected version {expected}, found {found!r}")
            console.print("hint: pass --no-version-check to build anyway", Style.DIM)
        case CompileFailed(target=target, returncode=rc):
            console.error(f"{target}: build failed (exit {rc})")
        case OutputMissing(target=target, path=path):
            console.error(f"{target}: output not found: {path}")


def build_error_exit_code(error: BuildError) -> int:
    match error:
        case ToolchainMissing() | ToolchainMismatch():
            return int(ErrorCode.ENV_ERROR)
        case CompileFailed() | OutputMissing():
            return int(ErrorCode.BUILD_ERROR)


def print_staging_error(error: StagingError, console: ConsoleProtocol) -> None:
    match error:
        case ArtifactNotFound(target=target, path=path):
            console.error(f"{target}: no artifact at {path}")
            console.print(f"hint: run: ship build --target {target}", Style.DIM)
        case StageFailed(target=target, reason=reason):
            console.error(f"{target}: staging failed: {reason}")
        case PartialStaging(missing=missing):
            console.error(f"staging incomplete, missing: {', '.join(str(t) for t in missing)}")
        case UnexpectedArtifact(names=names):
            console.error(f"staging holds undeclared entries: {', '.join(names)}")
        case DigestMismatch(target=target, expected=expected, actual=actual):
            console.error(f"{target}: sha256 {actual} does not match recorded {expected}")
        case NotExecutable(target=target, path=path):
            console.error(f"{target}: not executable: {path}")
            console.print("hint: run: ship verify --restore-modes", Style.DIM)
        case MetadataInvalid(target=target, path=path, reason=reason):
            console.error(f"{target}: invalid metadata {path} ({reason})")


def print_resolve_error(error: ResolveError, console: ConsoleProtocol) -> None:
    match error:
        case UnsupportedArchitecture(machine=machine, supported=supported):
            console.error(f"unsupported architecture: {machine!r}")
            console.print(f"supported: {', '.join(supported)}", Style.DIM)
        case MissingArtifact(machine=machine, target=target):
            console.error(f"no staged artifact for {target} (host {machine})")
        case CopyFailure(source=source, destination=destination, reason=reason):
            console.error(f"cannot install {source} -> {destination}: {reason}")


def resolve_error_exit_code(error: ResolveError) -> int:
    match error:
        case UnsupportedArchitecture():
            return int(ErrorCode.UNSUPPORTED_ARCH)
        case MissingArtifact():
            return int(ErrorCode.STAGING_ERROR)
        case CopyFailure():
            return int(ErrorCode.IO_ERROR)
