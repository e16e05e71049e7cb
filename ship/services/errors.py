"""Error values for the three pipeline stages.

Each stage returns its own union so callers match exhaustively on exactly
the failures that stage can produce.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ship.platform.arch import BuildTarget

# -----------------------------------------------------------------------------
# Build matrix driver
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ToolchainMissing:
    tool: str
    hint: str = "Install it with: cargo install cross"


@dataclass(frozen=True, slots=True)
class ToolchainMismatch:
    tool: str
    expected: str
    found: str


@dataclass(frozen=True, slots=True)
class CompileFailed:
    target: BuildTarget
    returncode: int


@dataclass(frozen=True, slots=True)
class OutputMissing:
    target: BuildTarget
    path: Path


BuildError = ToolchainMissing | ToolchainMismatch | CompileFailed | OutputMissing


# -----------------------------------------------------------------------------
# Artifact stager
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArtifactNotFound:
    """The file handed to the stager does not exist."""

    target: BuildTarget
    path: Path


@dataclass(frozen=True, slots=True)
class StageFailed:
    target: BuildTarget
    reason: str


@dataclass(frozen=True, slots=True)
class PartialStaging:
    missing: tuple[BuildTarget, ...]


@dataclass(frozen=True, slots=True)
class UnexpectedArtifact:
    """Staged entries the matrix does not declare (or unknown directories)."""

    names: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DigestMismatch:
    target: BuildTarget
    expected: str
    actual: str


@dataclass(frozen=True, slots=True)
class NotExecutable:
    target: BuildTarget
    path: Path


@dataclass(frozen=True, slots=True)
class MetadataInvalid:
    target: BuildTarget
    path: Path
    reason: str


StagingError = (
    ArtifactNotFound
    | StageFailed
    | PartialStaging
    | UnexpectedArtifact
    | DigestMismatch
    | NotExecutable
    | MetadataInvalid
)


# -----------------------------------------------------------------------------
# Architecture resolver
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class UnsupportedArchitecture:
    machine: str
    supported: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MissingArtifact:
    machine: str
    target: BuildTarget


@dataclass(frozen=True, slots=True)
class CopyFailure:
    source: Path
    destination: Path
    reason: str


ResolveError = UnsupportedArchitecture | MissingArtifact | CopyFailure
