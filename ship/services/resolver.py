"""Architecture resolver.

Runs once when the container starts, before the application:

1. read the host machine type (``uname -m``),
2. map it to the build target produced for it,
3. copy that target's staged binary to the canonical execution path.

There is no default architecture. A machine type outside the configured
matrix is refused, because running a binary built for another CPU is worse
than not starting. The copy goes through a temp file and ``os.replace``, so a
re-run produces the same file and a failed run leaves the destination as it
was.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.platform.arch import (
    BuildTarget,
    build_target_for,
    machine_arch_for,
    parse_machine,
    query_machine,
)
from ship.platform.files import atomic_copy

from .errors import CopyFailure, MissingArtifact, ResolveError, UnsupportedArchitecture

__all__ = ["ArchitectureResolver", "StagingLookup"]


class StagingLookup(Protocol):
    """The resolver's only view of the staging area."""

    def lookup(self, target: BuildTarget) -> Path | None: ...


class ArchitectureResolver:
    """Select and install the one staged artifact matching the host."""

    def __init__(
        self,
        *,
        staging: StagingLookup,
        install_path: Path,
        supported: Iterable[BuildTarget],
        console: ConsoleProtocol,
        query: Callable[[], str] = query_machine,
    ) -> None:
        self._staging = staging
        self._install_path = install_path
        self._supported = tuple(supported)
        self._console = console
        self._query = query

    @property
    def install_path(self) -> Path:
        return self._install_path

    def supported_machines(self) -> tuple[str, ...]:
        """Machine types this resolver accepts, in matrix order."""
        return tuple(str(machine_arch_for(t)) for t in self._supported)

    def _unsupported(self, machine: str) -> UnsupportedArchitecture:
        return UnsupportedArchitecture(machine=machine, supported=self.supported_machines())

    def resolve(self, machine: str) -> Result[BuildTarget, ResolveError]:
        """Map a raw machine type to a build target in the matrix."""
        arch = parse_machine(machine)
        if arch is None:
            return Err(self._unsupported(machine))

        target = build_target_for(arch)
        if target not in self._supported:
            return Err(self._unsupported(machine))
        return Ok(target)

    def locate(self, machine: str) -> Result[Path, ResolveError]:
        """Staged artifact for ``machine``, without installing it."""
        target = self.resolve(machine)
        if isinstance(target, Err):
            return target

        artifact = self._staging.lookup(target.value)
        if artifact is None:
            return Err(MissingArtifact(machine=machine, target=target.value))
        return Ok(artifact)

    def install(self, machine: str | None = None) -> Result[Path, ResolveError]:
        """Install the artifact for ``machine`` (default: this host)."""
        if machine is None:
            machine = self._query()

        artifact = self.locate(machine)
        if isinstance(artifact, Err):
            return artifact

        src = artifact.value
        self._console.print(f"{machine}: {src} -> {self._install_path}", Style.DIM)
        try:
            atomic_copy(src, self._install_path)
        except OSError as e:
            return Err(CopyFailure(source=src, destination=self._install_path, reason=str(e)))
        return Ok(self._install_path)
