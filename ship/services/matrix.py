"""Build matrix driver.

Runs the pinned cross toolchain once per matrix target:

    cross build --release --target <triple> [--locked]

and checks the binary landed at ``<target_dir>/<triple>/release/<binary>``.
Legs are independent: a failing leg is recorded and the next one still
runs. In CI each leg is usually its own job (``ship build --target T``), so
the driver itself stays sequential. It neither stages nor publishes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ship.core.config import Config
from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.platform.arch import BuildTarget
from ship.platform.process import ProcessError, run, run_silent, which

from .errors import BuildError, CompileFailed, OutputMissing, ToolchainMismatch, ToolchainMissing

__all__ = ["Artifact", "BuildMatrixDriver", "LegResult", "MatrixReport"]

_BUILD_TIMEOUT_SECONDS = 60 * 60.0
_VERSION_TIMEOUT_SECONDS = 30.0

_INSTALL_HINTS = {
    "cross": "Install it with: cargo install cross --locked",
    "cargo": "Install Rust from https://rustup.rs",
}

SilentRunner = Callable[..., Result[None, ProcessError]]
CaptureRunner = Callable[..., Result[str, ProcessError]]
Locator = Callable[[str], Path | None]


@dataclass(frozen=True, slots=True)
class Artifact:
    """One built binary for exactly one target."""

    target: BuildTarget
    path: Path


@dataclass(frozen=True, slots=True)
class LegResult:
    target: BuildTarget
    result: Result[Artifact, BuildError]


@dataclass(frozen=True, slots=True)
class MatrixReport:
    legs: tuple[LegResult, ...]

    @property
    def artifacts(self) -> list[Artifact]:
        return [leg.result.value for leg in self.legs if isinstance(leg.result, Ok)]

    @property
    def failures(self) -> list[tuple[BuildTarget, BuildError]]:
        return [(leg.target, leg.result.error) for leg in self.legs if isinstance(leg.result, Err)]

    @property
    def ok(self) -> bool:
        return not self.failures


class BuildMatrixDriver:
    """Produce one artifact per matrix target via the external toolchain."""

    def __init__(
        self,
        *,
        root: Path,
        config: Config,
        console: ConsoleProtocol,
        runner: SilentRunner = run_silent,
        capture: CaptureRunner = run,
        locate: Locator = which,
    ) -> None:
        self._root = root
        self._config = config
        self._console = console
        self._runner = runner
        self._capture = capture
        self._locate = locate

    @property
    def targets(self) -> tuple[BuildTarget, ...]:
        return self._config.matrix.targets

    def command_for(self, target: BuildTarget) -> list[str]:
        cmd = [self._config.toolchain.tool, "build", "--release", "--target", str(target)]
        if self._config.toolchain.locked:
            cmd.append("--locked")
        return cmd

    def plan(
        self, targets: Iterable[BuildTarget] | None = None
    ) -> list[tuple[BuildTarget, list[str]]]:
        """Commands a build would run, without running them."""
        selected = tuple(targets) if targets is not None else self.targets
        return [(target, self.command_for(target)) for target in selected]

    def output_path(self, target: BuildTarget) -> Path:
        """Where the toolchain leaves the release binary for ``target``."""
        return self._config.target_dir(self._root) / str(target) / "release" / self._config.binary

    def check_toolchain(self, *, check_version: bool = True) -> Result[Path, BuildError]:
        """Locate the tool and compare ``<tool> --version`` with the pin."""
        tool = self._config.toolchain.tool
        path = self._locate(tool)
        if path is None:
            return Err(ToolchainMissing(tool=tool, hint=_INSTALL_HINTS.get(tool, "")))

        if not check_version:
            return Ok(path)

        out = self._capture([tool, "--version"], cwd=self._root, timeout=_VERSION_TIMEOUT_SECONDS)
        expected = self._config.toolchain.version
        if isinstance(out, Err):
            return Err(ToolchainMismatch(tool=tool, expected=expected, found="unknown"))

        # cross prints its own version on the first line, then the cargo one.
        lines = out.value.strip().splitlines()
        first_line = lines[0] if lines else ""
        if expected not in first_line.split():
            return Err(ToolchainMismatch(tool=tool, expected=expected, found=first_line))
        return Ok(path)

    def build(self, target: BuildTarget, *, dry_run: bool = False) -> Result[Artifact, BuildError]:
        """Build a single matrix leg."""
        cmd = self.command_for(target)
        out = self.output_path(target)

        self._console.print(" ".join(cmd), Style.DIM)
        if dry_run:
            return Ok(Artifact(target=target, path=out))

        result = self._runner(cmd, cwd=self._root, timeout=_BUILD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(CompileFailed(target=target, returncode=result.error.returncode))

        if not out.is_file():
            return Err(OutputMissing(target=target, path=out))
        return Ok(Artifact(target=target, path=out))

    def build_all(
        self,
        targets: Iterable[BuildTarget] | None = None,
        *,
        dry_run: bool = False,
        check_version: bool = True,
    ) -> MatrixReport:
        """Build every leg; one leg failing never stops the others."""
        selected = tuple(targets) if targets is not None else self.targets

        if not dry_run:
            toolchain = self.check_toolchain(check_version=check_version)
            if isinstance(toolchain, Err):
                error = toolchain.error
                return MatrixReport(legs=tuple(LegResult(t, Err(error)) for t in selected))

        legs: list[LegResult] = []
        for target in selected:
            self._console.info(f"building {target}")
            legs.append(LegResult(target=target, result=self.build(target, dry_run=dry_run)))
        return MatrixReport(legs=tuple(legs))
