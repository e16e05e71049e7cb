"""Subprocess execution returning Results.

Nothing else in ``ship`` calls ``subprocess``. The build driver receives
``run``/``run_silent``/``which`` as parameters, so tests pass fakes instead.
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent", "which"]

_SHOWN_ARGS = 3


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not run or exited non-zero.

    ``returncode`` is -1 when the process never ran or timed out; ``stderr``
    then holds the reason.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        shown = " ".join(self.command[:_SHOWN_ARGS])
        if len(self.command) > _SHOWN_ARGS:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _spawn(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None,
    timeout: float | None,
    *,
    capture: bool,
) -> subprocess.CompletedProcess[str] | ProcessError:
    try:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return ProcessError(tuple(cmd), -1, "", f"Command timed out after {timeout}s")
    except OSError as e:
        return ProcessError(tuple(cmd), -1, "", str(e))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run ``cmd`` capturing its output; ``Ok`` holds stdout."""
    proc = _spawn(cmd, cwd, env, timeout, capture=True)
    if isinstance(proc, ProcessError):
        return Err(proc)
    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Run ``cmd`` with its output going straight to the terminal.

    Used for compiler invocations, whose progress the user should see live.
    """
    proc = _spawn(cmd, cwd, env, timeout, capture=False)
    if isinstance(proc, ProcessError):
        return Err(proc)
    if proc.returncode != 0:
        return Err(ProcessError(tuple(cmd), proc.returncode, "", ""))
    return Ok(None)


def which(name: str) -> Path | None:
    found = shutil.which(name)
    return Path(found) if found else None
