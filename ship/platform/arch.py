"""Architecture identifiers and host detection.

Two naming domains are kept apart:

- ``MachineArch``: what the running kernel reports (``uname -m``).
- ``BuildTarget``: the triple the cross toolchain builds for.

``build_target_for`` is the only bridge between them. It is an exhaustive
``match`` closed with ``assert_never``, so adding a ``MachineArch`` member
without mapping it is a type error rather than a silent runtime default.
"""

from __future__ import annotations

import os as _os
import platform as _platform
from enum import Enum
from typing import assert_never

__all__ = [
    "MachineArch",
    "BuildTarget",
    "build_target_for",
    "machine_arch_for",
    "parse_machine",
    "parse_target",
    "query_machine",
]


class MachineArch(Enum):
    """Machine type reported by the host kernel."""

    X86_64 = "x86_64"
    ARMV7L = "armv7l"
    AARCH64 = "aarch64"

    def __str__(self) -> str:
        return self.value


class BuildTarget(Enum):
    """Cross-compilation target triple (CPU-vendor-OS-ABI)."""

    X86_64_LINUX_GNU = "x86_64-unknown-linux-gnu"
    ARMV7_LINUX_GNUEABIHF = "armv7-unknown-linux-gnueabihf"
    AARCH64_LINUX_GNU = "aarch64-unknown-linux-gnu"

    def __str__(self) -> str:
        return self.value

    @property
    def oci_platform(self) -> str:
        """Container image platform string for this target."""
        return {
            BuildTarget.X86_64_LINUX_GNU: "linux/amd64",
            BuildTarget.ARMV7_LINUX_GNUEABIHF: "linux/arm/v7",
            BuildTarget.AARCH64_LINUX_GNU: "linux/arm64/v8",
        }[self]


def build_target_for(machine: MachineArch) -> BuildTarget:
    """Map a runtime machine type to the target built for it."""
    match machine:
        case MachineArch.X86_64:
            return BuildTarget.X86_64_LINUX_GNU
        case MachineArch.ARMV7L:
            return BuildTarget.ARMV7_LINUX_GNUEABIHF
        case MachineArch.AARCH64:
            return BuildTarget.AARCH64_LINUX_GNU
        case _:
            assert_never(machine)


def machine_arch_for(target: BuildTarget) -> MachineArch:
    """Inverse of ``build_target_for``."""
    for machine in MachineArch:
        if build_target_for(machine) == target:
            return machine
    raise ValueError(f"no machine type maps to {target}")


def parse_machine(value: str) -> MachineArch | None:
    """Return the MachineArch for an exact kernel string, else None.

    No aliasing or case folding: a string the table does not know is
    unsupported.
    """
    try:
        return MachineArch(value.strip())
    except ValueError:
        return None


def parse_target(value: str) -> BuildTarget | None:
    try:
        return BuildTarget(value.strip())
    except ValueError:
        return None


def query_machine() -> str:
    """Return the raw machine type reported by the host kernel."""
    machine = _platform.machine()
    if machine:
        return machine
    # platform.machine() returns "" when it cannot tell.
    return _os.uname().machine
