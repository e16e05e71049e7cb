"""Platform abstraction layer."""

from .arch import (
    BuildTarget,
    MachineArch,
    build_target_for,
    machine_arch_for,
    parse_machine,
    parse_target,
    query_machine,
)
from .process import (
    ProcessError,
    run,
    run_silent,
    which,
)

__all__ = [
    # arch
    "BuildTarget",
    "MachineArch",
    "build_target_for",
    "machine_arch_for",
    "parse_machine",
    "parse_target",
    "query_machine",
    # process
    "ProcessError",
    "run",
    "run_silent",
    "which",
]
