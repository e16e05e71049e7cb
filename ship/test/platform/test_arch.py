"""Tests for ship.platform.arch module."""

from __future__ import annotations

from collections import namedtuple

import pytest

import ship.platform.arch as arch_mod
from ship.platform.arch import (
    BuildTarget,
    MachineArch,
    build_target_for,
    machine_arch_for,
    parse_machine,
    parse_target,
    query_machine,
)


class TestMapping:
    @pytest.mark.parametrize(
        ("machine", "target"),
        [
            (MachineArch.X86_64, BuildTarget.X86_64_LINUX_GNU),
            (MachineArch.ARMV7L, BuildTarget.ARMV7_LINUX_GNUEABIHF),
            (MachineArch.AARCH64, BuildTarget.AARCH64_LINUX_GNU),
        ],
    )
    def test_build_target_for(self, machine: MachineArch, target: BuildTarget) -> None:
        assert build_target_for(machine) == target

    def test_mapping_is_a_bijection(self) -> None:
        targets = [build_target_for(m) for m in MachineArch]
        assert sorted(targets, key=str) == sorted(BuildTarget, key=str)

    def test_inverse(self) -> None:
        for machine in MachineArch:
            assert machine_arch_for(build_target_for(machine)) == machine


class TestParsing:
    def test_parse_known_machine(self) -> None:
        assert parse_machine("aarch64") == MachineArch.AARCH64
        assert parse_machine("armv7l\n") == MachineArch.ARMV7L

    @pytest.mark.parametrize("value", ["riscv64", "arm64", "amd64", "X86_64", "i686", ""])
    def test_parse_unknown_machine(self, value: str) -> None:
        # No aliasing: only the exact kernel strings are accepted.
        assert parse_machine(value) is None

    def test_parse_target(self) -> None:
        assert parse_target("armv7-unknown-linux-gnueabihf") == BuildTarget.ARMV7_LINUX_GNUEABIHF
        assert parse_target("x86_64-unknown-linux-musl") is None

    def test_str(self) -> None:
        assert str(MachineArch.X86_64) == "x86_64"
        assert str(BuildTarget.AARCH64_LINUX_GNU) == "aarch64-unknown-linux-gnu"


class TestOciPlatform:
    def test_values(self) -> None:
        assert BuildTarget.X86_64_LINUX_GNU.oci_platform == "linux/amd64"
        assert BuildTarget.ARMV7_LINUX_GNUEABIHF.oci_platform == "linux/arm/v7"
        assert BuildTarget.AARCH64_LINUX_GNU.oci_platform == "linux/arm64/v8"


class TestQueryMachine:
    def test_uses_platform_machine(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(arch_mod._platform, "machine", lambda: "aarch64")
        assert query_machine() == "aarch64"

    def test_falls_back_to_uname(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake_uname = namedtuple("fake_uname", "machine")
        monkeypatch.setattr(arch_mod._platform, "machine", lambda: "")
        monkeypatch.setattr(arch_mod._os, "uname", lambda: fake_uname("armv7l"))
        assert query_machine() == "armv7l"
