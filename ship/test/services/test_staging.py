"""Tests for ship.services.staging module."""

from __future__ import annotations

import json
import shutil
import stat
from pathlib import Path

import pytest

from ship.core.result import Err, Ok
from ship.platform.arch import BuildTarget
from ship.platform.files import sha256_file
from ship.services.errors import (
    ArtifactNotFound,
    DigestMismatch,
    MetadataInvalid,
    NotExecutable,
    PartialStaging,
    UnexpectedArtifact,
)
from ship.services.staging import StagingArea

X86 = BuildTarget.X86_64_LINUX_GNU
ARM = BuildTarget.ARMV7_LINUX_GNUEABIHF
A64 = BuildTarget.AARCH64_LINUX_GNU
MATRIX = (X86, ARM, A64)


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)


def _built(tmp_path: Path, target: BuildTarget, *, mode: int = 0o755) -> Path:
    path = tmp_path / "target" / str(target) / "release" / "app"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(f"binary for {target}".encode())
    path.chmod(mode)
    return path


@pytest.fixture
def area(tmp_path: Path) -> StagingArea:
    return StagingArea(tmp_path / "artifacts", "app")


def _stage_all(area: StagingArea, tmp_path: Path) -> None:
    for target in MATRIX:
        assert isinstance(area.stage(target, _built(tmp_path, target)), Ok)


class TestStage:
    def test_layout(self, area: StagingArea, tmp_path: Path) -> None:
        result = area.stage(A64, _built(tmp_path, A64))

        assert isinstance(result, Ok)
        staged = result.value
        assert staged.path == tmp_path / "artifacts" / "aarch64-unknown-linux-gnu" / "app"
        assert staged.path.read_bytes() == b"binary for aarch64-unknown-linux-gnu"
        assert staged.sha256 == sha256_file(staged.path)

        meta = json.loads(area.metadata_path(A64).read_text(encoding="utf-8"))
        assert meta["target"] == "aarch64-unknown-linux-gnu"
        assert meta["binary"] == "app"
        assert meta["sha256"] == staged.sha256
        assert meta["mode"] == "0755"

    def test_forces_execute_bits(self, area: StagingArea, tmp_path: Path) -> None:
        result = area.stage(X86, _built(tmp_path, X86, mode=0o644))

        assert isinstance(result, Ok)
        assert _mode(result.value.path) == 0o755

    def test_missing_source(self, area: StagingArea, tmp_path: Path) -> None:
        missing = tmp_path / "nope"
        assert area.stage(X86, missing) == Err(ArtifactNotFound(target=X86, path=missing))
        assert area.lookup(X86) is None

    def test_restage_replaces(self, area: StagingArea, tmp_path: Path) -> None:
        src = _built(tmp_path, X86)
        area.stage(X86, src)
        src.write_bytes(b"rebuilt")

        result = area.stage(X86, src)

        assert isinstance(result, Ok)
        assert result.value.path.read_bytes() == b"rebuilt"
        assert isinstance(area.verify([X86]), Ok)


class TestLookup:
    def test_lookup(self, area: StagingArea, tmp_path: Path) -> None:
        assert area.lookup(ARM) is None
        area.stage(ARM, _built(tmp_path, ARM))
        assert area.lookup(ARM) == area.binary_path(ARM)

    def test_targets_ignores_unknown_directories(self, area: StagingArea, tmp_path: Path) -> None:
        area.stage(ARM, _built(tmp_path, ARM))
        (area.root / "riscv64gc-unknown-linux-gnu").mkdir()
        (area.slot_dir(X86)).mkdir()  # empty slot

        assert area.targets() == {ARM}


class TestVerify:
    def test_exact_key_set(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)

        result = area.verify(MATRIX)

        assert isinstance(result, Ok)
        assert [s.target for s in result.value] == list(MATRIX)
        assert area.targets() == set(MATRIX)

    def test_partial_staging(self, area: StagingArea, tmp_path: Path) -> None:
        area.stage(X86, _built(tmp_path, X86))

        assert area.verify(MATRIX) == Err(PartialStaging(missing=(ARM, A64)))

    def test_empty_area(self, area: StagingArea) -> None:
        assert area.verify([X86]) == Err(PartialStaging(missing=(X86,)))

    def test_unexpected_target(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)

        result = area.verify([X86, A64])

        assert result == Err(UnexpectedArtifact(names=("armv7-unknown-linux-gnueabihf",)))

    def test_unknown_entry(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        (area.root / "stray.zip").write_bytes(b"")

        assert area.verify(MATRIX) == Err(UnexpectedArtifact(names=("stray.zip",)))

    def test_hidden_entries_ignored(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        (area.root / ".DS_Store").write_bytes(b"")

        assert isinstance(area.verify(MATRIX), Ok)

    def test_digest_mismatch(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        area.binary_path(ARM).write_bytes(b"tampered")

        result = area.verify(MATRIX)

        assert isinstance(result, Err)
        assert isinstance(result.error, DigestMismatch)
        assert result.error.target == ARM

    def test_not_executable(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        area.binary_path(A64).chmod(0o644)

        result = area.verify(MATRIX)

        assert result == Err(NotExecutable(target=A64, path=area.binary_path(A64)))

    def test_missing_metadata(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        area.metadata_path(X86).unlink()

        result = area.verify(MATRIX)

        assert isinstance(result, Err)
        assert isinstance(result.error, MetadataInvalid)
        assert result.error.reason == "missing"

    def test_metadata_for_other_target(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        shutil.copyfile(area.metadata_path(ARM), area.metadata_path(X86))

        result = area.verify(MATRIX)

        assert isinstance(result, Err)
        assert isinstance(result.error, MetadataInvalid)


class TestRestoreModes:
    def test_restores_stripped_execute_bits(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        # Artifact transfer rewrites files without their mode.
        for target in (X86, A64):
            area.binary_path(target).chmod(0o644)

        result = area.restore_modes()

        assert result == Ok([A64, X86])
        assert isinstance(area.verify(MATRIX), Ok)

    def test_nothing_to_restore(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        assert area.restore_modes() == Ok([])

    def test_refuses_tampered_binary(self, area: StagingArea, tmp_path: Path) -> None:
        _stage_all(area, tmp_path)
        path = area.binary_path(ARM)
        path.write_bytes(b"tampered")
        path.chmod(0o644)

        result = area.restore_modes()

        assert isinstance(result, Err)
        assert isinstance(result.error, DigestMismatch)
        assert _mode(path) == 0o644
