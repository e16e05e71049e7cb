"""Artifact staging area.

One convention, used by every stage and by the image build:

    <staging_root>/<build-target>/<binary>
    <staging_root>/<build-target>/artifact.json

``artifact.json`` records the digest, size and permission bits of the staged
binary. Each matrix leg writes only its own slot, so legs staged on different
machines merge by plain directory union when artifacts are fetched.

Artifact transfer steps are known to drop the execute bit. ``verify`` reports
that, and ``restore_modes`` puts the recorded mode back for binaries whose
content still matches their digest.
"""

from __future__ import annotations

import json
import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.core.structured import as_str_dict, get_int, get_str
from ship.platform.arch import BuildTarget, parse_target
from ship.platform.files import (
    EXEC_BITS,
    atomic_copy,
    atomic_write_text,
    is_executable,
    sha256_file,
)

from .errors import (
    ArtifactNotFound,
    DigestMismatch,
    MetadataInvalid,
    NotExecutable,
    PartialStaging,
    StageFailed,
    StagingError,
    UnexpectedArtifact,
)

__all__ = ["METADATA_FILENAME", "StagedArtifact", "StagingArea"]

METADATA_FILENAME = "artifact.json"
_SCHEMA = 1


@dataclass(frozen=True, slots=True)
class StagedArtifact:
    target: BuildTarget
    path: Path
    sha256: str
    size: int
    mode: int

    def to_json(self, binary: str) -> str:
        data = {
            "schema": _SCHEMA,
            "target": str(self.target),
            "binary": binary,
            "sha256": self.sha256,
            "size": self.size,
            "mode": f"{self.mode:04o}",
        }
        return json.dumps(data, indent=2, sort_keys=True) + "\n"


class StagingArea:
    """Directory-backed store of artifacts keyed by build target."""

    def __init__(self, root: Path, binary: str) -> None:
        self._root = root
        self._binary = binary

    @property
    def root(self) -> Path:
        return self._root

    def slot_dir(self, target: BuildTarget) -> Path:
        return self._root / str(target)

    def binary_path(self, target: BuildTarget) -> Path:
        return self.slot_dir(target) / self._binary

    def metadata_path(self, target: BuildTarget) -> Path:
        return self.slot_dir(target) / METADATA_FILENAME

    def stage(self, target: BuildTarget, source: Path) -> Result[StagedArtifact, StagingError]:
        """Copy a built binary into its slot and record its metadata.

        The staged copy always carries the execute bits: the input is a
        freshly built executable even if the build host's umask said
        otherwise.
        """
        if not source.is_file():
            return Err(ArtifactNotFound(target=target, path=source))

        dst = self.binary_path(target)
        try:
            mode = stat.S_IMODE(source.stat().st_mode) | EXEC_BITS
            atomic_copy(source, dst, mode=mode)
            staged = StagedArtifact(
                target=target,
                path=dst,
                sha256=sha256_file(dst),
                size=dst.stat().st_size,
                mode=mode,
            )
            atomic_write_text(self.metadata_path(target), staged.to_json(self._binary))
        except OSError as e:
            return Err(StageFailed(target=target, reason=str(e)))

        return Ok(staged)

    def lookup(self, target: BuildTarget) -> Path | None:
        """Staged binary for ``target``, or None if the slot is empty."""
        path = self.binary_path(target)
        if path.is_file():
            return path
        return None

    def targets(self) -> set[BuildTarget]:
        """Targets whose slot holds a binary."""
        found: set[BuildTarget] = set()
        for name in self._entry_names():
            target = parse_target(name)
            if target is not None and self.lookup(target) is not None:
                found.add(target)
        return found

    def _entry_names(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.name for p in self._root.iterdir() if not p.name.startswith("."))

    def read_metadata(self, target: BuildTarget) -> Result[StagedArtifact, StagingError]:
        meta_path = self.metadata_path(target)
        try:
            raw: object = json.loads(meta_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(MetadataInvalid(target=target, path=meta_path, reason="missing"))
        except (OSError, json.JSONDecodeError) as e:
            return Err(MetadataInvalid(target=target, path=meta_path, reason=str(e)))

        data = as_str_dict(raw)
        if data is None:
            return Err(MetadataInvalid(target=target, path=meta_path, reason="not an object"))

        recorded_target = get_str(data, "target")
        sha256 = get_str(data, "sha256")
        size = get_int(data, "size")
        mode_str = get_str(data, "mode")
        if recorded_target != str(target):
            return Err(
                MetadataInvalid(
                    target=target,
                    path=meta_path,
                    reason=f"records target {recorded_target!r}",
                )
            )
        if sha256 is None or size is None or mode_str is None:
            return Err(MetadataInvalid(target=target, path=meta_path, reason="incomplete"))
        try:
            mode = int(mode_str, 8)
        except ValueError:
            reason = f"bad mode {mode_str!r}"
            return Err(MetadataInvalid(target=target, path=meta_path, reason=reason))

        return Ok(
            StagedArtifact(
                target=target,
                path=self.binary_path(target),
                sha256=sha256,
                size=size,
                mode=mode,
            )
        )

    def _check_digest(self, recorded: StagedArtifact) -> Result[None, StagingError]:
        try:
            actual = sha256_file(recorded.path)
        except OSError as e:
            return Err(StageFailed(target=recorded.target, reason=str(e)))
        if actual != recorded.sha256:
            return Err(
                DigestMismatch(target=recorded.target, expected=recorded.sha256, actual=actual)
            )
        return Ok(None)

    def verify(self, expected: Iterable[BuildTarget]) -> Result[list[StagedArtifact], StagingError]:
        """Check the area holds exactly ``expected``, intact and executable."""
        wanted = list(expected)
        staged = self.targets()

        missing = tuple(t for t in wanted if t not in staged)
        if missing:
            return Err(PartialStaging(missing=missing))

        wanted_names = {str(t) for t in wanted}
        extra = tuple(name for name in self._entry_names() if name not in wanted_names)
        if extra:
            return Err(UnexpectedArtifact(names=extra))

        verified: list[StagedArtifact] = []
        for target in wanted:
            meta = self.read_metadata(target)
            if isinstance(meta, Err):
                return meta
            digest = self._check_digest(meta.value)
            if isinstance(digest, Err):
                return digest
            if not is_executable(meta.value.path):
                return Err(NotExecutable(target=target, path=meta.value.path))
            verified.append(meta.value)
        return Ok(verified)

    def restore_modes(self) -> Result[list[BuildTarget], StagingError]:
        """Re-apply recorded permission bits; return the targets changed.

        A binary whose content no longer matches its digest is reported, not
        repaired.
        """
        repaired: list[BuildTarget] = []
        for target in sorted(self.targets(), key=str):
            meta = self.read_metadata(target)
            if isinstance(meta, Err):
                return meta
            digest = self._check_digest(meta.value)
            if isinstance(digest, Err):
                return digest

            path = meta.value.path
            try:
                current = stat.S_IMODE(path.stat().st_mode)
                if current != meta.value.mode:
                    os.chmod(path, meta.value.mode)
                    repaired.append(target)
            except OSError as e:
                return Err(StageFailed(target=target, reason=str(e)))
        return Ok(repaired)
