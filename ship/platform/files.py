"""Filesystem helpers.

Writes go through a temp file in the destination directory followed by
``os.replace``, so readers see either the old file or the complete new one.
"""

from __future__ import annotations

import hashlib
import os
import shutil
import stat
import tempfile
from pathlib import Path

__all__ = [
    "EXEC_BITS",
    "atomic_copy",
    "atomic_write_text",
    "is_executable",
    "sha256_file",
]

EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def _temp_sibling(path: Path) -> tuple[int, Path]:
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    return fd, Path(tmp_name)


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = _temp_sibling(path)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_copy(src: Path, dst: Path, *, mode: int | None = None) -> None:
    """Copy ``src`` to ``dst`` atomically.

    Permission bits are copied from ``src`` unless ``mode`` is given. Raises
    OSError on any failure; ``dst`` is then left untouched.
    """
    dst.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = _temp_sibling(dst)

    try:
        with os.fdopen(fd, "wb") as out, src.open("rb") as inp:
            shutil.copyfileobj(inp, out, 1024 * 1024)
            out.flush()
            os.fsync(out.fileno())
        if mode is None:
            shutil.copymode(src, tmp_path)
        else:
            os.chmod(tmp_path, stat.S_IMODE(mode))
        os.replace(tmp_path, dst)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def is_executable(path: Path) -> bool:
    """True if ``path`` is a regular file with all execute bits set."""
    try:
        st = path.stat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode) and (st.st_mode & EXEC_BITS) == EXEC_BITS
