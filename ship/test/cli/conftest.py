from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from ship.test.cli._utils import SHIP_TOML


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project root with ship.toml, selected through SHIP_PROJECT_ROOT."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "ship.toml").write_text(SHIP_TOML, encoding="utf-8")
    monkeypatch.setenv("SHIP_PROJECT_ROOT", str(root))
    monkeypatch.setenv("COLUMNS", "200")
    for name in ("SHIP_STAGING_DIR", "SHIP_INSTALL_PATH", "SHIP_MACHINE"):
        monkeypatch.delenv(name, raising=False)
    return root
