from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from ship.cli.app import app
from ship.test.cli._utils import write_staged


def test_resolve_aarch64_installs_and_exits_zero(runner: CliRunner, project: Path) -> None:
    staged = write_staged(project, "aarch64-unknown-linux-gnu")
    install = project / "bin" / "app"

    result = runner.invoke(app, ["resolve", "--machine", "aarch64", "--install", str(install)])

    assert result.exit_code == 0, result.output
    assert install.read_bytes() == staged.read_bytes()


def test_resolve_unsupported_exits_one(runner: CliRunner, project: Path) -> None:
    for target in ("x86_64-unknown-linux-gnu", "aarch64-unknown-linux-gnu"):
        write_staged(project, target)
    install = project / "bin" / "app"

    result = runner.invoke(app, ["resolve", "--machine", "riscv64", "--install", str(install)])

    assert result.exit_code == 1
    assert "unsupported architecture" in result.output
    assert not install.exists()


def test_resolve_missing_artifact_is_distinct(runner: CliRunner, project: Path) -> None:
    write_staged(project, "x86_64-unknown-linux-gnu")
    install = project / "bin" / "app"

    result = runner.invoke(app, ["resolve", "--machine", "armv7l", "--install", str(install)])

    assert result.exit_code == 4
    assert "no staged artifact" in result.output
    assert not install.exists()


def test_resolve_reads_machine_from_env(runner: CliRunner, project: Path) -> None:
    write_staged(project, "armv7-unknown-linux-gnueabihf")
    install = project / "bin" / "app"

    result = runner.invoke(
        app,
        ["resolve", "--install", str(install)],
        env={"SHIP_MACHINE": "armv7l"},
    )

    assert result.exit_code == 0, result.output
    assert install.read_bytes() == b"binary for armv7-unknown-linux-gnueabihf"


def test_resolve_env_paths(runner: CliRunner, project: Path, tmp_path: Path) -> None:
    staging = tmp_path / "elsewhere"
    staged = staging / "x86_64-unknown-linux-gnu" / "app"
    staged.parent.mkdir(parents=True)
    staged.write_bytes(b"x86")
    install = tmp_path / "installed"

    result = runner.invoke(
        app,
        ["resolve", "--machine", "x86_64"],
        env={"SHIP_STAGING_DIR": str(staging), "SHIP_INSTALL_PATH": str(install)},
    )

    assert result.exit_code == 0, result.output
    assert install.read_bytes() == b"x86"


def test_resolve_dry_run_installs_nothing(runner: CliRunner, project: Path) -> None:
    write_staged(project, "x86_64-unknown-linux-gnu")
    install = project / "bin" / "app"

    result = runner.invoke(
        app, ["resolve", "--machine", "x86_64", "--install", str(install), "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert not install.exists()


def test_resolve_rejects_machine_outside_matrix(runner: CliRunner, project: Path) -> None:
    (project / "ship.toml").write_text(
        '[project]\nbinary = "app"\n[matrix]\ntargets = ["x86_64-unknown-linux-gnu"]\n',
        encoding="utf-8",
    )
    write_staged(project, "aarch64-unknown-linux-gnu")
    install = project / "bin" / "app"

    result = runner.invoke(app, ["resolve", "--machine", "aarch64", "--install", str(install)])

    assert result.exit_code == 1
    assert not install.exists()


def test_invalid_config_is_env_error(runner: CliRunner, project: Path) -> None:
    (project / "ship.toml").write_text("[matrix]\ntargets = []\n", encoding="utf-8")

    result = runner.invoke(app, ["resolve", "--machine", "x86_64"])

    assert result.exit_code == 2
    assert "must not be empty" in result.output
