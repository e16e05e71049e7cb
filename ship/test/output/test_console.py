"""Tests for ship.output.console module."""

from __future__ import annotations

import pytest

from ship.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_shorthands(self) -> None:
        console = MockConsole()
        console.success("staged")
        console.error("failed")
        console.info("note")
        assert console.messages == ["OK staged", "error: failed", "info: note"]
        assert console.has_error()

    def test_find(self) -> None:
        console = MockConsole()
        console.print("x86_64-unknown-linux-gnu", Style.DIM)
        console.print("aarch64-unknown-linux-gnu")
        assert len(console.find("aarch64")) == 1

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.print("ok")


class TestRichConsole:
    def test_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.success("staged [bold]x[/bold]")
        captured = capsys.readouterr()
        assert "OK" in captured.out
        # Messages are escaped, never parsed as markup.
        assert "[bold]x[/bold]" in captured.out
        assert captured.err == ""

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(stderr=True)
        console.error("unsupported architecture")
        console.print("supported: x86_64", Style.DIM)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "error:" in captured.err
        assert "supported: x86_64" in captured.err
