from __future__ import annotations

import sys
from unittest.mock import patch

import pytest
from rich.console import Console

from cpancli.utils.console import (
    CPANCLI_THEME,
    _should_use_color,
    _get_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)


@pytest.mark.unit
class TestShouldUseColor:
    """Tests for _should_use_color."""

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reconfigure_console(color=True)
        monkeypatch.setenv("NO_COLOR", "1")
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(sys.stdout) is False

    def test_ci_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reconfigure_console(color=True)
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("CI", "true")
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(sys.stdout) is False

    def test_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reconfigure_console(color=True)
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(sys.stdout) is True

    def test_disabled_by_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("CI", raising=False)
        reconfigure_console(color=False)
        with patch.object(sys.stdout, "isatty", return_value=True):
            assert _should_use_color(sys.stdout) is False

    def test_stream_without_isatty(self) -> None:
        reconfigure_console(color=True)
        assert _should_use_color(object()) is False


@pytest.mark.unit
class TestConsoleLifecycle:
    """Tests for the console singletons."""

    def test_singleton(self) -> None:
        assert _get_console() is _get_console()

    def test_reconfigure_rebuilds(self) -> None:
        first = _get_console()
        reconfigure_console()
        second = _get_console()

        assert first is not second
        assert isinstance(second, Console)

    def test_theme_styles(self) -> None:
        assert {"success", "error", "warning", "info"} <= set(CPANCLI_THEME.styles)


@pytest.mark.unit
class TestMessages:
    """Tests for the status message helpers."""

    def test_success_to_stdout(self, capsys) -> None:
        print_success("Configuration written to out.pm")

        captured = capsys.readouterr()
        assert captured.out == "[OK] Configuration written to out.pm\n"
        assert captured.err == ""

    def test_info_to_stdout(self, capsys) -> None:
        print_info("Checking Business::ISBN")
        assert capsys.readouterr().out == "Checking Business::ISBN\n"

    def test_error_to_stderr(self, capsys) -> None:
        print_error("Config file [x.pm] does not exist!")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "[ERROR] Config file [x.pm] does not exist!\n"

    def test_warning_custom_prefix(self, capsys) -> None:
        print_warning("careful", prefix="!!")
        assert capsys.readouterr().err == "!! careful\n"


@pytest.mark.unit
class TestPrintTable:
    """Tests for print_table."""

    def test_renders_rows(self, capsys) -> None:
        print_table(
            [{"Module": "Foo::Bar", "Version": "1.0"}, {"Module": "[Baz]", "Version": "2"}],
            title="Modules",
        )

        out = capsys.readouterr().out
        assert "Modules" in out
        assert "Foo::Bar" in out
        assert "[Baz]" in out

    def test_header_order(self, capsys) -> None:
        print_table([{"a": "1", "b": "2"}], headers=["b", "a"])

        header = capsys.readouterr().out.splitlines()[1]
        assert header.index("b") < header.index("a")

    def test_empty_prints_nothing(self, capsys) -> None:
        print_table([])
        assert capsys.readouterr().out == ""
