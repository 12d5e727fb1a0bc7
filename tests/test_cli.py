"""Tests for the CLI entry point."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from endzeit.cli import app, setup_logging
from endzeit.models import ExecutionResult, RunOutcome

runner = CliRunner()

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell command")


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Keep the CLI from replacing the test runner's logging handlers."""
    with patch("endzeit.cli.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("ENDZEIT_TICK_INTERVAL", "ENDZEIT_QUIT_KEY", "ENDZEIT_BELL", "ENDZEIT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestArgumentErrors:
    @patch("endzeit.countdown.TerminalMode")
    def test_invalid_time(self, mock_mode) -> None:
        result = runner.invoke(app, ["-t", "99:99:99"])
        assert result.exit_code == 2
        assert "Invalid time" in result.output
        mock_mode.assert_not_called()

    @patch("endzeit.countdown.TerminalMode")
    def test_invalid_date(self, mock_mode) -> None:
        result = runner.invoke(app, ["--date", "31/12/2025"])
        assert result.exit_code == 2
        assert "Invalid date" in result.output
        mock_mode.assert_not_called()

    @patch("endzeit.countdown.run_countdown")
    def test_invalid_tick(self, mock_run) -> None:
        result = runner.invoke(app, ["--tick", "0"])
        assert result.exit_code == 2
        assert "Invalid option" in result.output
        mock_run.assert_not_called()


class TestCompleted:
    @patch("endzeit.executor.run_command")
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_without_execute(self, mock_run, mock_exec) -> None:
        result = runner.invoke(app, ["-d", "2025-12-31", "-t", "23:59:00", "--no-bell"])
        assert result.exit_code == 0
        assert "Endzeit reached" in result.output
        mock_exec.assert_not_called()

        target = mock_run.call_args.args[0]
        assert target == datetime(2025, 12, 31, 23, 59, 0).astimezone()

    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_announces_target(self, _mock_run) -> None:
        result = runner.invoke(app, ["-d", "2030-01-02", "-t", "03:04:05", "--no-bell"])
        assert "Counting down to 2030-01-02 03:04:05" in result.output

    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_tick_override_reaches_loop(self, mock_run) -> None:
        runner.invoke(app, ["--tick", "1.5", "--no-bell"])
        config = mock_run.call_args.args[1]
        assert config.tick_interval == 1.5
        assert config.bell is False

    @patch("endzeit.display.bell")
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_rings_bell(self, _mock_run, mock_bell) -> None:
        runner.invoke(app, [])
        mock_bell.assert_called_once()

    @patch("endzeit.display.bell")
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_no_bell(self, _mock_run, mock_bell) -> None:
        runner.invoke(app, ["--no-bell"])
        mock_bell.assert_not_called()

    @patch(
        "endzeit.executor.run_command",
        return_value=ExecutionResult(command="backup.sh", exit_status=0, output="all done\n"),
    )
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_execute_success(self, _mock_run, mock_exec) -> None:
        result = runner.invoke(app, ["--execute", "backup.sh", "--no-bell"])
        assert result.exit_code == 0
        mock_exec.assert_called_once_with("backup.sh")
        assert "all done" in result.output
        assert "finished successfully" in result.output

    @patch(
        "endzeit.executor.run_command",
        return_value=ExecutionResult(command="backup.sh", exit_status=4),
    )
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_execute_failure_is_a_warning(self, _mock_run, _mock_exec) -> None:
        result = runner.invoke(app, ["--execute", "backup.sh", "--no-bell"])
        assert result.exit_code == 0
        assert "Warning" in result.output
        assert "status 4" in result.output

    @posix_only
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.COMPLETED)
    def test_execute_false(self, _mock_run) -> None:
        result = runner.invoke(app, ["--execute", "false", "--no-bell"])
        assert result.exit_code == 0
        assert "Warning" in result.output


class TestQuit:
    @patch("endzeit.executor.run_command")
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.QUIT_BY_USER)
    def test_quit_skips_execute(self, _mock_run, mock_exec) -> None:
        result = runner.invoke(app, ["-t", "23:59:59", "--execute", "echo hi"])
        assert result.exit_code == 0
        assert "stopped early" in result.output
        assert "Endzeit reached" not in result.output
        mock_exec.assert_not_called()


class TestTerminalErrors:
    def test_not_a_terminal(self) -> None:
        # CliRunner's stdin is not a TTY, so acquiring terminal mode fails.
        result = runner.invoke(app, ["-t", "23:59:59"])
        assert result.exit_code == 1
        assert "not an interactive terminal" in result.output

    @patch("endzeit.executor.run_command")
    @patch("endzeit.countdown.run_countdown")
    def test_io_error(self, mock_run, mock_exec) -> None:
        from endzeit.errors import TerminalIOError

        mock_run.side_effect = TerminalIOError("Could not draw to terminal: EIO")
        result = runner.invoke(app, ["--execute", "echo hi"])
        assert result.exit_code == 1
        assert "Could not draw" in result.output
        mock_exec.assert_not_called()


class TestVerbose:
    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.QUIT_BY_USER)
    def test_verbose_enables_debug(self, _mock_run, _quiet_logging) -> None:
        runner.invoke(app, ["-v"])
        _quiet_logging.assert_called_once_with("DEBUG")

    @patch("endzeit.countdown.run_countdown", return_value=RunOutcome.QUIT_BY_USER)
    def test_level_from_env(self, _mock_run, _quiet_logging, monkeypatch) -> None:
        monkeypatch.setenv("ENDZEIT_LOG_LEVEL", "info")
        runner.invoke(app, [])
        _quiet_logging.assert_called_once_with("INFO")


class TestSetupLogging:
    def test_installs_rich_handler(self) -> None:
        from rich.logging import RichHandler

        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("DEBUG")
            assert root.level == logging.DEBUG
            assert any(isinstance(h, RichHandler) for h in root.handlers)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestModuleEntryPoint:
    def test_import_does_not_run_app(self) -> None:
        import importlib

        sys.modules.pop("endzeit.__main__", None)
        with patch("endzeit.cli.app") as mock_app:
            importlib.import_module("endzeit.__main__")
        mock_app.assert_not_called()
