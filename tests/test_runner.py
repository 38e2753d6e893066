"""Tests for the external process runner (subprocess is always mocked)."""

import subprocess
from unittest.mock import MagicMock, patch

from mcpget.install.runner import RESTART_COMMANDS, UV_INSTALL, ProcessRunner


class TestHasBinary:
    def test_not_on_path(self):
        with patch("mcpget.install.runner.shutil.which", return_value=None):
            assert ProcessRunner().has_binary("uvx") is False

    def test_answers_version(self):
        with (
            patch("mcpget.install.runner.shutil.which", return_value="/usr/bin/uvx"),
            patch("mcpget.install.runner.subprocess.run") as run,
        ):
            run.return_value = MagicMock(returncode=0)
            assert ProcessRunner().has_binary("uvx") is True
        assert run.call_args[0][0] == ["uvx", "--version"]

    def test_broken_binary(self):
        with (
            patch("mcpget.install.runner.shutil.which", return_value="/usr/bin/uvx"),
            patch("mcpget.install.runner.subprocess.run", side_effect=OSError("exec format")),
        ):
            assert ProcessRunner().has_binary("uvx") is False


class TestRun:
    def test_string_runs_in_shell(self):
        with patch("mcpget.install.runner.subprocess.run") as run:
            run.return_value = MagicMock(returncode=0)
            assert ProcessRunner("darwin").install_uv() is True
        assert run.call_args[0][0] == UV_INSTALL["darwin"]
        assert run.call_args[1]["shell"] is True

    def test_nonzero_exit(self):
        with patch("mcpget.install.runner.subprocess.run") as run:
            run.return_value = MagicMock(returncode=1, stderr="nope")
            assert ProcessRunner().run(["false"]) is False


class TestRestart:
    def test_stop_then_start(self):
        runner = ProcessRunner("darwin", restart_delay=0)
        with (
            patch("mcpget.install.runner.subprocess.run") as run,
            patch("mcpget.install.runner.subprocess.Popen") as popen,
        ):
            run.return_value = MagicMock(returncode=0)
            assert runner.restart_host_app() is True
        stop, start = RESTART_COMMANDS["darwin"]
        assert run.call_args[0][0] == stop
        assert popen.call_args[0][0] == start

    def test_failed_stop_still_starts(self):
        runner = ProcessRunner("linux", restart_delay=0)
        with (
            patch("mcpget.install.runner.subprocess.run", side_effect=subprocess.SubprocessError),
            patch("mcpget.install.runner.subprocess.Popen") as popen,
        ):
            assert runner.restart_host_app() is True
        popen.assert_called_once()

    def test_start_failure(self):
        runner = ProcessRunner("linux", restart_delay=0)
        with (
            patch("mcpget.install.runner.subprocess.run") as run,
            patch("mcpget.install.runner.subprocess.Popen", side_effect=FileNotFoundError),
        ):
            run.return_value = MagicMock(returncode=0)
            assert runner.restart_host_app() is False

    def test_waits_between_stop_and_start(self):
        runner = ProcessRunner("linux", restart_delay=1.5)
        with (
            patch("mcpget.install.runner.subprocess.run") as run,
            patch("mcpget.install.runner.subprocess.Popen"),
            patch("mcpget.install.runner.time.sleep") as sleep,
        ):
            run.return_value = MagicMock(returncode=0)
            runner.restart_host_app()
        sleep.assert_called_once_with(1.5)
