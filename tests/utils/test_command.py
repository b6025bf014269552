"""Tests for the shell command runner."""

from __future__ import annotations

import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from glb_batch.errors import CommandError
from glb_batch.utils.command import CommandRunner, default_search_dirs, resolve_tool


class TestBuildEnv:
    """Tests for CommandRunner.build_env."""

    def test_prepends_search_dirs_to_inherited_path(self) -> None:
        """Injected dirs should come before the inherited PATH, in order."""
        runner = CommandRunner(
            search_dirs=["/usr/local/bin", "/opt/homebrew/bin"],
            env={"PATH": "/usr/bin:/bin", "HOME": "/home/me"},
        )

        env = runner.build_env()

        assert env["PATH"].split(os.pathsep) == [
            "/usr/local/bin",
            "/opt/homebrew/bin",
            "/usr/bin",
            "/bin",
        ]
        assert env["HOME"] == "/home/me"

    def test_does_not_mutate_process_environment(self) -> None:
        """Building the env should leave os.environ untouched."""
        before = os.environ.get("PATH")
        CommandRunner(search_dirs=["/somewhere"]).build_env()
        assert os.environ.get("PATH") == before

    def test_missing_inherited_path(self) -> None:
        """A base env without PATH still yields the search dirs."""
        runner = CommandRunner(search_dirs=["/a"], env={})
        assert runner.build_env()["PATH"].split(os.pathsep)[0] == "/a"


class TestDefaults:
    """Tests for default_search_dirs and resolve_tool."""

    def test_default_dirs(self) -> None:
        assert default_search_dirs({}) == ["/usr/local/bin", "/opt/homebrew/bin"]

    def test_env_dirs_come_first_without_duplicates(self) -> None:
        env = {"GLB_BATCH_SEARCH_PATH": os.pathsep.join(["/x", "/usr/local/bin"])}
        assert default_search_dirs(env) == ["/x", "/usr/local/bin", "/opt/homebrew/bin"]

    def test_resolve_tool_default(self) -> None:
        assert resolve_tool({}) == "gltf-transform"

    def test_resolve_tool_override(self) -> None:
        env = {"GLB_BATCH_GLTF_TRANSFORM": "/opt/bin/gltf-transform"}
        assert resolve_tool(env) == "/opt/bin/gltf-transform"


class TestRun:
    """Tests for CommandRunner.run."""

    @patch("glb_batch.utils.command.subprocess.run")
    def test_returns_stdout_on_success(self, mock_run: MagicMock) -> None:
        """Should return captured stdout and pass the augmented env."""
        mock_run.return_value = subprocess.CompletedProcess(
            args="x", returncode=0, stdout="report", stderr=""
        )
        runner = CommandRunner(search_dirs=["/extra"], env={"PATH": "/usr/bin"})

        assert runner.run("gltf-transform inspect a.glb") == "report"

        _, kwargs = mock_run.call_args
        assert kwargs["shell"] is True
        assert kwargs["env"]["PATH"].startswith("/extra")
        assert "timeout" not in kwargs

    @patch("glb_batch.utils.command.subprocess.run")
    def test_nonzero_exit_raises_command_error(self, mock_run: MagicMock) -> None:
        """Should carry exit status and stderr."""
        mock_run.return_value = subprocess.CompletedProcess(
            args="x", returncode=3, stdout="", stderr="bad input\n"
        )
        runner = CommandRunner(search_dirs=[], env={})

        with pytest.raises(CommandError) as excinfo:
            runner.run("gltf-transform weld a.glb b.glb")

        assert excinfo.value.returncode == 3
        assert excinfo.value.stderr == "bad input"
        assert "exit 3" in str(excinfo.value)

    @patch("glb_batch.utils.command.subprocess.run")
    def test_spawn_failure_raises_command_error(self, mock_run: MagicMock) -> None:
        """OSError from spawning should become a CommandError."""
        mock_run.side_effect = OSError("no shell")
        runner = CommandRunner(search_dirs=[], env={})

        with pytest.raises(CommandError) as excinfo:
            runner.run("anything")

        assert excinfo.value.returncode is None
        assert "no shell" in str(excinfo.value)

    def test_real_shell_round_trip(self) -> None:
        """A real shell command should run with the augmented PATH."""
        runner = CommandRunner(search_dirs=["/nonexistent-dir"])

        out = runner.run('echo "$PATH"')

        assert out.startswith("/nonexistent-dir")

    def test_real_shell_failure(self) -> None:
        runner = CommandRunner(search_dirs=[])

        with pytest.raises(CommandError) as excinfo:
            runner.run("echo oops >&2; exit 4")

        assert excinfo.value.returncode == 4
        assert excinfo.value.stderr == "oops"

    def test_undecodable_output_is_replaced(self) -> None:
        """Non-UTF-8 bytes from the tool should not escape as a decode error."""
        runner = CommandRunner(search_dirs=[])

        with pytest.raises(CommandError) as excinfo:
            runner.run(r"printf '\377\376 bad' >&2; exit 1")

        assert excinfo.value.returncode == 1
        assert excinfo.value.stderr.endswith(" bad")
        assert "�" in excinfo.value.stderr


class TestWhich:
    """Tests for CommandRunner.which."""

    @patch("glb_batch.utils.command.shutil.which")
    def test_looks_up_on_augmented_path(self, mock_which: MagicMock) -> None:
        mock_which.return_value = "/extra/gltf-transform"
        runner = CommandRunner(search_dirs=["/extra"], env={"PATH": "/usr/bin"})

        assert runner.which("gltf-transform") == "/extra/gltf-transform"
        mock_which.assert_called_once_with(
            "gltf-transform", path=os.pathsep.join(["/extra", "/usr/bin"])
        )
