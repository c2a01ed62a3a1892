"""Unit tests for external command execution."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from gofumpt_build.errors import CommandError
from gofumpt_build.process import EXIT_COMMAND_NOT_FOUND, CommandResult, run_command


class TestCommandResult:
    """Tests for CommandResult."""

    def test_check_returns_stdout(self) -> None:
        """A successful command yields its stdout."""
        result = CommandResult(argv=["tool"], returncode=0, stdout=b"out")
        assert result.ok
        assert result.check() == b"out"

    def test_check_raises_with_stderr(self) -> None:
        """A failed command raises CommandError carrying stderr verbatim."""
        result = CommandResult(
            argv=["tinygo", "build", "-o", "x"], returncode=2, stderr=b"error: no Go files\n"
        )

        with pytest.raises(CommandError) as exc_info:
            result.check()

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "error: no Go files\n"
        assert exc_info.value.user_message == "Command 'tinygo build' failed with exit code 2"

    def test_argv_required(self) -> None:
        """An empty command line is rejected."""
        with pytest.raises(ValueError):
            CommandResult(argv=[], returncode=0)


class TestRunCommand:
    """Tests for run_command against real processes."""

    def test_captures_stdout(self, tmp_path: Path) -> None:
        """Stdout bytes are captured unmodified."""
        result = run_command(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'\\x00asm')"],
            tmp_path,
            dict(os.environ),
        )

        assert result.ok
        assert result.stdout == b"\x00asm"

    def test_runs_in_cwd_with_env(self, tmp_path: Path) -> None:
        """The working directory and environment are passed through."""
        code = "import os; print(os.getcwd()); print(os.environ['GOFUMPT_TEST'])"
        env = {**os.environ, "GOFUMPT_TEST": "marker"}

        result = run_command([sys.executable, "-c", code], tmp_path, env)

        cwd, marker = result.stdout.decode().splitlines()
        assert Path(cwd).resolve() == tmp_path.resolve()
        assert marker == "marker"

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        """A failing command is reported, not raised."""
        code = "import sys; sys.stderr.write('boom'); sys.exit(3)"

        result = run_command([sys.executable, "-c", code], tmp_path, dict(os.environ))

        assert result.returncode == 3
        assert result.stderr == b"boom"

    def test_missing_executable(self, tmp_path: Path) -> None:
        """A missing executable becomes exit status 127."""
        result = run_command(["gofumpt-build-no-such-tool"], tmp_path, dict(os.environ))

        assert result.returncode == EXIT_COMMAND_NOT_FOUND
        assert b"gofumpt-build-no-such-tool: command not found" in result.stderr
