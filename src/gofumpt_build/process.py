"""Subprocess invocation as a function call.

Every external tool (tinygo, docker, go-licenses, dprint) is run through a
:data:`CommandRunner`. The default runner wraps :func:`subprocess.run`;
tests inject a fake with the same signature.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.errors import CommandError

logger = structlog.get_logger(__name__)

EXIT_COMMAND_NOT_FOUND = 127


class CommandResult(BaseModel):
    """Outcome of one external command.

    Attributes:
        argv: The command line that was executed.
        returncode: Exit status.
        stdout: Captured standard output bytes.
        stderr: Captured standard error bytes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    argv: list[str] = Field(..., min_length=1, description="Command line")
    returncode: int = Field(..., description="Exit status")
    stdout: bytes = Field(default=b"", description="Captured stdout")
    stderr: bytes = Field(default=b"", description="Captured stderr")

    @property
    def ok(self) -> bool:
        """True if the command exited with status 0."""
        return self.returncode == 0

    def check(self) -> bytes:
        """Return stdout, or raise if the command failed.

        Returns:
            The captured stdout payload.

        Raises:
            CommandError: If the exit status is non-zero. Carries the
                command's stderr unmodified.
        """
        if not self.ok:
            raise CommandError(
                self.argv,
                self.returncode,
                self.stderr.decode("utf-8", errors="replace"),
            )
        return self.stdout


CommandRunner = Callable[[Sequence[str], Path, Mapping[str, str]], CommandResult]


def run_command(argv: Sequence[str], cwd: Path, env: Mapping[str, str]) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        argv: Command line; ``argv[0]`` is looked up on ``env["PATH"]``.
        cwd: Working directory for the process.
        env: Complete environment for the process.

    Returns:
        CommandResult. A missing executable is reported as exit status 127
        instead of raising, so callers handle every failure through
        :meth:`CommandResult.check`.
    """
    argv = list(argv)
    log = logger.bind(command=argv[0])
    log.debug("command_started", argv=argv, cwd=str(cwd))

    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=dict(env),
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as e:
        log.error("command_not_found", error=str(e))
        return CommandResult(
            argv=argv,
            returncode=EXIT_COMMAND_NOT_FOUND,
            stderr=f"{argv[0]}: command not found\n".encode(),
        )

    log.debug(
        "command_completed",
        returncode=completed.returncode,
        stdout_bytes=len(completed.stdout),
    )
    return CommandResult(
        argv=argv,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )
