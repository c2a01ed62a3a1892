"""CLI error handling for gofumpt-build.

Wraps pipeline exceptions into user-friendly messages with exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
import yaml
from pydantic import ValidationError as PydanticValidationError

from gofumpt_build.cli.output import error, raw
from gofumpt_build.config import CONFIG_FILENAME
from gofumpt_build.errors import BuildError, CommandError, VerificationMismatchError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Build failure, failed tool, mismatch, invalid config
EXIT_SYSTEM_ERROR = 2  # Missing file, permissions, write failure


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting."""
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - container_image: String should have at least 1 character"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        msg = e["msg"]
        lines.append(f"  - {loc}: {msg}")

    return "\n".join(lines)


def handle_exception(err: Exception) -> NoReturn:
    """Translate a pipeline exception into a CLIError.

    A failed tool's own diagnostic output is printed unmodified before the
    summary line.

    Raises:
        CLIError: Always.
    """
    if isinstance(err, CommandError):
        if err.stderr:
            raw(err.stderr if err.stderr.endswith("\n") else err.stderr + "\n")
        raise CLIError(err.user_message) from err

    if isinstance(err, VerificationMismatchError):
        raise CLIError(str(err)) from err

    if isinstance(err, BuildError):
        raise CLIError(err.user_message) from err

    if isinstance(err, PydanticValidationError):
        raise CLIError(format_pydantic_error(err)) from err

    if isinstance(err, yaml.YAMLError):
        raise CLIError(f"Invalid YAML in {CONFIG_FILENAME}: {err}") from err

    if isinstance(err, PermissionError):
        raise CLIError(
            f"Permission denied: {err.filename or err}", exit_code=EXIT_SYSTEM_ERROR
        ) from err

    if isinstance(err, FileNotFoundError):
        raise CLIError(
            f"File not found: {err.filename or err}", exit_code=EXIT_SYSTEM_ERROR
        ) from err

    if isinstance(err, OSError):
        raise CLIError(f"I/O error: {err}", exit_code=EXIT_SYSTEM_ERROR) from err

    raise err
