"""Exception hierarchy for gofumpt-build.

This module defines the exception classes used throughout the pipeline:
- BuildError: Base exception for all build errors
- DescriptorError: package.json is missing a usable version
- ManifestError: go.mod has no module declaration
- CommandError: An external tool exited with a non-zero status
- WasmDecodeError: The compiled module could not be parsed
- ModulePatchError: The compiled module cannot be made self-initializing
- VerificationMismatchError: Formatted output differs from the golden file

None of these are retried. They indicate misconfiguration or a failing
tool, and the pipeline halts on the first one raised.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class BuildError(Exception):
    """Base exception for gofumpt-build.

    Args:
        user_message: Message to display to the user.
        internal_details: Optional technical details. Logged, not displayed.

    Example:
        >>> raise BuildError(
        ...     "Compiled module is empty",
        ...     internal_details="backend=local path=plugin.wasm",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details

        if internal_details:
            logger.error(
                "build_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class DescriptorError(BuildError):
    """Raised when the project descriptor has no usable version field."""


class ManifestError(BuildError):
    """Raised when the module manifest has no `module <path>` declaration.

    Attributes:
        file_path: Path to the manifest that was parsed (if known).
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        if file_path:
            user_message = f"{user_message} (in {file_path})"
        super().__init__(user_message, internal_details=internal_details)
        self.file_path = file_path


class CommandError(BuildError):
    """Raised when an external command exits with a non-zero status.

    The tool's own diagnostic output is kept unmodified in ``stderr`` so
    callers can surface it verbatim.

    Attributes:
        argv: The command line that was executed.
        returncode: Exit status of the process.
        stderr: Captured standard error, decoded as UTF-8.

    Example:
        >>> raise CommandError(["tinygo", "build"], 1, "error: no Go files")
        # User sees: "Command 'tinygo build' failed with exit code 1"
    """

    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        command = " ".join(argv[:2]) if argv else "<empty>"
        super().__init__(f"Command '{command}' failed with exit code {returncode}")
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr

        logger.error(
            "command_failed",
            argv=argv,
            returncode=returncode,
        )


class WasmDecodeError(BuildError):
    """Raised when bytes are not a well-formed WebAssembly binary.

    Attributes:
        offset: Byte offset where decoding failed (if known).
    """

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        if offset is not None:
            message = f"{message} at offset {offset}"
        super().__init__(message)
        self.offset = offset


class ModulePatchError(BuildError):
    """Raised when the start function cannot be set.

    This happens when ``_initialize`` is missing (the toolchain was not
    targeting a reactor module) or has a signature other than ``[] -> []``.
    """


class VerificationMismatchError(BuildError):
    """Raised when formatted output differs from the expected output.

    Attributes:
        fixture: Name of the fixture that failed.
        actual: Text produced by the formatter.
        expected: Golden text from the fixture.
        diff: Unified diff from expected to actual.
    """

    def __init__(self, fixture: str, actual: str, expected: str, diff: str) -> None:
        super().__init__(f"Fixture '{fixture}' output does not match expected.go\n{diff}")
        self.fixture = fixture
        self.actual = actual
        self.expected = expected
        self.diff = diff
