"""End-to-end verification of the built plugin through dprint.

For each fixture the input is copied to a scratch ``test.go`` next to it,
dprint formats that file with the freshly built plugin and a private cache
directory, and the result is compared byte for byte with ``expected.go``.
The scratch file and cache directory are removed whatever the outcome.
"""

from __future__ import annotations

import difflib
import json
import shutil
import tempfile
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import VerificationMismatchError
from gofumpt_build.process import CommandRunner, run_command
from gofumpt_build.verify.fixtures import Fixture

logger = structlog.get_logger(__name__)

CACHE_ENV_VAR = "DPRINT_CACHE_DIR"
PLUGIN_CONFIG_KEY = "gofumpt"


class VerificationResult(BaseModel):
    """Outcome of verifying one fixture.

    Attributes:
        fixture: Fixture name
        passed: True if the formatted output equals expected.go
        actual: Formatted output
        expected: Golden output
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fixture: str = Field(..., description="Fixture name")
    passed: bool = Field(..., description="Output matched expected")
    actual: bytes = Field(..., description="Formatted output")
    expected: bytes = Field(..., description="Expected output")

    def diff(self) -> str:
        """Unified diff from expected to actual."""
        return "".join(
            difflib.unified_diff(
                self.expected.decode("utf-8", errors="replace").splitlines(keepends=True),
                self.actual.decode("utf-8", errors="replace").splitlines(keepends=True),
                fromfile="expected.go",
                tofile="actual",
            )
        )

    def assert_passed(self) -> None:
        """Raise if the output did not match.

        Raises:
            VerificationMismatchError: With actual, expected and the diff.
        """
        if not self.passed:
            raise VerificationMismatchError(
                self.fixture,
                actual=self.actual.decode("utf-8", errors="replace"),
                expected=self.expected.decode("utf-8", errors="replace"),
                diff=self.diff(),
            )


class VerificationHarness:
    """Runs fixtures through dprint with the built plugin.

    Each run gets its own cache directory, so harness runs never share
    cached plugin compilations and may run in parallel.

    Example:
        >>> harness = VerificationHarness(config)
        >>> result = harness.verify(Fixture(directory=Path("testdata/basic")))
        >>> result.assert_passed()
    """

    def __init__(
        self,
        config: BuildConfig,
        run: CommandRunner = run_command,
        artifact: Path | None = None,
    ) -> None:
        self.config = config
        self.artifact = artifact or config.path(config.artifact_file)
        self._run = run
        self._log = logger.bind(component="verification_harness")

    def verify(self, fixture: Fixture) -> VerificationResult:
        """Format a fixture's input and compare it with the expected output.

        Raises:
            CommandError: If dprint exits with a non-zero status.
            ValidationError: If the fixture's config.json is invalid.
        """
        log = self._log.bind(fixture=fixture.name)
        options = fixture.plugin_config().to_options()
        scratch = fixture.scratch
        cache_dir: Path | None = None

        try:
            shutil.copyfile(fixture.input, scratch)
            cache_dir = Path(tempfile.mkdtemp(prefix="dprint-cache-"))
            dprint_config = cache_dir / "dprint.json"
            dprint_config.write_text(
                json.dumps(
                    {PLUGIN_CONFIG_KEY: options, "plugins": [str(self.artifact.resolve())]},
                    indent=2,
                ),
                encoding="utf-8",
            )

            argv = [
                self.config.dprint,
                "fmt",
                "--log-level=debug",
                "--incremental=false",
                "--config",
                str(dprint_config),
                str(scratch.resolve()),
            ]
            env = {**self.config.env, CACHE_ENV_VAR: str(cache_dir)}
            log.info("verification_started", cache_dir=str(cache_dir))
            self._run(argv, fixture.directory, env).check()

            actual = scratch.read_bytes()
            expected = fixture.expected.read_bytes()
        finally:
            scratch.unlink(missing_ok=True)
            if cache_dir is not None:
                shutil.rmtree(cache_dir, ignore_errors=True)

        passed = actual == expected
        log.info("verification_completed", passed=passed)
        return VerificationResult(
            fixture=fixture.name,
            passed=passed,
            actual=actual,
            expected=expected,
        )


def verify_fixture(
    config: BuildConfig,
    fixture: Fixture,
    run: CommandRunner = run_command,
) -> VerificationResult:
    """Convenience wrapper: verify one fixture with a new harness."""
    return VerificationHarness(config, run).verify(fixture)
