"""Golden-file verification of the built plugin."""

from __future__ import annotations

from gofumpt_build.verify.fixtures import (
    EXPECTED_FILENAME,
    INPUT_FILENAME,
    SCRATCH_FILENAME,
    Fixture,
    discover_fixtures,
)
from gofumpt_build.verify.harness import (
    CACHE_ENV_VAR,
    VerificationHarness,
    VerificationResult,
    verify_fixture,
)

__all__ = [
    "CACHE_ENV_VAR",
    "EXPECTED_FILENAME",
    "INPUT_FILENAME",
    "SCRATCH_FILENAME",
    "Fixture",
    "VerificationHarness",
    "VerificationResult",
    "discover_fixtures",
    "verify_fixture",
]
