"""Pipeline orchestration: generate → build → patch → verify.

Stages run strictly in order; only metadata generation fans out
internally. Any failure halts the run. Metadata already written stays on
disk, which is safe because every generator writes idempotently.
"""

from __future__ import annotations

import time
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.compiler import BuildResult, compile_module
from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import BuildError
from gofumpt_build.generators import MetadataResult, generate_metadata
from gofumpt_build.patcher import patch_artifact
from gofumpt_build.process import CommandRunner, run_command
from gofumpt_build.verify import VerificationHarness, VerificationResult, discover_fixtures

logger = structlog.get_logger(__name__)


class PipelineResult(BaseModel):
    """Outcome of a full pipeline run.

    Attributes:
        metadata: Metadata generation outcomes
        backend: Backend that compiled the module
        artifact: Path of the patched module
        verifications: One result per fixture
        total_duration_ms: Wall-clock duration
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    metadata: MetadataResult = Field(..., description="Metadata stage result")
    backend: str = Field(..., description="Compilation backend")
    artifact: Path = Field(..., description="Patched module path")
    verifications: list[VerificationResult] = Field(
        default_factory=list, description="Fixture results"
    )
    total_duration_ms: int = Field(default=0, ge=0, description="Total duration")

    @property
    def passed(self) -> bool:
        """True if every fixture matched."""
        return all(v.passed for v in self.verifications)


def build_artifact(
    config: BuildConfig,
    use_container: bool = False,
    run: CommandRunner = run_command,
) -> tuple[BuildResult, Path]:
    """Compile the plugin and write the patched artifact.

    Returns:
        The raw build result and the artifact path.
    """
    build = compile_module(config, use_container, run)
    artifact = patch_artifact(build.data, config.path(config.artifact_file))
    return build, artifact


def verify_all(
    config: BuildConfig,
    run: CommandRunner = run_command,
    fixtures_root: Path | None = None,
) -> list[VerificationResult]:
    """Verify every fixture, stopping at the first mismatch.

    Raises:
        VerificationMismatchError: On the first fixture whose output differs.
        BuildError: If no fixtures are found.
    """
    root = fixtures_root or config.path(config.fixtures_dir)
    fixtures = discover_fixtures(root)
    if not fixtures:
        raise BuildError(f"No fixtures found in {root}")

    harness = VerificationHarness(config, run)
    results: list[VerificationResult] = []
    for fixture in fixtures:
        result = harness.verify(fixture)
        results.append(result)
        result.assert_passed()
    return results


def run_pipeline(
    config: BuildConfig,
    use_container: bool = False,
    run: CommandRunner = run_command,
) -> PipelineResult:
    """Run every stage in order.

    Args:
        config: Build configuration.
        use_container: Compile in a container instead of with the local toolchain.
        run: Command runner for all external tools.

    Returns:
        PipelineResult once every fixture has passed.
    """
    start_time = time.monotonic()
    log = logger.bind(work_dir=str(config.work_dir))
    log.info("pipeline_started", use_container=use_container)

    metadata = generate_metadata(config, run)
    build, artifact = build_artifact(config, use_container, run)
    verifications = verify_all(config, run)

    total_duration_ms = int((time.monotonic() - start_time) * 1000)
    log.info(
        "pipeline_completed",
        backend=build.backend,
        fixtures=len(verifications),
        total_duration_ms=total_duration_ms,
    )
    return PipelineResult(
        metadata=metadata,
        backend=build.backend,
        artifact=artifact,
        verifications=verifications,
        total_duration_ms=total_duration_ms,
    )
