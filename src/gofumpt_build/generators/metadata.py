"""Concurrent execution of the metadata generators."""

from __future__ import annotations

import concurrent.futures

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.config import BuildConfig
from gofumpt_build.generators.licenses import generate_licenses
from gofumpt_build.generators.schema import generate_schema
from gofumpt_build.generators.version import VersionResult, generate_version
from gofumpt_build.process import CommandRunner, run_command
from gofumpt_build.writer import WriteResult

logger = structlog.get_logger(__name__)


class MetadataResult(BaseModel):
    """Outcome of the metadata stage.

    Attributes:
        version: Version string and version.txt outcome
        schema_write: schema.json outcome
        licenses_write: License report outcome
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: VersionResult = Field(..., description="Version generator result")
    schema_write: WriteResult = Field(..., description="Schema generator result")
    licenses_write: WriteResult = Field(..., description="License generator result")

    @property
    def writes(self) -> list[WriteResult]:
        """All three write outcomes."""
        return [self.version.write, self.schema_write, self.licenses_write]


def generate_metadata(config: BuildConfig, run: CommandRunner = run_command) -> MetadataResult:
    """Run the version, schema and license generators concurrently.

    Every generator is waited for before returning, even when one fails.
    The first failure in submission order is then re-raised.

    Args:
        config: Build configuration.
        run: Command runner for the license report tool.

    Returns:
        MetadataResult with all three outcomes.
    """
    logger.info("metadata_started")

    with concurrent.futures.ThreadPoolExecutor(max_workers=3) as executor:
        version_future = executor.submit(generate_version, config)
        schema_future = executor.submit(generate_schema, config)
        licenses_future = executor.submit(generate_licenses, config, run)
        futures = [version_future, schema_future, licenses_future]
        concurrent.futures.wait(futures)

    for future in futures:
        exc = future.exception()
        if exc is not None:
            raise exc

    result = MetadataResult(
        version=version_future.result(),
        schema_write=schema_future.result(),
        licenses_write=licenses_future.result(),
    )
    logger.info(
        "metadata_completed",
        version=result.version.version,
        written=sum(1 for w in result.writes if w.written),
    )
    return result
