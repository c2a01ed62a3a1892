"""Version generator.

The ``version`` field of ``package.json`` is the single source of truth for
the plugin version. It is copied verbatim to ``version.txt``.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import DescriptorError
from gofumpt_build.writer import GeneratedArtifact, WriteResult

logger = structlog.get_logger(__name__)


class VersionResult(BaseModel):
    """Version string and the outcome of writing it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: str = Field(..., min_length=1, description="Project version")
    write: WriteResult = Field(..., description="version.txt write outcome")


def read_version(descriptor: Path) -> str:
    """Read the ``version`` field from a JSON project descriptor.

    Args:
        descriptor: Path to package.json.

    Returns:
        The version string, exactly as written in the descriptor.

    Raises:
        FileNotFoundError: If the descriptor does not exist.
        DescriptorError: If the descriptor is not JSON or has no
            non-empty string ``version``.
    """
    try:
        data = json.loads(descriptor.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DescriptorError(
            f"Invalid JSON in {descriptor.name}",
            internal_details=f"{descriptor}: {e}",
        ) from e

    version = data.get("version") if isinstance(data, dict) else None
    if not isinstance(version, str) or not version:
        raise DescriptorError(f"{descriptor.name} has no 'version' field")
    return version


def generate_version(config: BuildConfig) -> VersionResult:
    """Write the descriptor version to the version output path.

    No trailing newline is added.

    Args:
        config: Build configuration.

    Returns:
        VersionResult with the version for downstream use.
    """
    version = read_version(config.path(config.descriptor_file))
    artifact = GeneratedArtifact.from_text(config.path(config.version_output), version)
    result = artifact.write()
    logger.info("version_generated", version=version, status=result.status.value)
    return VersionResult(version=version, write=result)
