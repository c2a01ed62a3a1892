"""Idempotent file writes for generated artifacts.

A generated file is only rewritten when its content changes, so re-running
the pipeline leaves modification times (and anything keyed on them, such
as content-hash caches or version control) untouched.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

logger = structlog.get_logger(__name__)


class WriteStatus(str, Enum):
    """Outcome of an idempotent write.

    Attributes:
        WRITTEN: Content was written to disk
        SKIPPED: File already held identical content
    """

    WRITTEN = "written"
    SKIPPED = "skipped"


class WriteResult(BaseModel):
    """Result of writing one artifact.

    Attributes:
        path: Target file path
        status: Whether the file was written or skipped
        reason: Why the writer chose that status
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(..., description="Target path")
    status: WriteStatus = Field(..., description="Write outcome")
    reason: str = Field(default="", description="Why the write happened or not")

    @property
    def written(self) -> bool:
        """True if the file was modified."""
        return self.status == WriteStatus.WRITTEN


class GeneratedArtifact(BaseModel):
    """A file produced by a generator.

    Constructed fresh on each run and never mutated.

    Example:
        >>> artifact = GeneratedArtifact(path=Path("version.txt"), content=b"1.2.3")
        >>> artifact.write().status
        <WriteStatus.WRITTEN: 'written'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path = Field(..., description="Output path")
    content: bytes = Field(..., description="File content")

    @classmethod
    def from_text(cls, path: Path, text: str) -> GeneratedArtifact:
        """Create an artifact from UTF-8 text."""
        return cls(path=path, content=text.encode("utf-8"))

    def write(self) -> WriteResult:
        """Persist the artifact through :func:`write_if_changed`."""
        return write_if_changed(self.path, self.content)


def _read_existing(path: Path) -> bytes | None:
    # Unreadable is treated the same as absent: fall through to a write.
    try:
        return path.read_bytes()
    except OSError:
        return None


def write_if_changed(path: Path, content: bytes | str) -> WriteResult:
    """Write ``content`` to ``path`` unless the file already holds it.

    Parent directories are not created. Calls for different paths may run
    concurrently; concurrent calls for the same path are not coordinated.

    Args:
        path: Target file.
        content: New content; ``str`` is encoded as UTF-8.

    Returns:
        WriteResult with ``SKIPPED`` when the bytes on disk are identical,
        otherwise ``WRITTEN``.

    Raises:
        OSError: If the file cannot be written.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    existing = _read_existing(path)
    if existing == content:
        logger.debug("artifact_skipped", path=str(path), reason="content unchanged")
        return WriteResult(path=path, status=WriteStatus.SKIPPED, reason="content unchanged")

    reason = "file missing or unreadable" if existing is None else "content changed"
    path.write_bytes(content)
    logger.debug("artifact_written", path=str(path), reason=reason, size=len(content))
    return WriteResult(path=path, status=WriteStatus.WRITTEN, reason=reason)
