"""gofumpt-build: build tooling for the gofumpt dprint plugin.

This package provides:
- Metadata generators (version, configuration schema, license report)
- Compilation through a local TinyGo toolchain or a container
- WebAssembly post-processing that makes the plugin self-initializing
- Golden-file verification through the dprint CLI
"""

from __future__ import annotations

__version__ = "0.1.0"

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import (
    BuildError,
    CommandError,
    DescriptorError,
    ManifestError,
    ModulePatchError,
    VerificationMismatchError,
    WasmDecodeError,
)
from gofumpt_build.pipeline import PipelineResult, run_pipeline

__all__ = [
    "__version__",
    "BuildConfig",
    # Errors
    "BuildError",
    "CommandError",
    "DescriptorError",
    "ManifestError",
    "ModulePatchError",
    "VerificationMismatchError",
    "WasmDecodeError",
    # Pipeline
    "PipelineResult",
    "run_pipeline",
]
