"""Metadata generators.

Each generator reads its own inputs from the project and writes one
distinct output path through the idempotent writer, so all of them can run
at the same time.
"""

from __future__ import annotations

from gofumpt_build.generators.licenses import (
    LICENSE_SEPARATOR,
    REPORT_TEMPLATE,
    generate_licenses,
    parse_module_path,
    render_license,
)
from gofumpt_build.generators.metadata import MetadataResult, generate_metadata
from gofumpt_build.generators.schema import (
    PluginConfig,
    build_schema,
    generate_schema,
    render_schema,
)
from gofumpt_build.generators.version import VersionResult, generate_version, read_version

__all__ = [
    "LICENSE_SEPARATOR",
    "REPORT_TEMPLATE",
    "MetadataResult",
    "PluginConfig",
    "VersionResult",
    "build_schema",
    "generate_licenses",
    "generate_metadata",
    "generate_schema",
    "generate_version",
    "parse_module_path",
    "read_version",
    "render_license",
    "render_schema",
]
