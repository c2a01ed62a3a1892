"""Configuration schema generator.

The plugin accepts three options under its ``gofumpt`` config key. They are
modelled by :class:`PluginConfig`, which is both the source of the
published JSON schema and the validator for fixture ``config.json`` files.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.config import BuildConfig
from gofumpt_build.generators.version import read_version
from gofumpt_build.writer import GeneratedArtifact, WriteResult

logger = structlog.get_logger(__name__)

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"

LANG_VERSION_PATTERN = r"^$|^(go)?1(\.(0|[1-9][0-9]*)){0,2}$"
"""Empty, or a Go version such as ``1.21``, ``go1.22`` or ``go1.22.3``."""


class PluginConfig(BaseModel):
    """Options understood by the gofumpt plugin.

    Field aliases are the camelCase keys used in dprint configuration.

    Example:
        >>> PluginConfig.model_validate({"langVersion": "go1.22", "extraRules": True})
        PluginConfig(lang_version='go1.22', module_path='', extra_rules=True)
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    lang_version: str = Field(
        default="",
        alias="langVersion",
        pattern=LANG_VERSION_PATTERN,
        examples=["go1.22", "1.21"],
        description=(
            "Go language version to format for, such as \"go1.22\". "
            "Empty means unset, in which case the baseline Go version is assumed."
        ),
    )
    module_path: str = Field(
        default="",
        alias="modulePath",
        examples=["mvdan.cc/gofumpt"],
        description=(
            "Module path of the code being formatted, used to group "
            "the module's own imports. Empty means unknown."
        ),
    )
    extra_rules: bool = Field(
        default=False,
        alias="extraRules",
        description="Enable gofumpt's extra formatting rules, stricter than the defaults.",
    )

    def to_options(self) -> dict[str, Any]:
        """Return the options keyed the way dprint expects them."""
        return self.model_dump(by_alias=True)


def build_schema(version: str, id_template: str | None = None) -> dict[str, Any]:
    """Build the JSON schema document for a plugin version.

    Args:
        version: Plugin version, embedded in ``$id`` as ``v<version>``.
        id_template: ``$id`` template with a ``{version}`` placeholder.

    Returns:
        Schema dictionary with exactly the three plugin options.

    Example:
        >>> build_schema("1.2.3")["$id"]
        'https://plugins.dprint.dev/jakebailey/gofumpt/v1.2.3/schema.json'
    """
    if id_template is None:
        id_template = BuildConfig().schema_id_template

    generated = PluginConfig.model_json_schema(by_alias=True)
    properties: dict[str, Any] = {}
    for name, prop in generated["properties"].items():
        properties[name] = {key: value for key, value in prop.items() if key != "title"}

    return {
        "$schema": JSON_SCHEMA_DRAFT,
        "$id": id_template.format(version=version),
        "title": "gofumpt",
        "description": "Configuration for the gofumpt dprint plugin.",
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
    }


def render_schema(version: str, id_template: str | None = None) -> str:
    """Serialize :func:`build_schema` with two-space indent and a trailing newline."""
    return json.dumps(build_schema(version, id_template), indent=2) + "\n"


def generate_schema(config: BuildConfig) -> WriteResult:
    """Write the configuration schema for the descriptor's version.

    Args:
        config: Build configuration.

    Returns:
        WriteResult for the schema output path.
    """
    version = read_version(config.path(config.descriptor_file))
    text = render_schema(version, config.schema_id_template)
    result = GeneratedArtifact.from_text(config.path(config.schema_output), text).write()
    logger.info("schema_generated", version=version, status=result.status.value)
    return result
