"""Unit tests for the configuration schema generator."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from gofumpt_build.config import BuildConfig
from gofumpt_build.generators.schema import (
    JSON_SCHEMA_DRAFT,
    PluginConfig,
    build_schema,
    generate_schema,
    render_schema,
)
from gofumpt_build.writer import WriteStatus


class TestBuildSchema:
    """Tests for build_schema."""

    def test_envelope(self) -> None:
        """The schema is a closed object with a versioned $id."""
        schema = build_schema("1.2.3")

        assert schema["$schema"] == JSON_SCHEMA_DRAFT
        assert schema["$id"] == "https://plugins.dprint.dev/jakebailey/gofumpt/v1.2.3/schema.json"
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False

    def test_exactly_three_properties(self) -> None:
        """Only the three plugin options are described."""
        properties = build_schema("1.2.3")["properties"]

        assert list(properties) == ["langVersion", "modulePath", "extraRules"]

    def test_property_types_and_defaults(self) -> None:
        """Types and defaults match the plugin options."""
        properties = build_schema("1.2.3")["properties"]

        assert properties["langVersion"]["type"] == "string"
        assert properties["langVersion"]["default"] == ""
        assert properties["modulePath"]["type"] == "string"
        assert properties["modulePath"]["default"] == ""
        assert properties["extraRules"]["type"] == "boolean"
        assert properties["extraRules"]["default"] is False

    def test_properties_have_descriptions_not_titles(self) -> None:
        """Generated titles are dropped; descriptions are kept."""
        for prop in build_schema("1.2.3")["properties"].values():
            assert "title" not in prop
            assert prop["description"]

    def test_custom_id_template(self) -> None:
        """The $id template is configurable."""
        schema = build_schema("2.0.0", "https://example.com/{version}.json")
        assert schema["$id"] == "https://example.com/2.0.0.json"

    def test_render_is_deterministic(self) -> None:
        """Rendering is stable and ends with one newline."""
        text = render_schema("1.2.3")

        assert text == render_schema("1.2.3")
        assert text.endswith("}\n")
        assert json.loads(text) == build_schema("1.2.3")


class TestPluginConfig:
    """Tests for PluginConfig validation."""

    def test_defaults(self) -> None:
        """Defaults are empty strings and extra rules off."""
        assert PluginConfig().to_options() == {
            "langVersion": "",
            "modulePath": "",
            "extraRules": False,
        }

    def test_camel_case_keys(self) -> None:
        """dprint-style keys are accepted."""
        config = PluginConfig.model_validate({"langVersion": "go1.22", "extraRules": True})

        assert config.lang_version == "go1.22"
        assert config.extra_rules is True

    @pytest.mark.parametrize("version", ["", "1", "1.21", "go1.22", "go1.22.3"])
    def test_valid_lang_versions(self, version: str) -> None:
        """Go versions with or without the go prefix are accepted."""
        assert PluginConfig(langVersion=version).lang_version == version

    @pytest.mark.parametrize("version", ["go2", "1.x", "v1.22", "go1.022"])
    def test_invalid_lang_versions(self, version: str) -> None:
        """Anything else is rejected."""
        with pytest.raises(ValidationError):
            PluginConfig(langVersion=version)

    def test_unknown_option(self) -> None:
        """Unknown options are rejected, as the schema forbids them."""
        with pytest.raises(ValidationError):
            PluginConfig.model_validate({"simplify": True})


class TestGenerateSchema:
    """Tests for generate_schema."""

    def test_writes_schema_for_descriptor_version(self, build_config: BuildConfig) -> None:
        """The written schema embeds the descriptor version."""
        result = generate_schema(build_config)

        assert result.written
        written = json.loads(build_config.path("schema.json").read_text())
        assert "/v1.2.3/" in written["$id"]

    def test_second_run_skips(self, build_config: BuildConfig) -> None:
        """An unchanged schema is not rewritten."""
        generate_schema(build_config)
        assert generate_schema(build_config).status == WriteStatus.SKIPPED
