"""Unit tests for concurrent metadata generation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import CommandError, ManifestError
from gofumpt_build.generators.metadata import generate_metadata
from gofumpt_build.writer import WriteStatus


def _report(argv: list[str], cwd: Path, env: dict[str, str]) -> bytes:
    return b"\nexample.org/dep v1.0.0\nLicense: MIT\n\nMIT text\n"


class TestGenerateMetadata:
    """Tests for generate_metadata."""

    def test_writes_all_outputs(self, build_config: BuildConfig, make_runner: Any) -> None:
        """Version, schema and licenses are all written."""
        result = generate_metadata(build_config, make_runner({"go-licenses": _report}))

        assert result.version.version == "1.2.3"
        assert [w.path.name for w in result.writes] == [
            "version.txt",
            "schema.json",
            "licenses.txt",
        ]
        assert all(w.written for w in result.writes)

    def test_rerun_skips_everything(self, build_config: BuildConfig, make_runner: Any) -> None:
        """A second run with unchanged inputs writes nothing."""
        runner = make_runner({"go-licenses": _report})
        generate_metadata(build_config, runner)

        result = generate_metadata(build_config, runner)

        assert {w.status for w in result.writes} == {WriteStatus.SKIPPED}

    def test_failure_keeps_other_outputs(
        self, build_config: BuildConfig, make_runner: Any
    ) -> None:
        """A failing generator still lets the others finish writing."""
        build_config.path("go.mod").write_text("go 1.22\n")

        with pytest.raises(ManifestError):
            generate_metadata(build_config, make_runner({"go-licenses": _report}))

        assert build_config.path("version.txt").read_text() == "1.2.3"
        assert build_config.path("schema.json").exists()
        assert not build_config.path("licenses.txt").exists()

    def test_tool_failure_propagates(self, build_config: BuildConfig, make_runner: Any) -> None:
        """go-licenses errors reach the caller."""
        runner = make_runner(
            {"go-licenses": lambda argv, cwd, env: make_runner.failure(argv, "boom")}
        )

        with pytest.raises(CommandError):
            generate_metadata(build_config, runner)
