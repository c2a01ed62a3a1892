"""Golden-file fixtures.

A fixture is a directory holding:

- ``input.go.txt``: unformatted source (``.txt`` keeps Go tooling away from it)
- ``expected.go``: the canonically formatted result
- ``config.json`` (optional): plugin options for this fixture
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.generators.schema import PluginConfig

INPUT_FILENAME = "input.go.txt"
EXPECTED_FILENAME = "expected.go"
CONFIG_FILENAME = "config.json"
SCRATCH_FILENAME = "test.go"


class Fixture(BaseModel):
    """An input/expected pair. Read-only."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    directory: Path = Field(..., description="Fixture directory")

    @property
    def name(self) -> str:
        return self.directory.name

    @property
    def input(self) -> Path:
        return self.directory / INPUT_FILENAME

    @property
    def expected(self) -> Path:
        return self.directory / EXPECTED_FILENAME

    @property
    def scratch(self) -> Path:
        """Working copy formatted in place, next to the input."""
        return self.directory / SCRATCH_FILENAME

    def plugin_config(self) -> PluginConfig:
        """Plugin options from ``config.json``, or defaults when absent.

        Raises:
            ValidationError: If config.json has unknown or invalid options.
        """
        path = self.directory / CONFIG_FILENAME
        if not path.exists():
            return PluginConfig()
        return PluginConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))


def is_fixture_dir(directory: Path) -> bool:
    """True if ``directory`` has both an input and an expected file."""
    return (directory / INPUT_FILENAME).is_file() and (directory / EXPECTED_FILENAME).is_file()


def discover_fixtures(root: Path) -> list[Fixture]:
    """Find fixtures under ``root``.

    ``root`` itself counts if it is a fixture directory; otherwise every
    direct sub-directory that is one is returned, sorted by name.

    Raises:
        FileNotFoundError: If ``root`` does not exist.
    """
    if not root.is_dir():
        raise FileNotFoundError(f"Fixtures directory not found: {root}")
    if is_fixture_dir(root):
        return [Fixture(directory=root)]
    return [
        Fixture(directory=child)
        for child in sorted(root.iterdir())
        if child.is_dir() and is_fixture_dir(child)
    ]
