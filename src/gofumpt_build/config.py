"""Build configuration model.

All ambient process state used by the pipeline (working directory,
environment, tool names, file locations) lives in :class:`BuildConfig`.
Backends, generators and the verification harness receive it explicitly
and never read ``os.environ`` or the current directory themselves.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.errors import BuildError

CONFIG_FILENAME = "gofumpt-build.yaml"
"""Optional per-project overrides, looked up in the working directory."""

DEFAULT_SCHEMA_ID = "https://plugins.dprint.dev/jakebailey/gofumpt/v{version}/schema.json"


class BuildConfig(BaseModel):
    """Configuration for one pipeline run.

    File names are relative to ``work_dir`` unless given as absolute paths.

    Attributes:
        work_dir: Root of the plugin project (contains go.mod, package.json).
        env: Base environment for every subprocess.
        descriptor_file: Project descriptor holding the ``version`` field.
        manifest_file: Go module manifest.
        license_file: The project's own license text.
        version_output: Where the version string is written.
        schema_output: Where the configuration JSON schema is written.
        license_output: Where the aggregated license report is written.
        artifact_file: The compiled and patched WebAssembly module.
        fixtures_dir: Directory of golden-file fixtures.
        schema_id_template: ``$id`` of the schema; ``{version}`` is substituted.
        tinygo: TinyGo executable.
        docker: Container runtime executable.
        container_image: Image providing TinyGo for the container backend.
        go_licenses: License report tool executable.
        dprint: Formatter front-end executable.

    Example:
        >>> config = BuildConfig(work_dir=Path("."), env={"PATH": "/usr/bin"})
        >>> config.path(config.artifact_file)
        PosixPath('plugin.wasm')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    work_dir: Path = Field(default=Path("."), description="Plugin project root")
    env: dict[str, str] = Field(default_factory=dict, description="Subprocess environment")

    descriptor_file: str = Field(default="package.json", description="Project descriptor")
    manifest_file: str = Field(default="go.mod", description="Go module manifest")
    license_file: str = Field(default="LICENSE", description="Project license text")

    version_output: str = Field(default="version.txt", description="Version output path")
    schema_output: str = Field(default="schema.json", description="Schema output path")
    license_output: str = Field(default="licenses.txt", description="License report path")
    artifact_file: str = Field(default="plugin.wasm", description="Compiled module path")
    fixtures_dir: str = Field(default="testdata", description="Golden-file fixtures")

    schema_id_template: str = Field(default=DEFAULT_SCHEMA_ID, description="Schema $id")

    tinygo: str = Field(default="tinygo", description="TinyGo executable")
    docker: str = Field(default="docker", description="Container runtime executable")
    container_image: str = Field(
        default="tinygo/tinygo:0.34.0",
        min_length=1,
        description="TinyGo container image",
    )
    go_licenses: str = Field(default="go-licenses", description="License report tool")
    dprint: str = Field(default="dprint", description="dprint executable")

    def path(self, name: str) -> Path:
        """Resolve a configured file name against the working directory."""
        return self.work_dir / name

    @classmethod
    def load(cls, work_dir: Path, env: dict[str, str] | None = None) -> BuildConfig:
        """Build a configuration for ``work_dir``.

        Reads ``gofumpt-build.yaml`` from ``work_dir`` when present; its keys
        override the defaults. ``work_dir`` and ``env`` always come from the
        caller.

        Args:
            work_dir: Plugin project root.
            env: Base environment for subprocesses.

        Returns:
            Validated BuildConfig.

        Raises:
            yaml.YAMLError: If the override file is not valid YAML.
            BuildError: If the override file is not a mapping.
            ValidationError: If the override file has unknown or invalid keys.
        """
        overrides: dict[str, Any] = {}
        config_path = work_dir / CONFIG_FILENAME
        if config_path.exists():
            with config_path.open("r") as f:
                overrides = yaml.safe_load(f) or {}
            if not isinstance(overrides, dict):
                raise BuildError(f"{CONFIG_FILENAME} must contain a mapping of options")

        return cls.model_validate({**overrides, "work_dir": work_dir, "env": env or {}})
