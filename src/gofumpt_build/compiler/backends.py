"""Compilation backends.

Both backends run the same TinyGo invocation with the same flags and
return the raw module bytes:

- LocalBackend runs ``tinygo`` on the host, writes to the artifact path and
  reads it back.
- ContainerBackend runs ``tinygo`` in a throwaway container with the
  project bind-mounted and captures the module from stdout.

The container build disables VCS stamping (the mounted checkout may not be
a trusted git directory inside the container), so the two backends produce
semantically equivalent modules that are not necessarily byte-identical.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog
from pydantic import BaseModel, ConfigDict, Field

from gofumpt_build.config import BuildConfig
from gofumpt_build.errors import BuildError
from gofumpt_build.process import CommandRunner, run_command

logger = structlog.get_logger(__name__)

TOOLCHAIN_FLAGS: tuple[str, ...] = (
    "-target=wasip1",
    "-buildmode=c-shared",
    "-scheduler=none",
    "-no-debug",
    "-opt=2",
)
"""Flags shared by both backends: portable WASI reactor module, no goroutine
scheduler (the host drives execution), no debug info, optimization level 2."""

CONTAINER_MOUNT = "/src"
CONTAINER_ENV = {"GOFLAGS": "-buildvcs=false"}


class BuildResult(BaseModel):
    """Raw module bytes from exactly one backend, before post-processing."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: str = Field(..., description="Backend that produced the module")
    data: bytes = Field(..., description="Compiled WebAssembly module")


class CompilationBackend(ABC):
    """Base class for compilation backends.

    Attributes:
        name: Backend name for identification and logging
        config: Build configuration
    """

    name: str = ""

    def __init__(self, config: BuildConfig, run: CommandRunner = run_command) -> None:
        self.config = config
        self._run = run
        self._log = logger.bind(backend=self.name)

    def build(self, args: Sequence[str] = TOOLCHAIN_FLAGS) -> BuildResult:
        """Compile the project and wrap the output.

        Raises:
            CommandError: If the toolchain or container runtime fails.
            BuildError: If the backend produced no bytes.
        """
        self._log.info("compile_started", flags=list(args))
        data = self.produce(args)
        if not data:
            raise BuildError(
                f"{self.name} backend produced an empty module",
                internal_details=f"work_dir={self.config.work_dir}",
            )
        self._log.info("compile_completed", size=len(data))
        return BuildResult(backend=self.name, data=data)

    @abstractmethod
    def produce(self, args: Sequence[str]) -> bytes:
        """Run the toolchain with ``args`` and return the module bytes."""


class LocalBackend(CompilationBackend):
    """Runs TinyGo from the host ``PATH``."""

    name = "local"

    def produce(self, args: Sequence[str]) -> bytes:
        # tinygo runs in work_dir; the output path has to be absolute.
        output = self.config.work_dir.resolve() / self.config.artifact_file
        argv = [self.config.tinygo, "build", *args, "-o", str(output), "."]
        self._run(argv, self.config.work_dir, self.config.env).check()
        return output.read_bytes()


class ContainerBackend(CompilationBackend):
    """Runs TinyGo inside an auto-removed container."""

    name = "container"

    def produce(self, args: Sequence[str]) -> bytes:
        work_dir = self.config.work_dir.resolve()
        argv = [
            self.config.docker,
            "run",
            "--rm",
            "-v",
            f"{work_dir}:{CONTAINER_MOUNT}",
            "-w",
            CONTAINER_MOUNT,
        ]
        for key, value in CONTAINER_ENV.items():
            argv += ["-e", f"{key}={value}"]
        argv += [self.config.container_image, "tinygo", "build", *args, "-o", "/dev/stdout", "."]
        return self._run(argv, self.config.work_dir, self.config.env).check()


def select_backend(
    use_container: bool,
    config: BuildConfig,
    run: CommandRunner = run_command,
) -> CompilationBackend:
    """Pick the backend for this run."""
    backend_class: type[CompilationBackend] = ContainerBackend if use_container else LocalBackend
    return backend_class(config, run)


def compile_module(
    config: BuildConfig,
    use_container: bool = False,
    run: CommandRunner = run_command,
) -> BuildResult:
    """Compile the plugin with the selected backend.

    Args:
        config: Build configuration.
        use_container: Use the container backend instead of the local toolchain.
        run: Command runner.

    Returns:
        BuildResult with the unpatched module bytes.
    """
    return select_backend(use_container, config, run).build()
