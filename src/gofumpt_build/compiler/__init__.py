"""Compilation of the plugin to WebAssembly."""

from __future__ import annotations

from gofumpt_build.compiler.backends import (
    CONTAINER_ENV,
    TOOLCHAIN_FLAGS,
    BuildResult,
    CompilationBackend,
    ContainerBackend,
    LocalBackend,
    compile_module,
    select_backend,
)

__all__ = [
    "CONTAINER_ENV",
    "TOOLCHAIN_FLAGS",
    "BuildResult",
    "CompilationBackend",
    "ContainerBackend",
    "LocalBackend",
    "compile_module",
    "select_backend",
]
