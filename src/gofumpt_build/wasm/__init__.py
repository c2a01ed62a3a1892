"""Minimal WebAssembly binary codec."""

from __future__ import annotations

from gofumpt_build.wasm.module import (
    ExternalKind,
    Function,
    FunctionType,
    Module,
    Section,
    SectionId,
)

__all__ = [
    "ExternalKind",
    "Function",
    "FunctionType",
    "Module",
    "Section",
    "SectionId",
]
