"""Post-processing of the compiled plugin module.

TinyGo's reactor build exports ``_initialize`` but leaves calling it to
the host. dprint only runs what the module itself marks as its start
function on instantiation, so the module's start function is pointed at
``_initialize`` before the artifact is published.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from gofumpt_build.errors import ModulePatchError
from gofumpt_build.wasm import Module

logger = structlog.get_logger(__name__)

INITIALIZE_FUNCTION = "_initialize"


def patch_module(data: bytes) -> bytes:
    """Set the start function of a module to ``_initialize``.

    Args:
        data: Compiled WebAssembly module.

    Returns:
        Re-serialized module with its start function set.

    Raises:
        WasmDecodeError: If ``data`` is not a valid module.
        ModulePatchError: If ``_initialize`` is missing or is not ``[] -> []``.
            A missing initializer means the toolchain did not build for the
            expected target, so there is no unpatched fallback.
    """
    module = Module.parse(data)

    function = module.function_named(INITIALIZE_FUNCTION)
    if function is None:
        raise ModulePatchError(
            f"Compiled module has no '{INITIALIZE_FUNCTION}' function",
            internal_details=f"functions={len(module.functions)} "
            "(expected a TinyGo reactor build with -buildmode=c-shared)",
        )
    if not module.signature(function).is_nullary:
        raise ModulePatchError(
            f"'{INITIALIZE_FUNCTION}' cannot be a start function: "
            "it takes parameters or returns values"
        )

    previous = module.start
    module.set_start(function)
    logger.info("start_function_set", function_index=function.index, previous=previous)
    return module.to_bytes()


def patch_artifact(data: bytes, path: Path) -> Path:
    """Patch ``data`` and write it to ``path``, replacing any previous artifact.

    Returns:
        The artifact path.
    """
    patched = patch_module(data)
    path.write_bytes(patched)
    logger.info("artifact_patched", path=str(path), size=len(patched))
    return path
