"""CLI command modules.

Each command is one task for the external scheduler. Commands build their
BuildConfig from the current directory and process environment; nothing
below this layer reads ambient process state.
"""

from __future__ import annotations

import os
from pathlib import Path

from gofumpt_build.config import BuildConfig


def load_build_config() -> BuildConfig:
    """Load the configuration for the project in the current directory."""
    return BuildConfig.load(Path.cwd(), dict(os.environ))


__all__ = ["load_build_config"]
