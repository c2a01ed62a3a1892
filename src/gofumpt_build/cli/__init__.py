"""Command line interface for gofumpt-build."""

from __future__ import annotations
