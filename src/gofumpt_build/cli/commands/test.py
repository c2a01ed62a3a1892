"""gofumpt-build test - Verify the plugin against golden fixtures."""

from __future__ import annotations

import click

from gofumpt_build.cli.output import success


@click.command()
def test() -> None:
    """Verify the built plugin.

    Formats every fixture in the fixtures directory with dprint and the
    built plugin, and compares the result with its expected.go.

    Examples:

        gofumpt-build test
    """
    from gofumpt_build.cli.commands import load_build_config
    from gofumpt_build.cli.errors import handle_exception
    from gofumpt_build.pipeline import verify_all

    try:
        config = load_build_config()
        results = verify_all(config)
    except Exception as e:
        handle_exception(e)

    for result in results:
        success(f"{result.fixture}")
    success(f"{len(results)} fixture(s) passed")
