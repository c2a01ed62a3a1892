"""gofumpt-build build - Compile and patch the plugin."""

from __future__ import annotations

import click

from gofumpt_build.cli.output import success


@click.command()
@click.option(
    "--docker",
    "use_container",
    is_flag=True,
    default=False,
    help="Compile inside the TinyGo container instead of with the local toolchain.",
)
def build(use_container: bool) -> None:
    """Compile the plugin to WebAssembly.

    Builds with TinyGo, then sets the module's start function to
    `_initialize` so dprint initializes the plugin on instantiation.

    Examples:

        gofumpt-build build

        gofumpt-build build --docker
    """
    from gofumpt_build.cli.commands import load_build_config
    from gofumpt_build.cli.errors import handle_exception
    from gofumpt_build.pipeline import build_artifact

    try:
        config = load_build_config()
        result, artifact = build_artifact(config, use_container)
    except Exception as e:
        handle_exception(e)

    success(f"Built {artifact.name} ({len(result.data)} bytes, {result.backend} backend)")
