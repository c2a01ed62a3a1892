"""gofumpt-build run - Full pipeline."""

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
def run(use_container: bool) -> None:
    """Generate metadata, build, and verify.

    Stops at the first failure. Metadata already written is kept, so the
    command is safe to re-run.

    Examples:

        gofumpt-build run

        gofumpt-build run --docker
    """
    from gofumpt_build.cli.commands import load_build_config
    from gofumpt_build.cli.errors import handle_exception
    from gofumpt_build.pipeline import run_pipeline

    try:
        config = load_build_config()
        result = run_pipeline(config, use_container)
    except Exception as e:
        handle_exception(e)

    success(
        f"Version {result.metadata.version.version}: built {result.artifact.name} "
        f"with the {result.backend} backend, {len(result.verifications)} fixture(s) passed"
    )
