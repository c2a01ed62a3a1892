"""gofumpt-build generate - Write version, schema and license metadata."""

from __future__ import annotations

import click

from gofumpt_build.cli.output import info, success


@click.command()
def generate() -> None:
    """Generate plugin metadata.

    Writes version.txt, schema.json and licenses.txt. Files whose content
    is unchanged are left untouched.

    Examples:

        gofumpt-build generate
    """
    from gofumpt_build.cli.commands import load_build_config
    from gofumpt_build.cli.errors import handle_exception
    from gofumpt_build.generators import generate_metadata

    try:
        config = load_build_config()
        result = generate_metadata(config)
    except Exception as e:
        handle_exception(e)

    for write in result.writes:
        name = write.path.name
        if write.written:
            success(f"Wrote {name} ({write.reason})")
        else:
            info(f"  {name} unchanged")
    success(f"Metadata generated for version {result.version.version}")
