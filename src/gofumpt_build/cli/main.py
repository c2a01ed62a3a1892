"""CLI entry point for gofumpt-build.

Commands are loaded lazily so that ``gofumpt-build --help`` does not pay
for importing the pipeline.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from gofumpt_build import __version__
from gofumpt_build.cli.output import set_no_color
from gofumpt_build.observability import LOG_LEVELS, configure_logging

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that imports a command's module only when it is invoked.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        """Return the sorted names of registered and lazy commands."""
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, importing it on first use."""
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_path = self.lazy_subcommands[cmd_name]
        module_name, attr_name = module_path.rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "generate": "gofumpt_build.cli.commands.generate.generate",
    "build": "gofumpt_build.cli.commands.build.build",
    "test": "gofumpt_build.cli.commands.test.test",
    "run": "gofumpt_build.cli.commands.run.run",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="gofumpt-build")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum level for structured logs (written to stderr).",
)
def cli(log_level: str) -> None:
    """gofumpt-build - Build the gofumpt dprint plugin.

    Run from the plugin project directory (the one containing go.mod).

    **Commands:**

    - `gofumpt-build generate` - Write version.txt, schema.json and licenses.txt
    - `gofumpt-build build` - Compile and patch plugin.wasm
    - `gofumpt-build test` - Verify plugin.wasm against the golden fixtures
    - `gofumpt-build run` - All of the above, in order
    """
    configure_logging(log_level=log_level)


if __name__ == "__main__":
    cli()
