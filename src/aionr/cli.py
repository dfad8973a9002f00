"""aionr CLI entrypoint."""

from __future__ import annotations

import click

from aionr import __version__


@click.group()
@click.version_option(version=__version__, prog_name="aionr")
def main() -> None:
    """aionr — MCP stdio server for the AION-R API."""


# Register subcommands
from aionr.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
