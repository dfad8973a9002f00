"""Shared CLI output formatters and logging setup."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from aionr.mcp.registry import ResourceDescriptor, ToolDescriptor  # noqa: TC001

console = Console()
# stdout carries protocol frames while serving; diagnostics go to stderr.
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Route the ``aionr`` loggers to a rich handler on stderr."""
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger("aionr")
    root.handlers[:] = [handler]
    root.setLevel(level)
    root.propagate = False


def print_tools_table(tools: Sequence[ToolDescriptor]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description")

    for tool in tools:
        table.add_row(
            tool.name,
            ", ".join(tool.required) or "-",
            _truncate(tool.description),
        )

    console.print(table)


def print_resources_table(resources: Sequence[ResourceDescriptor]) -> None:
    """Pretty-print resource descriptors as a table."""
    table = Table(title="Resources")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("URI")

    for resource in resources:
        table.add_row(resource.name, resource.kind, resource.locator)

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
