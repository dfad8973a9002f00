"""``aionr tools`` — inspect the capability catalog."""

from __future__ import annotations

import json

import click

from aionr.cli_commands._output import console, print_resources_table, print_tools_table
from aionr.mcp.registry import CapabilityRegistry, static_resources


@click.group()
def tools() -> None:
    """Inspect the tools and resources this server advertises."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the raw tools/list result.")
def list_tools(as_json: bool) -> None:
    """List the built-in tools and their input schemas."""
    registry = CapabilityRegistry.default()
    if as_json:
        payload = {"tools": [t.model_dump(by_alias=True) for t in registry.list_tools()]}
        console.print_json(json.dumps(payload))
        return
    print_tools_table(registry.list_tools())


@tools.command("resources")
def list_resources() -> None:
    """List the static resource catalog (backend models are discovered at startup)."""
    print_resources_table(static_resources())
