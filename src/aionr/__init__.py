"""aionr — stdio MCP server that forwards tool calls to the AION-R HTTP API."""

from __future__ import annotations

__version__ = "0.1.0"

SERVER_NAME = "aionr2"
