"""``aionr serve`` — run the MCP server on stdin/stdout."""

from __future__ import annotations

import asyncio
import logging
from typing import BinaryIO

import click

from aionr import SERVER_NAME, __version__
from aionr.backend.client import BackendBridge
from aionr.cli_commands._output import configure_logging
from aionr.config import (
    DEFAULT_TIMEOUT,
    ENV_API_KEY,
    ENV_API_URL,
    ENV_LOG_LEVEL,
    ENV_TIMEOUT,
    ServerConfig,
)
from aionr.errors import ConfigError, RpcError
from aionr.mcp.dispatcher import Dispatcher
from aionr.mcp.framing import FrameReader, FrameWriter
from aionr.mcp.registry import CapabilityRegistry, ResourceDescriptor, static_resources
from aionr.mcp.server import MCPServer
from aionr.utils.telemetry import configure_telemetry

logger = logging.getLogger(__name__)


@click.command()
@click.option("--api-url", envvar=ENV_API_URL, help="Base URL of the AION-R API.")
@click.option("--api-key", envvar=ENV_API_KEY, help="Bearer credential for the AION-R API.")
@click.option(
    "--timeout",
    envvar=ENV_TIMEOUT,
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Backend request timeout in seconds.",
)
@click.option(
    "--log-level",
    envvar=ENV_LOG_LEVEL,
    default="WARNING",
    show_default=True,
    help="Logging verbosity (written to stderr).",
)
@click.option(
    "--discover-resources/--no-discover-resources",
    default=True,
    help="Fetch the backend model catalog at startup.",
)
@click.option("--otlp-endpoint", default=None, help="Export tracing spans via OTLP/gRPC.")
@click.option("--trace-console", is_flag=True, help="Print tracing spans to stderr.")
def serve(
    api_url: str | None,
    api_key: str | None,
    timeout: float,
    log_level: str,
    discover_resources: bool,
    otlp_endpoint: str | None,
    trace_console: bool,
) -> None:
    """Serve framed JSON-RPC on stdin/stdout until stdin closes."""
    if not api_url:
        msg = f"Backend URL is required (set {ENV_API_URL} or pass --api-url)"
        raise click.UsageError(msg)
    try:
        config = ServerConfig.load(
            api_url=api_url,
            api_key=api_key,
            timeout=timeout,
            log_level=log_level,
            discover_resources=discover_resources,
            otlp_endpoint=otlp_endpoint,
            trace_console=trace_console,
        )
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    configure_logging(config.log_level)
    if config.trace_console or config.otlp_endpoint:
        try:
            configure_telemetry(
                export_to_console=config.trace_console,
                otlp_endpoint=config.otlp_endpoint,
            )
        except ImportError as exc:
            raise click.ClickException(str(exc)) from exc

    logger.info("Starting %s MCP server v%s", SERVER_NAME, __version__)
    asyncio.run(
        run_server(
            config,
            click.get_binary_stream("stdin"),
            click.get_binary_stream("stdout"),
        )
    )
    logger.info("%s MCP server shut down gracefully.", SERVER_NAME)


async def run_server(config: ServerConfig, stdin: BinaryIO, stdout: BinaryIO) -> None:
    """Wire the registry, bridge, and framing together and serve until EOF."""
    async with BackendBridge(config) as bridge:
        resources = await load_resources(bridge, config)
        registry = CapabilityRegistry.default(resources)
        server = MCPServer(Dispatcher(registry, bridge), FrameReader(stdin), FrameWriter(stdout))
        await server.run()


async def load_resources(bridge: BackendBridge, config: ServerConfig) -> list[ResourceDescriptor]:
    """Static catalog entry, plus the backend's models when discovery is enabled."""
    resources = static_resources()
    if not config.discover_resources:
        return resources
    try:
        models = await bridge.list_models()
    except RpcError as exc:
        logger.warning("Model discovery failed, serving static resources only: %s", exc)
        return resources
    logger.info("Discovered %d backend model(s)", len(models))
    return resources + models
