"""Tracing for the aionr server.

Every dispatched JSON-RPC message runs in an ``aionr.rpc.dispatch`` span and
every backend round trip in an ``aionr.backend.invoke`` span.  Without the
SDK the OpenTelemetry API hands out no-op tracers, so instrumentation costs
nothing until ``aionr serve --trace-console`` or ``--otlp-endpoint`` turns it
on (both need the ``otel`` extra: ``pip install aionr[otel]``).

stdout carries protocol frames only, so console spans are written to stderr.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

from aionr import SERVER_NAME, __version__

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "aionr.rpc.method"
ATTR_RPC_ID = "aionr.rpc.id"
ATTR_RPC_ERROR_CODE = "aionr.rpc.error_code"
ATTR_RPC_NOTIFICATION = "aionr.rpc.notification"
ATTR_TOOL_NAME = "aionr.tool.name"
ATTR_BACKEND_STATUS = "aionr.backend.status"

_INSTRUMENTATION_NAME = "aionr"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a tracer for *name*; a no-op until :func:`configure_telemetry` runs."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME, __version__)


def mark_rpc_error(span: Span, code: int, message: str) -> None:
    """Tag *span* with a JSON-RPC error code and flag it as failed."""
    span.set_attribute(ATTR_RPC_ERROR_CODE, code)
    span.set_status(Status(StatusCode.ERROR, message))


def configure_telemetry(
    *,
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider for the server process.

    Spans carry ``service.name`` (the advertised server name) and
    ``service.version``.  Console export writes JSON spans to stderr as they
    end; OTLP export is batched.

    Raises
    ------
    ImportError
        If ``opentelemetry-sdk`` (or, for OTLP, ``opentelemetry-exporter-otlp``)
        is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for tracing. "
            "Install it with: pip install aionr[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(
        resource=Resource.create({"service.name": SERVER_NAME, "service.version": __version__})
    )
    if export_to_console:
        _add_stderr_exporter(provider, SimpleSpanProcessor)
    if otlp_endpoint:
        _add_otlp_exporter(provider, BatchSpanProcessor, otlp_endpoint)

    trace.set_tracer_provider(provider)


def _add_stderr_exporter(provider: Any, processor_cls: Any) -> None:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter  # pyright: ignore[reportMissingImports]

    provider.add_span_processor(processor_cls(ConsoleSpanExporter(out=sys.stderr)))


def _add_otlp_exporter(provider: Any, processor_cls: Any, endpoint: str) -> None:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install aionr[otel]"
        )
        raise ImportError(msg) from exc

    provider.add_span_processor(processor_cls(OTLPSpanExporter(endpoint=endpoint)))
