"""Dispatcher — maps one parsed message to at most one response.

Requests always produce exactly one response carrying their ``id``;
notifications run for their side effects and never produce one.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from aionr import SERVER_NAME, __version__
from aionr.errors import (
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    RpcError,
)
from aionr.mcp.models import (
    InitializeResult,
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcRequest,
    JsonRpcResponse,
    Message,
    Response,
    ServerInfo,
    ToolsCallParams,
)
from aionr.utils.telemetry import (
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_RPC_NOTIFICATION,
    ATTR_TOOL_NAME,
    get_tracer,
    mark_rpc_error,
)

if TYPE_CHECKING:
    from aionr.backend.client import BackendBridge
    from aionr.mcp.registry import CapabilityRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

PROTOCOL_VERSION = "2024-11-05"

Handler = Callable[[Any], Awaitable[Any]]


class Dispatcher:
    """Routes JSON-RPC methods to their handlers.

    Usage::

        dispatcher = Dispatcher(registry, bridge)
        response = await dispatcher.dispatch(message)  # None for notifications
    """

    def __init__(self, registry: CapabilityRegistry, bridge: BackendBridge) -> None:
        self._registry = registry
        self._bridge = bridge
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "resources/list": self._resources_list,
            "tools/call": self._tools_call,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, message: Message) -> Response | None:
        """Run the handler for *message* and build its response."""
        is_request = isinstance(message, JsonRpcRequest)
        with _tracer.start_as_current_span("aionr.rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, message.method)
            span.set_attribute(ATTR_RPC_NOTIFICATION, not is_request)
            if isinstance(message, JsonRpcRequest):
                span.set_attribute(ATTR_RPC_ID, str(message.id))

            try:
                result = await self._call(message.method, message.params)
            except RpcError as exc:
                mark_rpc_error(span, exc.code, exc.message)
                if not isinstance(message, JsonRpcRequest):
                    logger.warning("Notification %s failed: %s", message.method, exc)
                    return None
                logger.info("Request %s (%s) failed: %s", message.id, message.method, exc)
                return error_response(exc, message.id)
            except Exception as exc:
                logger.exception("Unexpected failure handling %s", message.method)
                mark_rpc_error(span, InternalError.code, InternalError.default_message)
                if not isinstance(message, JsonRpcRequest):
                    return None
                return error_response(InternalError(data={"detail": str(exc)}), message.id)

        if not isinstance(message, JsonRpcRequest):
            logger.debug("Notification %s handled", message.method)
            return None
        return JsonRpcResponse(result=result, id=message.id)

    async def _call(self, method: str, params: Any) -> Any:
        handler = self._handlers.get(method)
        if handler is None:
            raise MethodNotFoundError(method)
        return await handler(params)

    async def _initialize(self, params: Any) -> dict[str, Any]:
        # Repeated calls are tolerated and nothing is gated on this handshake.
        if isinstance(params, dict) and "protocolVersion" in params:
            logger.debug("Client protocol version: %s", params["protocolVersion"])
        result = InitializeResult(
            protocol_version=PROTOCOL_VERSION,
            server=ServerInfo(name=SERVER_NAME, version=__version__),
        )
        return result.model_dump(by_alias=True)

    async def _tools_list(self, _params: Any) -> dict[str, Any]:
        tools = [tool.model_dump(by_alias=True) for tool in self._registry.list_tools()]
        return {"tools": tools}

    async def _resources_list(self, _params: Any) -> dict[str, Any]:
        resources = [res.model_dump(by_alias=True) for res in self._registry.list_resources()]
        return {"resources": resources}

    async def _tools_call(self, params: Any) -> Any:
        try:
            call = ToolsCallParams.model_validate(params if params is not None else {})
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            raise InvalidParamsError(data={"invalid": fields or ["params"]}) from exc

        self._registry.get_tool(call.name)
        inputs = self._registry.validate(call.name, call.inputs)

        with _tracer.start_as_current_span("aionr.tools.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, call.name)
            result = await self._bridge.invoke(call.name, inputs)
        return result.raise_for_failure()


def error_response(error: RpcError, request_id: int | str | None) -> JsonRpcErrorResponse:
    """Build the error response for *error* addressed to *request_id*."""
    return JsonRpcErrorResponse(
        error=JsonRpcError(code=error.code, message=error.message, data=error.data),
        id=request_id,
    )
