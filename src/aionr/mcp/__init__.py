"""MCP protocol — framed JSON-RPC server over stdio."""

from aionr.mcp.dispatcher import Dispatcher
from aionr.mcp.framing import FrameReader, FrameWriter
from aionr.mcp.models import (
    JsonRpcError,
    JsonRpcErrorResponse,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcResponse,
    encode_message,
    parse_message,
)
from aionr.mcp.registry import CapabilityRegistry, ResourceDescriptor, ToolDescriptor
from aionr.mcp.server import MCPServer

__all__ = [
    "CapabilityRegistry",
    "Dispatcher",
    "FrameReader",
    "FrameWriter",
    "JsonRpcError",
    "JsonRpcErrorResponse",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPServer",
    "ResourceDescriptor",
    "ToolDescriptor",
    "encode_message",
    "parse_message",
]
