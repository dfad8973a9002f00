"""MCP models — JSON-RPC 2.0 messages and method payloads.

Incoming payloads are parsed with :func:`parse_message`; outgoing responses
are serialized with :func:`encode_message`.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError

from aionr.errors import InvalidRequestError, ParseError

JSONRPC_VERSION = "2.0"

RequestId = StrictInt | StrictStr
Params = dict[str, Any] | list[Any] | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcNotification(BaseModel):
    """A JSON-RPC 2.0 message without an ``id``; never answered."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: StrictStr
    params: Params = None


class JsonRpcRequest(JsonRpcNotification):
    """A JSON-RPC 2.0 request; answered with exactly one response."""

    id: RequestId


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A successful JSON-RPC 2.0 response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    result: Any = None
    id: RequestId


class JsonRpcErrorResponse(BaseModel):
    """A failed JSON-RPC 2.0 response. ``id`` is ``None`` when unrecoverable."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    error: JsonRpcError
    id: RequestId | None = None


Message = JsonRpcRequest | JsonRpcNotification
Response = JsonRpcResponse | JsonRpcErrorResponse

# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of ``initialize``."""

    model_config = {"populate_by_name": True}

    protocol_version: str = Field(alias="protocolVersion")
    server: ServerInfo


class ToolsCallParams(BaseModel):
    """Parameters of ``tools/call``."""

    name: StrictStr
    inputs: dict[str, Any]


# ---------------------------------------------------------------------------
# Wire conversion
# ---------------------------------------------------------------------------


def parse_message(payload: bytes) -> Message:
    """Decode a frame payload into a request or notification.

    Raises:
        ParseError: The payload is not valid UTF-8 JSON.
        InvalidRequestError: The payload is JSON but not a valid JSON-RPC
            request or notification.
    """
    try:
        raw = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(data={"detail": str(exc)}) from exc

    if not isinstance(raw, dict):
        raise InvalidRequestError(data={"detail": "Message must be a JSON object"})

    request_id = _recover_id(raw)
    if raw.get("jsonrpc") != JSONRPC_VERSION:
        raise InvalidRequestError(
            data={"detail": "'jsonrpc' must be \"2.0\""}, request_id=request_id
        )

    is_notification = raw.get("id") is None
    model = JsonRpcNotification if is_notification else JsonRpcRequest
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRequestError(
            data={"detail": _describe(exc)}, request_id=request_id
        ) from exc


def encode_message(response: Response) -> bytes:
    """Serialize a response to compact JSON.

    A success always carries ``result`` (``null`` included); an error object
    omits ``data`` when there is none. Non-ASCII text is ``\\u``-escaped, so
    unpaired surrogates taken from a request still encode.

    Raises:
        ValueError: The body holds a non-finite float.
        TypeError: The body holds a value JSON cannot represent.
    """
    body: dict[str, Any] = {"jsonrpc": response.jsonrpc}
    if isinstance(response, JsonRpcResponse):
        body["result"] = response.result
    else:
        body["error"] = response.error.model_dump(exclude_none=True)
    body["id"] = response.id
    return json.dumps(body, separators=(",", ":"), allow_nan=False).encode("ascii")


def _recover_id(raw: dict[str, Any]) -> int | str | None:
    request_id = raw.get("id")
    if isinstance(request_id, str) or (
        isinstance(request_id, int) and not isinstance(request_id, bool)
    ):
        return request_id
    return None


def _describe(exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "message"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
