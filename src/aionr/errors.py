"""Error taxonomy for the JSON-RPC server and its backend bridge.

Every :class:`RpcError` knows the JSON-RPC error object it maps to, so the
dispatcher can convert any failure into an error response without a lookup
table.
"""

from __future__ import annotations

from typing import Any

# Standard JSON-RPC 2.0 codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server-defined range (-32000 .. -32099)
BACKEND_ERROR = -32000
UNKNOWN_TOOL = -32001


class ConfigError(Exception):
    """Startup configuration is missing or invalid."""


class FramingError(Exception):
    """A frame header on the input stream could not be decoded."""


class IncompleteFrameError(Exception):
    """The input stream ended part-way through a frame."""

    def __init__(self, expected: int | None = None, received: int = 0) -> None:
        self.expected = expected
        self.received = received
        if expected is None:
            detail = "inside header block"
        else:
            detail = f"after {received} of {expected} body bytes"
        super().__init__(f"Stream ended {detail}")


class RpcError(Exception):
    """Base error for everything that is reported back as a JSON-RPC error."""

    code = INTERNAL_ERROR
    default_message = "Internal error"

    def __init__(
        self,
        message: str | None = None,
        data: Any = None,
        *,
        request_id: int | str | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.data = data
        self.request_id = request_id
        super().__init__(self.message)

    def to_error(self) -> dict[str, Any]:
        """Return the JSON-RPC ``error`` member for this failure."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(RpcError):
    code = PARSE_ERROR
    default_message = "Parse error"


class InvalidRequestError(RpcError):
    code = INVALID_REQUEST
    default_message = "Invalid request"


class MethodNotFoundError(RpcError):
    code = METHOD_NOT_FOUND
    default_message = "Method not found"

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(data={"method": method})


class InvalidParamsError(RpcError):
    code = INVALID_PARAMS
    default_message = "Invalid params"


class SchemaValidationError(InvalidParamsError):
    """Tool inputs failed validation against the tool's input schema."""

    def __init__(
        self,
        tool_name: str,
        missing: list[str] | None = None,
        mismatched: list[dict[str, str]] | None = None,
    ) -> None:
        self.tool_name = tool_name
        self.missing = list(missing or [])
        self.mismatched = list(mismatched or [])
        data: dict[str, Any] = {}
        if self.missing:
            data["missing"] = self.missing
        if self.mismatched:
            data["mismatched"] = self.mismatched
        super().__init__(data=data)


class UnknownToolError(RpcError):
    code = UNKNOWN_TOOL
    default_message = "Unknown tool"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}", data={"name": name})


class InternalError(RpcError):
    code = INTERNAL_ERROR
    default_message = "Internal error"


class BackendError(RpcError):
    """Base for failures reaching or reported by the backend service."""


class BackendUnreachableError(BackendError):
    code = INTERNAL_ERROR
    default_message = "Backend unreachable"

    def __init__(self) -> None:
        super().__init__(data={"reason": "unreachable"})


class BackendTimeoutError(BackendError):
    code = INTERNAL_ERROR
    default_message = "Backend timeout"

    def __init__(self) -> None:
        super().__init__(data={"reason": "timeout"})


class BackendApplicationError(BackendError):
    """The backend answered, but with an error payload."""

    code = BACKEND_ERROR
    default_message = "Backend error"
