"""Normalized request/result shapes exchanged with the backend bridge."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from aionr.errors import (
    BackendApplicationError,
    BackendTimeoutError,
    BackendUnreachableError,
    InternalError,
    RpcError,
)


class BackendFailure(str, Enum):
    """Why a backend call did not produce a result."""

    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    APPLICATION = "application"
    MALFORMED = "malformed"


class BackendRequest(BaseModel):
    """A validated tool invocation on its way to the backend."""

    tool: str
    inputs: dict[str, Any] = Field(default_factory=dict)


class BackendResult(BaseModel):
    """Outcome of a single backend call.

    Exactly one of ``payload`` (on success) or ``failure`` is meaningful.
    """

    payload: Any = None
    failure: BackendFailure | None = None
    message: str = ""
    detail: Any = None
    status: int | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, payload: Any, status: int | None = None) -> BackendResult:
        return cls(payload=payload, status=status)

    @classmethod
    def failed(
        cls,
        failure: BackendFailure,
        message: str = "",
        detail: Any = None,
        status: int | None = None,
    ) -> BackendResult:
        return cls(failure=failure, message=message, detail=detail, status=status)

    def to_error(self) -> RpcError:
        """Map a failed result onto the JSON-RPC error it is reported as."""
        if self.failure is BackendFailure.TIMEOUT:
            return BackendTimeoutError()
        if self.failure is BackendFailure.UNREACHABLE:
            return BackendUnreachableError()
        if self.failure is BackendFailure.APPLICATION:
            return BackendApplicationError(self.message or None, data=self.detail)
        return InternalError(self.message or None)

    def raise_for_failure(self) -> Any:
        """Return the payload, or raise the mapped error if the call failed."""
        if self.failure is not None:
            raise self.to_error()
        return self.payload
