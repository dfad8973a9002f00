"""BackendBridge — forwards tool invocations to the AION-R HTTP API.

Each call is a single attempt. Transport failures are classified (timeout
vs. unreachable) without exposing network detail; errors reported by the
backend itself are passed through.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from aionr.backend.models import BackendFailure, BackendRequest, BackendResult
from aionr.errors import InternalError
from aionr.mcp.registry import ResourceDescriptor
from aionr.utils.telemetry import ATTR_BACKEND_STATUS, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from aionr.config import ServerConfig

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

TOOL_ENDPOINTS: dict[str, str] = {
    "run_inference": "/api/v1/infer",
    "data_analysis": "/api/v1/analyze",
}
MODELS_ENDPOINT = "/api/v1/models"
MODEL_URI_PREFIX = "aion-r://models/"


class BackendBridge:
    """Async context manager owning the single connection pool to the backend.

    Usage::

        async with BackendBridge(config) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})
            payload = result.raise_for_failure()
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> BackendBridge:
        headers = {"Accept": "application/json"}
        token = self._config.bearer_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=self._config.api_url,
            headers=headers,
            timeout=self._config.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "BackendBridge must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    async def invoke(self, tool_name: str, inputs: dict[str, Any]) -> BackendResult:
        """Forward a validated tool invocation to its backend endpoint."""
        request = BackendRequest(tool=tool_name, inputs=inputs)
        endpoint = TOOL_ENDPOINTS.get(request.tool)
        if endpoint is None:
            return BackendResult.failed(
                BackendFailure.MALFORMED, f"No backend endpoint for tool: {request.tool}"
            )

        with _tracer.start_as_current_span("aionr.backend.invoke") as span:
            span.set_attribute(ATTR_TOOL_NAME, request.tool)
            logger.info("Executing %s tool", request.tool)
            result = await self._send("POST", endpoint, json=request.inputs)
            if result.status is not None:
                span.set_attribute(ATTR_BACKEND_STATUS, result.status)
            return result

    async def list_models(self) -> list[ResourceDescriptor]:
        """Fetch the backend's model catalog as resource descriptors.

        Raises:
            BackendError: The backend could not be reached or reported an error.
            InternalError: The catalog is not a list of model objects.
        """
        result = await self._send("GET", MODELS_ENDPOINT)
        payload = result.raise_for_failure()
        if isinstance(payload, dict):
            payload = payload.get("models", payload.get("data"))
        if not isinstance(payload, list):
            msg = "Backend returned a malformed model catalog"
            raise InternalError(msg)

        resources: list[ResourceDescriptor] = []
        for entry in payload:
            if not isinstance(entry, dict) or "id" not in entry:
                logger.warning("Skipping malformed model catalog entry: %r", entry)
                continue
            model_id = str(entry["id"])
            resources.append(
                ResourceDescriptor(
                    name=str(entry.get("name") or model_id),
                    kind="model",
                    locator=MODEL_URI_PREFIX + model_id,
                )
            )
        return resources

    async def _send(self, method: str, url: str, **kwargs: Any) -> BackendResult:
        try:
            response = await self._http().request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            logger.warning("Backend %s %s timed out: %s", method, url, exc)
            return BackendResult.failed(BackendFailure.TIMEOUT, "Backend timeout")
        except httpx.TransportError as exc:
            logger.warning("Backend %s %s unreachable: %s", method, url, exc)
            return BackendResult.failed(BackendFailure.UNREACHABLE, "Backend unreachable")

        if not response.is_success:
            message, detail = _extract_error(response)
            logger.warning("Backend %s %s failed with status %d", method, url, response.status_code)
            return BackendResult.failed(
                BackendFailure.APPLICATION, message, detail, status=response.status_code
            )

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Backend %s %s returned a non-JSON body", method, url)
            return BackendResult.failed(
                BackendFailure.MALFORMED,
                "Backend returned a malformed response",
                status=response.status_code,
            )
        return BackendResult.success(payload, status=response.status_code)


def _extract_error(response: httpx.Response) -> tuple[str, Any]:
    """Pull a message and structured detail out of a backend error body."""
    fallback = f"Backend request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        text = response.text.strip()
        return (f"{fallback}: {text}" if text else fallback), None

    if not isinstance(body, dict):
        return fallback, body

    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        detail = error.get("data", error.get("detail"))
        if detail is None:
            detail = {k: v for k, v in error.items() if k != "message"} or None
    else:
        message = error if isinstance(error, str) else body.get("message")
        detail = body.get("data", body.get("detail"))

    if not isinstance(message, str) or not message:
        message = fallback
    return message, detail
