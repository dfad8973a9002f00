"""Tests for BackendBridge with an in-process httpx transport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from aionr.backend.client import BackendBridge
from aionr.backend.models import BackendFailure
from aionr.config import ServerConfig
from aionr.errors import BackendTimeoutError, BackendUnreachableError, InternalError

Handler = Callable[[httpx.Request], httpx.Response]


def _config(**overrides: object) -> ServerConfig:
    values: dict[str, object] = {"api_url": "http://backend.test"}
    values.update(overrides)
    return ServerConfig.model_validate(values)


def _bridge(handler: Handler, **overrides: object) -> BackendBridge:
    return BackendBridge(_config(**overrides), transport=httpx.MockTransport(handler))


class TestInvoke:
    async def test_run_inference_posts_inputs(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "success", "output": "42"})

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.ok
        assert result.payload == {"status": "success", "output": "42"}
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/v1/infer"
        assert json.loads(seen[0].content) == {"model": "m", "prompt": "p"}

    async def test_data_analysis_endpoint(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "completed", "results": []})

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("data_analysis", {"data": [10, 12], "ops": ["mean"]})

        assert result.payload["status"] == "completed"
        assert seen[0].url.path == "/api/v1/analyze"

    async def test_bearer_credential_attached(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with _bridge(handler, api_key="s3cret") as bridge:
            await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert seen[0].headers["Authorization"] == "Bearer s3cret"

    async def test_no_credential_no_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async with _bridge(handler) as bridge:
            await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert "Authorization" not in seen[0].headers

    async def test_timeout_is_classified(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.failure is BackendFailure.TIMEOUT
        assert isinstance(result.to_error(), BackendTimeoutError)

    async def test_connection_refused_is_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[Errno 111] Connection refused 10.0.0.5:8001", request=request)

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.failure is BackendFailure.UNREACHABLE
        error = result.to_error()
        assert isinstance(error, BackendUnreachableError)
        assert "10.0.0.5" not in error.message
        assert "10.0.0.5" not in json.dumps(error.to_error())

    async def test_single_attempt(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            raise httpx.ConnectError("refused", request=request)

        async with _bridge(handler) as bridge:
            await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert len(calls) == 1

    async def test_application_error_passes_message_and_data(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                422,
                json={"error": {"message": "model not loaded", "data": {"model": "m"}}},
            )

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.failure is BackendFailure.APPLICATION
        assert result.status == 422
        error = result.to_error().to_error()
        assert error == {"code": -32000, "message": "model not loaded", "data": {"model": "m"}}

    async def test_application_error_string_form(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "bad ops", "detail": ["median?"]})

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("data_analysis", {"data": [], "ops": ["median?"]})

        assert result.message == "bad ops"
        assert result.detail == ["median?"]

    async def test_application_error_plain_text(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="Internal Server Error")

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.failure is BackendFailure.APPLICATION
        assert result.message == "Backend request failed with status 500: Internal Server Error"
        assert result.detail is None

    async def test_non_json_success_is_malformed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})

        assert result.failure is BackendFailure.MALFORMED
        assert isinstance(result.to_error(), InternalError)

    async def test_tool_without_endpoint(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("backend must not be called")

        async with _bridge(handler) as bridge:
            result = await bridge.invoke("unmapped", {})

        assert result.failure is BackendFailure.MALFORMED

    async def test_requires_context_manager(self) -> None:
        bridge = BackendBridge(_config())
        with pytest.raises(RuntimeError, match="context manager"):
            await bridge.invoke("run_inference", {"model": "m", "prompt": "p"})


class TestListModels:
    async def test_models_become_resources(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/api/v1/models"
            return httpx.Response(
                200,
                json=[
                    {"id": "model-1", "name": "Universe Brain v1"},
                    {"id": "model-2"},
                    "garbage",
                ],
            )

        async with _bridge(handler) as bridge:
            resources = await bridge.list_models()

        assert [r.model_dump(by_alias=True) for r in resources] == [
            {"name": "Universe Brain v1", "kind": "model", "uri": "aion-r://models/model-1"},
            {"name": "model-2", "kind": "model", "uri": "aion-r://models/model-2"},
        ]

    async def test_wrapped_catalog(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"models": [{"id": "a"}]})

        async with _bridge(handler) as bridge:
            resources = await bridge.list_models()

        assert [r.name for r in resources] == ["a"]

    async def test_unreachable_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _bridge(handler) as bridge:
            with pytest.raises(BackendUnreachableError):
                await bridge.list_models()

    async def test_malformed_catalog_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json="nope")

        async with _bridge(handler) as bridge:
            with pytest.raises(InternalError, match="malformed"):
                await bridge.list_models()
