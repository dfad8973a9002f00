"""Capability registry — the read-only catalog of tools and resources.

The catalog is built once at startup and never mutated afterwards. Tool
input schemas are a small JSON Schema subset: an object with
``properties`` (each optionally declaring a primitive ``type``) and a
``required`` list.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aionr.errors import SchemaValidationError, UnknownToolError

CATALOG_URI = "aion-r://models/catalog"

_TYPE_CHECKS: dict[str, Any] = {
    "string": lambda v: isinstance(v, str),
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
    "boolean": lambda v: isinstance(v, bool),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "number": lambda v: isinstance(v, int | float) and not isinstance(v, bool),
    "null": lambda v: v is None,
}


class ToolDescriptor(BaseModel):
    """A tool as advertised by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    @property
    def required(self) -> list[str]:
        return list(self.input_schema.get("required", []))

    @property
    def properties(self) -> dict[str, Any]:
        return dict(self.input_schema.get("properties", {}))


class ResourceDescriptor(BaseModel):
    """A backend-side artifact as advertised by ``resources/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    kind: str
    locator: str = Field(alias="uri")


class CapabilityRegistry:
    """Immutable catalog of tools and resources.

    Usage::

        registry = CapabilityRegistry.default(resources=static_resources())
        inputs = registry.validate("run_inference", {"model": "m", "prompt": "p"})
    """

    def __init__(
        self,
        tools: Iterable[ToolDescriptor],
        resources: Iterable[ResourceDescriptor] = (),
    ) -> None:
        self._tools = tuple(tool.model_copy(deep=True) for tool in tools)
        self._resources = tuple(resources)
        self._by_name = {tool.name: tool for tool in self._tools}
        if len(self._by_name) != len(self._tools):
            msg = "Tool names must be unique"
            raise ValueError(msg)

    @classmethod
    def default(cls, resources: Iterable[ResourceDescriptor] = ()) -> CapabilityRegistry:
        """Registry holding the built-in tools and the given resources."""
        return cls(default_tools(), resources)

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        """Copies of the registered tools; editing them leaves the catalog intact."""
        return tuple(tool.model_copy(deep=True) for tool in self._tools)

    def list_resources(self) -> tuple[ResourceDescriptor, ...]:
        return self._resources

    def get_tool(self, name: str) -> ToolDescriptor:
        """Return a copy of the named tool or raise :class:`UnknownToolError`."""
        return self._lookup(name).model_copy(deep=True)

    def _lookup(self, name: str) -> ToolDescriptor:
        tool = self._by_name.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool

    def validate(self, tool_name: str, inputs: dict[str, Any]) -> dict[str, Any]:
        """Check *inputs* against the tool's schema and return a normalized copy.

        Unknown fields are passed through unchanged.

        Raises:
            UnknownToolError: No tool is registered under *tool_name*.
            SchemaValidationError: Required fields are missing or declared
                types do not match.
        """
        tool = self._lookup(tool_name)
        missing = [field for field in tool.required if field not in inputs]

        mismatched: list[dict[str, str]] = []
        for field, schema in tool.properties.items():
            if field not in inputs or not isinstance(schema, dict):
                continue
            expected = schema.get("type")
            check = _TYPE_CHECKS.get(expected) if isinstance(expected, str) else None
            if check is not None and not check(inputs[field]):
                mismatched.append({
                    "field": field,
                    "expected": expected,
                    "actual": _json_type(inputs[field]),
                })

        if missing or mismatched:
            raise SchemaValidationError(tool_name, missing=missing, mismatched=mismatched)
        return dict(inputs)


def default_tools() -> list[ToolDescriptor]:
    """The tools this server forwards to the backend."""
    return [
        ToolDescriptor(
            name="run_inference",
            description="Runs AI inference by calling the backend AION-R API.",
            input_schema={
                "type": "object",
                "properties": {
                    "model": {"type": "string"},
                    "prompt": {"type": "string"},
                    "params": {"type": "object"},
                },
                "required": ["model", "prompt"],
            },
        ),
        ToolDescriptor(
            name="data_analysis",
            description="Runs data analysis by calling the backend AION-R API.",
            input_schema={
                "type": "object",
                "properties": {
                    "data": {},
                    "ops": {"type": "array"},
                },
                "required": ["data", "ops"],
            },
        ),
    ]


def static_resources() -> list[ResourceDescriptor]:
    """Fallback resource catalog used when the backend is not consulted."""
    return [ResourceDescriptor(name="models/catalog", kind="catalog", locator=CATALOG_URI)]


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
