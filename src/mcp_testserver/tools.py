from __future__ import annotations

import json
import logging
import math
import random
import time
from collections.abc import Callable
from dataclasses import dataclass

from mcp_testserver.schema_utils import first_violation
from mcp_testserver.types import INVALID_PARAMS, METHOD_NOT_FOUND, ToolDescriptor, ToolResult

logger = logging.getLogger(__name__)

RANDOM_DEFAULT_MAX = 100

ToolFunction = Callable[[dict], str]


class ToolFault(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass
class Tool:
    descriptor: ToolDescriptor
    fn: ToolFunction
    constraints: dict | None = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    def describe(self) -> ToolDescriptor:
        return self.descriptor

    def invoke(self, arguments: dict) -> ToolResult:
        if self.constraints is not None:
            violation = first_violation(arguments, self.constraints)
            if violation is not None:
                raise ToolFault(INVALID_PARAMS, f"Invalid arguments for {self.name}: {violation}")
        return ToolResult.text(self.fn(arguments))


def object_schema(properties: dict | None = None, required: tuple[str, ...] = ()) -> dict:
    schema: dict = {"type": "object", "properties": dict(properties or {})}
    if required:
        schema["required"] = list(required)
    return schema


class ToolRegistry:
    """Ordered catalog of tools; insertion order is the listing order."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> Tool:
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool
        return tool

    def tool(
        self,
        name: str,
        description: str,
        properties: dict | None = None,
        required: tuple[str, ...] = (),
        constraints: dict | None = None,
    ) -> Callable[[ToolFunction], ToolFunction]:
        def decorator(fn: ToolFunction) -> ToolFunction:
            descriptor = ToolDescriptor(name, description, object_schema(properties, required))
            self.register(Tool(descriptor, fn, constraints))
            return fn
        return decorator

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return [t.describe() for t in self._tools.values()]

    def list_result(self) -> dict:
        return {"tools": [d.to_dict() for d in self.descriptors()]}

    def invoke(self, name: str, arguments: object) -> ToolResult:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolFault(METHOD_NOT_FOUND, f"Tool not found: {name}")
        if not isinstance(arguments, dict):
            arguments = {}
        logger.debug("Invoking tool %s with %s", name, arguments)
        return tool.invoke(arguments)


def _as_text(value: object, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _as_int(value: object) -> int:
    # Truncates toward zero; anything non-numeric counts as 0.
    if isinstance(value, bool) or value is None:
        return 0
    try:
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return int(float(value))
    except (ValueError, OverflowError):
        return 0
    return 0


def default_registry(
    rng: random.Random | None = None,
    clock: Callable[[], float] = time.time,
) -> ToolRegistry:
    """Build the five-tool catalog served by the test server."""
    registry = ToolRegistry()
    rng = rng or random.Random()

    @registry.tool(
        "echo",
        "Echo back the input text",
        {"text": {"type": "string", "description": "Text to echo back"}},
        required=("text",),
    )
    def echo(arguments: dict) -> str:
        return _as_text(arguments.get("text"), "empty")

    @registry.tool(
        "add",
        "Add two numbers together",
        {
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        required=("a", "b"),
    )
    def add(arguments: dict) -> str:
        return str(_as_int(arguments.get("a")) + _as_int(arguments.get("b")))

    @registry.tool("get_time", "Get current Unix timestamp")
    def get_time(arguments: dict) -> str:
        return str(int(clock()))

    @registry.tool(
        "random",
        "Generate a random number",
        {"max": {"type": "number", "description": f"Maximum value (default: {RANDOM_DEFAULT_MAX})"}},
        constraints={
            "type": "object",
            "properties": {"max": {"type": ["number", "null"], "minimum": 1}},
        },
    )
    def random_number(arguments: dict) -> str:
        upper = arguments.get("max")
        if upper is None:
            upper = RANDOM_DEFAULT_MAX
        if isinstance(upper, float) and not math.isfinite(upper):
            raise ToolFault(INVALID_PARAMS, f"Invalid arguments for random: max: {upper} is not a finite number")
        return str(rng.randrange(int(upper)))

    @registry.tool(
        "reverse",
        "Reverse a string",
        {"text": {"type": "string", "description": "Text to reverse"}},
        required=("text",),
    )
    def reverse(arguments: dict) -> str:
        return _as_text(arguments.get("text"), "")[::-1]

    return registry
