from __future__ import annotations

import random
import time

import pytest

from mcp_testserver.tools import Tool, ToolFault, ToolRegistry, default_registry
from mcp_testserver.types import ToolDescriptor
from tests.conftest import FIXED_TIME

EXPECTED_ORDER = ["echo", "add", "get_time", "random", "reverse"]


def _text(result) -> str:
    assert len(result.content) == 1
    assert result.content[0]["type"] == "text"
    return result.content[0]["text"]


def test_catalog_order(registry):
    assert [d.name for d in registry.descriptors()] == EXPECTED_ORDER


def test_catalog_is_stable():
    first = default_registry().list_result()
    second = default_registry().list_result()
    assert first == second


def test_descriptors_complete(registry):
    for d in registry.descriptors():
        assert d.name
        assert d.description
        assert d.input_schema["type"] == "object"


def test_required_fields(registry):
    schemas = {d.name: d.input_schema for d in registry.descriptors()}
    assert schemas["echo"]["required"] == ["text"]
    assert schemas["add"]["required"] == ["a", "b"]
    assert schemas["reverse"]["required"] == ["text"]
    assert "required" not in schemas["get_time"]
    assert "required" not in schemas["random"]
    assert schemas["get_time"]["properties"] == {}
    assert schemas["random"]["properties"]["max"]["type"] == "number"


def test_echo(registry):
    assert _text(registry.invoke("echo", {"text": "hello"})) == "hello"


def test_echo_default(registry):
    assert _text(registry.invoke("echo", {})) == "empty"


def test_echo_null_uses_default(registry):
    assert _text(registry.invoke("echo", {"text": None})) == "empty"


def test_echo_special_characters(registry):
    text = 'a "quoted" \\path\\'
    assert _text(registry.invoke("echo", {"text": text})) == text


def test_echo_non_string(registry):
    assert _text(registry.invoke("echo", {"text": 42})) == "42"


@pytest.mark.parametrize(
    "args,expected",
    [
        ({"a": 2, "b": 3}, "5"),
        ({"a": -4, "b": 1}, "-3"),
        ({"a": 2.9, "b": 3.9}, "5"),
        ({"a": "7", "b": 1}, "8"),
        ({"a": 5}, "5"),
        ({}, "0"),
        ({"a": "abc", "b": 2}, "2"),
        ({"a": [1], "b": True}, "0"),
    ],
)
def test_add(registry, args, expected):
    assert _text(registry.invoke("add", args)) == expected


def test_get_time(registry):
    assert _text(registry.invoke("get_time", {})) == str(int(FIXED_TIME))


def test_get_time_wall_clock():
    before = int(time.time())
    value = int(_text(default_registry().invoke("get_time", {})))
    after = int(time.time())
    assert before <= value <= after


def test_random_in_range(registry):
    for _ in range(500):
        value = int(_text(registry.invoke("random", {"max": 10})))
        assert 0 <= value < 10


def test_random_default_max(registry):
    for _ in range(500):
        value = int(_text(registry.invoke("random", {})))
        assert 0 <= value < 100


def test_random_max_one(registry):
    assert _text(registry.invoke("random", {"max": 1})) == "0"


@pytest.mark.parametrize("bad", [0, -5, "ten", 0.5, float("nan"), float("inf"), float("-inf")])
def test_random_rejects_bad_max(registry, bad):
    with pytest.raises(ToolFault) as exc_info:
        registry.invoke("random", {"max": bad})
    assert exc_info.value.code == -32602
    assert "random" in exc_info.value.message


def test_random_seeded_is_reproducible():
    a = default_registry(rng=random.Random(7))
    b = default_registry(rng=random.Random(7))
    assert [_text(a.invoke("random", {})) for _ in range(20)] == [
        _text(b.invoke("random", {})) for _ in range(20)
    ]


def test_reverse(registry):
    assert _text(registry.invoke("reverse", {"text": "hello"})) == "olleh"


def test_reverse_default(registry):
    assert _text(registry.invoke("reverse", {})) == ""


def test_reverse_unicode(registry):
    assert _text(registry.invoke("reverse", {"text": "añb"})) == "bña"


def test_unknown_tool(registry):
    with pytest.raises(ToolFault) as exc_info:
        registry.invoke("nope", {})
    assert exc_info.value.code == -32601
    assert exc_info.value.message == "Tool not found: nope"


def test_non_object_arguments(registry):
    assert _text(registry.invoke("echo", ["x"])) == "empty"


def test_duplicate_registration_rejected():
    reg = ToolRegistry()
    tool = Tool(ToolDescriptor("dup", "d", {"type": "object", "properties": {}}), lambda args: "")
    reg.register(tool)
    with pytest.raises(ValueError, match="already registered"):
        reg.register(tool)


def test_decorator_registration():
    reg = ToolRegistry()

    @reg.tool("upper", "Uppercase text", {"text": {"type": "string"}}, required=("text",))
    def upper(arguments: dict) -> str:
        return arguments.get("text", "").upper()

    assert "upper" in reg
    assert len(reg) == 1
    assert reg.list_result()["tools"][0]["inputSchema"]["required"] == ["text"]
    assert reg.invoke("upper", {"text": "abc"}).to_dict() == {
        "content": [{"type": "text", "text": "ABC"}],
    }
