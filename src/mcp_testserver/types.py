from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from mcp_testserver import __version__

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "test-mcp-server"
SERVER_VERSION = __version__

METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[int, str]


class Method(Enum):
    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PING = "ping"
    INITIALIZED = "notifications/initialized"
    UNKNOWN = "<unknown>"

    @classmethod
    def _missing_(cls, value: object) -> Method:
        return cls.UNKNOWN


class IdPolicy(Enum):
    """How response ids are chosen.

    COUNTER numbers every response from one monotonic sequence. LEGACY answers
    initialize with id 1 and tools/list with id 2 no matter where they arrive,
    for clients written against those fixed ids. REQUEST echoes the caller's id and
    falls back to the counter for requests that carry none.
    """

    COUNTER = "counter"
    LEGACY = "legacy"
    REQUEST = "request"


@dataclass
class Request:
    method: str
    id: RequestId | None = None
    params: dict = field(default_factory=dict)

    @property
    def kind(self) -> Method:
        return Method(self.method)

    @property
    def is_notification(self) -> bool:
        return self.id is None


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: dict

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolResult:
    content: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def text(cls, value: str) -> ToolResult:
        return cls(content=[{"type": "text", "text": value}])

    def to_dict(self) -> dict:
        return {"content": self.content}


@dataclass
class ServerConfig:
    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    protocol_version: str = PROTOCOL_VERSION
    id_policy: IdPolicy = IdPolicy.COUNTER

    def server_info(self) -> dict:
        return {"name": self.name, "version": self.version}
