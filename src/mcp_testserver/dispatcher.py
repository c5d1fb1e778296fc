from __future__ import annotations

import logging

from mcp_testserver.codec import decode, encode_error, encode_success
from mcp_testserver.tools import ToolFault, ToolRegistry, default_registry
from mcp_testserver.types import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    IdPolicy,
    Method,
    Request,
    RequestId,
    ServerConfig,
)

logger = logging.getLogger(__name__)

_LEGACY_IDS: dict[Method, int] = {
    Method.INITIALIZE: 1,
    Method.TOOLS_LIST: 2,
}


class Dispatcher:
    """Routes decoded requests and numbers the responses.

    One instance serves one stream. The response-id counter starts at 1 and
    advances once for every message that gets a reply, errors included.
    notifications/initialized never gets a reply and leaves it untouched.
    """

    def __init__(self, config: ServerConfig | None = None, registry: ToolRegistry | None = None) -> None:
        self._config = config or ServerConfig()
        self._registry = registry if registry is not None else default_registry()
        self._next_id: int = 1

    @property
    def next_id(self) -> int:
        return self._next_id

    def handle_line(self, line: str) -> str | None:
        return self.dispatch(decode(line))

    def dispatch(self, request: Request) -> str | None:
        kind = request.kind

        if kind is Method.INITIALIZED:
            logger.info("Client initialized")
            return None

        response_id = self._take_id(kind, request)

        if kind is Method.INITIALIZE:
            return encode_success(response_id, self._initialize_result())
        if kind is Method.TOOLS_LIST:
            return encode_success(response_id, self._registry.list_result())
        if kind is Method.TOOLS_CALL:
            return self._call_tool(response_id, request.params)
        if kind is Method.PING:
            return encode_success(response_id, {})

        logger.debug("Unknown method %r", request.method)
        return encode_error(response_id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

    def _take_id(self, kind: Method, request: Request) -> RequestId:
        counter_id = self._next_id
        self._next_id += 1
        policy = self._config.id_policy
        if policy is IdPolicy.LEGACY and kind in _LEGACY_IDS:
            return _LEGACY_IDS[kind]
        if policy is IdPolicy.REQUEST and request.id is not None:
            return request.id
        return counter_id

    def _initialize_result(self) -> dict:
        return {
            "protocolVersion": self._config.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": self._config.server_info(),
        }

    def _call_tool(self, response_id: RequestId, params: dict) -> str:
        name = params.get("name")
        if not isinstance(name, str):
            name = ""
        try:
            result = self._registry.invoke(name, params.get("arguments"))
        except ToolFault as exc:
            logger.debug("Tool %r faulted: %s", name, exc.message)
            return encode_error(response_id, exc.code, exc.message)
        except Exception as exc:
            logger.debug("Tool %r raised", name, exc_info=True)
            return encode_error(response_id, INTERNAL_ERROR, f"Internal error: {exc}")
        return encode_success(response_id, result.to_dict())
