from __future__ import annotations

import json
import logging

from mcp_testserver.types import Request, RequestId

logger = logging.getLogger(__name__)


def decode(line: str) -> Request:
    """Parse one input line into a Request.

    Never raises. Anything that is not a JSON object comes back as a request
    with an empty method, which the dispatcher answers as an unknown method.
    """
    try:
        msg = json.loads(line)
    except json.JSONDecodeError:
        logger.debug("Non-JSON line on stdin: %s", line[:200])
        return Request(method="")
    if not isinstance(msg, dict):
        logger.debug("JSON line is not an object: %s", line[:200])
        return Request(method="")

    method = msg.get("method")
    if method is None:
        method = ""
    elif not isinstance(method, str):
        method = json.dumps(method)

    params = msg.get("params")
    if not isinstance(params, dict):
        params = {}

    return Request(method=method, id=_request_id(msg.get("id")), params=params)


def _request_id(value: object) -> RequestId | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        return value
    return None


def _envelope(id_val: RequestId, body: dict) -> str:
    message = {"jsonrpc": "2.0", "id": id_val, **body}
    line = json.dumps(message, separators=(",", ":"), ensure_ascii=False)
    try:
        line.encode("utf-8")
    except UnicodeEncodeError:
        # lone surrogates can only travel as \u escapes
        line = json.dumps(message, separators=(",", ":"))
    return line


def encode_success(id_val: RequestId, result: dict) -> str:
    return _envelope(id_val, {"result": result})


def encode_error(id_val: RequestId, code: int, message: str) -> str:
    return _envelope(id_val, {"error": {"code": code, "message": message}})
