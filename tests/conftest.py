from __future__ import annotations

import json
import random

import pytest

from mcp_testserver.dispatcher import Dispatcher
from mcp_testserver.tools import default_registry
from mcp_testserver.types import IdPolicy, ServerConfig
from tests.harness import MCPClient, ServerProcess

FIXED_TIME = 1_700_000_000.75


@pytest.fixture
def registry():
    return default_registry(rng=random.Random(1234), clock=lambda: FIXED_TIME)


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(ServerConfig(), registry)


@pytest.fixture
def make_dispatcher(registry):
    def factory(policy: IdPolicy = IdPolicy.COUNTER) -> Dispatcher:
        return Dispatcher(ServerConfig(id_policy=policy), registry)
    return factory


@pytest.fixture
def rpc(dispatcher):
    """Send one message dict through the dispatcher and decode the reply."""
    def send(message: dict) -> dict | None:
        line = dispatcher.handle_line(json.dumps(message))
        return None if line is None else json.loads(line)
    return send


@pytest.fixture
async def server():
    proc = ServerProcess()
    await proc.start()
    yield proc
    await proc.stop()


@pytest.fixture
async def client(server):
    return MCPClient(server)
