from __future__ import annotations

import json

from mcp_testserver.schema_utils import required_fields
from mcp_testserver.tools import ToolRegistry
from mcp_testserver.types import ServerConfig

_SEPARATOR = "─" * 60


def catalog_console(registry: ToolRegistry, config: ServerConfig) -> str:
    lines: list[str] = []
    lines.append(f"{config.name} v{config.version} (MCP {config.protocol_version})")
    lines.append(_SEPARATOR)
    for descriptor in registry.descriptors():
        lines.append(f" {descriptor.name:10s} {descriptor.description}")
        params = list(descriptor.input_schema.get("properties", {}))
        if params:
            required = set(required_fields(descriptor.input_schema))
            rendered = [p if p in required else f"[{p}]" for p in params]
            lines.append(f"            args: {', '.join(rendered)}")
    lines.append(_SEPARATOR)
    lines.append(f" {len(registry)} tools")
    return "\n".join(lines)


def catalog_json(registry: ToolRegistry) -> str:
    return json.dumps(registry.list_result(), indent=2, ensure_ascii=False)


def format_catalog(registry: ToolRegistry, config: ServerConfig, fmt: str = "console") -> str:
    if fmt == "json":
        return catalog_json(registry)
    return catalog_console(registry, config)
