from __future__ import annotations

import argparse
import importlib.util
import logging
import sys

from mcp_testserver import __version__
from mcp_testserver.types import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION, IdPolicy, ServerConfig

logger = logging.getLogger("mcp_testserver")

_REQUIRED_MODULES = ("jsonschema",)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-testserver",
        description="Known-good Model Context Protocol (MCP) test server over stdio",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"mcp-testserver {__version__}",
    )
    parser.add_argument(
        "--server-name",
        default=SERVER_NAME,
        help=f"serverInfo.name reported by initialize (default: {SERVER_NAME})",
    )
    parser.add_argument(
        "--server-version",
        default=SERVER_VERSION,
        help=f"serverInfo.version reported by initialize (default: {SERVER_VERSION})",
    )
    parser.add_argument(
        "--protocol-version",
        default=PROTOCOL_VERSION,
        help=f"protocolVersion reported by initialize (default: {PROTOCOL_VERSION})",
    )
    parser.add_argument(
        "--id-policy",
        choices=[p.value for p in IdPolicy],
        default=IdPolicy.COUNTER.value,
        help="How response ids are assigned: one counter for every response, "
        "legacy fixed ids 1/2 for initialize/tools/list, or echo the request id "
        "(default: counter)",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        default=False,
        help="Print the tool catalog and exit",
    )
    parser.add_argument(
        "--format",
        choices=["console", "json"],
        default="console",
        dest="fmt",
        help="Output format for --list-tools (default: console)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log every request and tool invocation to stderr",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings and errors to stderr",
    )
    return parser


def _missing_dependencies() -> list[str]:
    return [name for name in _REQUIRED_MODULES if importlib.util.find_spec(name) is None]


def _config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        name=args.server_name,
        version=args.server_version,
        protocol_version=args.protocol_version,
        id_policy=IdPolicy(args.id_policy),
    )


def _use_utf8(stream: object, errors: str) -> None:
    reconfigure = getattr(stream, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors=errors)


def _run(args: argparse.Namespace) -> int:
    from mcp_testserver.dispatcher import Dispatcher
    from mcp_testserver.reporter import format_catalog
    from mcp_testserver.schema_utils import check_catalog
    from mcp_testserver.session import serve
    from mcp_testserver.tools import default_registry

    config = _config_from_args(args)
    registry = default_registry()

    invalid = check_catalog({d.name: d.input_schema for d in registry.descriptors()})
    if invalid:
        logger.error("Tool catalog has invalid input schemas: %s", "; ".join(invalid))
        return 1

    if args.list_tools:
        print(format_catalog(registry, config, fmt=args.fmt))
        return 0

    # undecodable bytes reach the codec as U+FFFD and fail JSON parsing there
    _use_utf8(sys.stdin, errors="replace")
    _use_utf8(sys.stdout, errors="backslashreplace")
    logger.info("MCP Test Server starting...")
    logger.info("Listening for JSON-RPC requests on stdin...")
    dispatcher = Dispatcher(config, registry)
    serve(dispatcher, sys.stdin, sys.stdout)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(name)s: %(message)s",
    )

    missing = _missing_dependencies()
    if missing:
        logger.error("%s is required but not installed. Please install %s.", missing[0], missing[0])
        sys.exit(1)

    try:
        exit_code = _run(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)

    sys.exit(exit_code)
