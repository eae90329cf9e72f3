"""Stdio JSON-RPC server for devinfo.

Reads one JSON-RPC 2.0 request per line from stdin and writes one response
per line to stdout. The ``result`` member of a response is the method
envelope (``{"result": ...}`` or ``{"error": ...}``); protocol problems
such as unknown methods come back as JSON-RPC errors.

Local-only: no network listener. Calls run one at a time.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from typing import Any

from .logging_config import configure_logging
from .rpc.router import RpcRegistry, get_registry, register_handlers
from .rpc.types import (
    INVALID_REQUEST,
    RpcError,
    jsonrpc_error,
    jsonrpc_result,
    readline,
    write,
)
from .runner import CommandRunner, FileReader, SystemContext
from .settings import settings

logger = logging.getLogger(__name__)


def handle_request(
    ctx: SystemContext, registry: RpcRegistry, req: dict[str, Any]
) -> dict[str, Any] | None:
    """Handle one decoded JSON-RPC request; returns None for notifications."""
    method = req.get("method")
    req_id = req.get("id")
    params = req.get("params")

    correlation_id = uuid.uuid4().hex[:12]
    logger.debug("RPC request [%s] method=%s req_id=%s", correlation_id, method, req_id)

    # Notifications can omit id; ignore.
    if req_id is None:
        return None

    try:
        if not isinstance(method, str) or not method:
            raise RpcError(INVALID_REQUEST, "method must be a non-empty string")

        if method == "ping":
            return jsonrpc_result(req_id=req_id, result="pong")

        result = registry.dispatch(ctx, method, params)
        if result.code is not None:
            raise RpcError(result.code, result.error or "Error")

        return jsonrpc_result(req_id=req_id, result=registry.envelope(method, result))

    except RpcError as exc:
        logger.warning(
            "RPC error [%s] method=%s code=%d: %s",
            correlation_id,
            method,
            exc.code,
            exc.message,
        )
        return jsonrpc_error(req_id=req_id, code=exc.code, message=exc.message, data=exc.data)


def run_stdio_server(ctx: SystemContext, registry: RpcRegistry) -> None:
    """Serve requests from stdin until it is closed."""
    while True:
        line = readline()
        if line is None:
            return

        line = line.strip()
        if not line:
            continue

        try:
            req = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring undecodable request: %s", exc)
            continue

        if not isinstance(req, dict):
            continue

        resp = handle_request(ctx, registry, req)
        if resp is not None:
            write(resp)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devinfo",
        description="Answer device introspection method calls over stdio JSON-RPC.",
    )
    parser.add_argument("--call", metavar="METHOD", help="Run a single method and print its envelope")
    parser.add_argument("--args", default="{}", help="JSON object of method arguments (with --call)")
    parser.add_argument("--list", action="store_true", help="List available methods and exit")
    parser.add_argument("--log-level", default=None, help="Override DEVINFO_LOG_LEVEL")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level or settings.log_level, settings.log_file)

    register_handlers()
    registry = get_registry()
    ctx = SystemContext(runner=CommandRunner(), files=FileReader(settings.root))

    if args.list:
        for name in registry.list_methods():
            print(name)
        return 0

    if args.call:
        try:
            params = json.loads(args.args)
        except json.JSONDecodeError as exc:
            print(f"Invalid --args: {exc}", file=sys.stderr)
            return 2
        result = registry.dispatch(ctx, args.call, params)
        if result.code is not None:
            print(result.error, file=sys.stderr)
            return 2
        print(json.dumps(registry.envelope(args.call, result), indent=2))
        return 0 if result.ok else 1

    run_stdio_server(ctx, registry)
    return 0


if __name__ == "__main__":
    sys.exit(main())
