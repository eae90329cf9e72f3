"""RPC layer for devinfo.

Method registry, outcome types and the JSON-RPC framing used by the stdio
server.
"""

from __future__ import annotations

from devinfo.rpc.types import (
    JSON,
    RpcError,
    MethodResult,
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    jsonrpc_error,
    jsonrpc_result,
    readline,
    write,
)

from devinfo.rpc.router import (
    RpcRegistry,
    MethodSpec,
    register,
    dispatch,
    call,
    get_method,
    get_registry,
    list_methods,
    register_handlers,
)

__all__ = [
    # Types
    "JSON",
    "RpcError",
    "MethodResult",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    # Utilities
    "jsonrpc_error",
    "jsonrpc_result",
    "readline",
    "write",
    # Router
    "RpcRegistry",
    "MethodSpec",
    "register",
    "dispatch",
    "call",
    "get_method",
    "get_registry",
    "list_methods",
    "register_handlers",
]
