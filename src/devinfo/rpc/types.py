"""Shared RPC types: method outcomes, JSON-RPC framing and stdio helpers."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any

JSON = dict[str, Any]

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class RpcError(RuntimeError):
    """Protocol-level failure, reported as a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data


@dataclass(frozen=True)
class MethodResult:
    """Outcome of a method call: either a value or an error message.

    Check :attr:`ok` before reading :attr:`value` or :attr:`error`.
    ``code`` is set only for failures the transport should report as a
    protocol error (unknown method, malformed params).
    """

    ok: bool
    value: Any = None
    error: str | None = None
    code: int | None = None

    @classmethod
    def success(cls, value: Any) -> MethodResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str, *, code: int | None = None) -> MethodResult:
        return cls(ok=False, error=message, code=code)

    def to_envelope(self, *, bare: bool = False) -> Any:
        """Render as ``{"result": ...}`` / ``{"error": ...}``.

        With ``bare`` a successful value is returned as-is, which is how the
        older methods report their payload.
        """
        if not self.ok:
            return {"error": self.error}
        if bare:
            return self.value
        return {"result": self.value}


def jsonrpc_error(*, req_id: Any, code: int, message: str, data: Any | None = None) -> JSON:
    err: JSON = {"code": code, "message": message}
    if data is not None:
        err["data"] = data
    return {"jsonrpc": "2.0", "id": req_id, "error": err}


def jsonrpc_result(*, req_id: Any, result: Any) -> JSON:
    return {"jsonrpc": "2.0", "id": req_id, "result": result}


def readline() -> str | None:
    line = sys.stdin.readline()
    if not line:
        return None
    return line


def write(obj: Any) -> None:
    try:
        sys.stdout.write(json.dumps(obj, ensure_ascii=False) + "\n")
        sys.stdout.flush()
    except BrokenPipeError:
        # Caller closed the pipe; treat as a clean shutdown.
        raise SystemExit(0) from None
