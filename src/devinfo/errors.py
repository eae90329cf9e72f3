"""Error taxonomy for devinfo method calls.

Every failure a handler can report is one of these. The dispatcher turns
them into ``{"error": message}`` envelopes; nothing propagates past it.
"""

from __future__ import annotations

from typing import Any


class DevinfoError(Exception):
    """Base class for failures surfaced to callers as an error envelope."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.context:
            data["context"] = self.context
        return data


class UtilityUnavailable(DevinfoError):
    """An external command could not be started or a kernel file could not be opened."""


class NoData(DevinfoError):
    """A command ran but produced no parseable records."""


class MalformedInput(DevinfoError):
    """Output of a downstream tool could not be interpreted."""


class InvalidArgument(DevinfoError):
    """Caller supplied an unrecognized argument value."""
