"""Method registry and dispatcher.

Maps method names to handlers with their declared arguments. Handlers are
registered at import time of :mod:`devinfo.rpc.handlers`; the table does
not change after startup.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

from devinfo.errors import DevinfoError
from devinfo.rpc.types import INVALID_PARAMS, METHOD_NOT_FOUND, MethodResult
from devinfo.runner import SystemContext

logger = logging.getLogger(__name__)


class Handler(Protocol):
    """Protocol for method handlers: context first, declared args as keywords."""

    def __call__(self, ctx: SystemContext, **kwargs: Any) -> Any:
        ...


@dataclass(frozen=True)
class MethodSpec:
    """A registered method."""

    name: str
    handler: Handler
    args: Mapping[str, Any] = field(default_factory=dict)  # name -> default
    legacy: bool = False  # payload rendered without a "result" wrapper


class RpcRegistry:
    """Registry of methods with argument defaulting and outcome normalization."""

    def __init__(self) -> None:
        self._methods: dict[str, MethodSpec] = {}

    def register(
        self,
        name: str,
        *,
        args: Mapping[str, Any] | None = None,
        legacy: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Decorator to register a handler.

        Usage:
            @register("getSwconfigPortState", args={"switch": "switch0"})
            def handle_port_state(ctx: SystemContext, *, switch: str) -> MethodResult:
                ...

        Args:
            name: The method name.
            args: Declared arguments mapped to their default values.
            legacy: Render the success payload at top level.
        """

        def decorator(func: Handler) -> Handler:
            self._methods[name] = MethodSpec(
                name=name, handler=func, args=dict(args or {}), legacy=legacy
            )
            return func

        return decorator

    def has_method(self, name: str) -> bool:
        return name in self._methods

    def get_method(self, name: str) -> MethodSpec | None:
        return self._methods.get(name)

    def list_methods(self) -> list[str]:
        return sorted(self._methods.keys())

    def dispatch(self, ctx: SystemContext, method: str, params: Any) -> MethodResult:
        """Run ``method`` and normalize whatever happens into a MethodResult.

        Never raises: handler faults become failures.
        """
        spec = self._methods.get(method)
        if spec is None:
            return MethodResult.failure("Method not found", code=METHOD_NOT_FOUND)

        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            return MethodResult.failure("Invalid parameters", code=INVALID_PARAMS)

        kwargs = {
            arg: params[arg] if arg in params else default
            for arg, default in spec.args.items()
        }

        try:
            outcome = spec.handler(ctx, **kwargs)
        except DevinfoError as e:
            logger.warning("%s in %s: %s", type(e).__name__, method, e.message)
            return MethodResult.failure(e.message)
        except Exception as e:
            logger.exception("Unexpected error in %s", method)
            return MethodResult.failure(str(e) or type(e).__name__)

        if isinstance(outcome, MethodResult):
            return outcome
        return MethodResult.success(outcome)

    def envelope(self, method: str, result: MethodResult) -> Any:
        """Render ``result`` the way callers of ``method`` expect it."""
        spec = self._methods.get(method)
        return result.to_envelope(bare=spec is not None and spec.legacy)

    def call(self, ctx: SystemContext, method: str, params: Any) -> Any:
        """Dispatch and render the caller-facing envelope."""
        return self.envelope(method, self.dispatch(ctx, method, params))


_REGISTRY = RpcRegistry()

register = _REGISTRY.register
dispatch = _REGISTRY.dispatch
call = _REGISTRY.call
get_method = _REGISTRY.get_method
list_methods = _REGISTRY.list_methods


def get_registry() -> RpcRegistry:
    return _REGISTRY


def register_handlers() -> None:
    """Import all handler modules so they register themselves.

    Call this once at startup to populate the method table.
    """
    from devinfo.rpc import handlers as _  # noqa: F401

    logger.debug("Registered %d methods", len(_REGISTRY.list_methods()))
