"""Tests for the method registry and dispatcher."""

from __future__ import annotations

from typing import Any

from devinfo.errors import InvalidArgument, NoData
from devinfo.rpc.router import RpcRegistry
from devinfo.rpc.types import INVALID_PARAMS, METHOD_NOT_FOUND, MethodResult
from devinfo.runner import SystemContext


class TestRpcRegistry:
    def test_register_and_has_method(self) -> None:
        registry = RpcRegistry()
        registry.register("getThing")(lambda ctx: {"ok": True})

        assert registry.has_method("getThing")
        assert not registry.has_method("getOther")

    def test_list_methods(self) -> None:
        registry = RpcRegistry()
        registry.register("getB")(lambda ctx: {})
        registry.register("getA")(lambda ctx: {})
        registry.register("getC")(lambda ctx: {})

        assert registry.list_methods() == ["getA", "getB", "getC"]

    def test_get_method_records_declaration(self) -> None:
        registry = RpcRegistry()

        @registry.register("getThing", args={"name": "x"}, legacy=True)
        def handler(ctx: SystemContext, *, name: str) -> str:
            return name

        spec = registry.get_method("getThing")
        assert spec is not None
        assert spec.handler is handler
        assert spec.args == {"name": "x"}
        assert spec.legacy is True
        assert registry.get_method("missing") is None


class TestDispatch:
    def test_unknown_method(self, ctx: SystemContext) -> None:
        result = RpcRegistry().dispatch(ctx, "getNothing", {})

        assert not result.ok
        assert result.code == METHOD_NOT_FOUND
        assert result.error == "Method not found"

    def test_params_must_be_object(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        registry.register("getThing")(lambda ctx: {})

        result = registry.dispatch(ctx, "getThing", ["switch0"])

        assert not result.ok
        assert result.code == INVALID_PARAMS

    def test_missing_params_use_defaults(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        seen: list[dict[str, Any]] = []

        @registry.register("getThing", args={"switch": "switch0"})
        def handler(ctx: SystemContext, **kwargs: Any) -> int:
            seen.append(kwargs)
            return len(seen)

        omitted = registry.dispatch(ctx, "getThing", None)
        explicit = registry.dispatch(ctx, "getThing", {"switch": "switch0"})

        assert seen == [{"switch": "switch0"}, {"switch": "switch0"}]
        assert omitted.ok and explicit.ok

    def test_undeclared_params_dropped(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        seen: list[dict[str, Any]] = []

        @registry.register("getThing", args={"name": None})
        def handler(ctx: SystemContext, **kwargs: Any) -> None:
            seen.append(kwargs)

        registry.dispatch(ctx, "getThing", {"name": "dnsmasq", "extra": 1})

        assert seen == [{"name": "dnsmasq"}]

    def test_handler_receives_context(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        registry.register("getThing")(lambda c: c)

        assert registry.dispatch(ctx, "getThing", {}).value is ctx

    def test_domain_error_becomes_failure(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()

        @registry.register("getThing")
        def handler(ctx: SystemContext) -> None:
            raise NoData("No such switch")

        result = registry.dispatch(ctx, "getThing", {})

        assert result == MethodResult.failure("No such switch")

    def test_unexpected_exception_becomes_failure(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()

        @registry.register("getThing")
        def handler(ctx: SystemContext) -> None:
            raise KeyError("size")

        result = registry.dispatch(ctx, "getThing", {})

        assert not result.ok
        assert result.code is None
        assert "size" in (result.error or "")

    def test_method_result_passes_through(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        registry.register("getThing")(lambda ctx: MethodResult.failure("Invalid mode"))

        assert registry.dispatch(ctx, "getThing", {}) == MethodResult.failure("Invalid mode")


class TestEnvelope:
    def test_success_is_wrapped(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        registry.register("getThing")(lambda ctx: [1, 2])

        assert registry.call(ctx, "getThing", {}) == {"result": [1, 2]}

    def test_legacy_success_is_bare(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()
        registry.register("getThing", legacy=True)(lambda ctx: {"a": 1})

        assert registry.call(ctx, "getThing", {}) == {"a": 1}

    def test_legacy_failure_still_wrapped(self, ctx: SystemContext) -> None:
        registry = RpcRegistry()

        @registry.register("getThing", legacy=True)
        def handler(ctx: SystemContext) -> None:
            raise InvalidArgument("Invalid mode")

        assert registry.call(ctx, "getThing", {}) == {"error": "Invalid mode"}

    def test_unknown_method_envelope(self, ctx: SystemContext) -> None:
        assert RpcRegistry().call(ctx, "getNothing", {}) == {"error": "Method not found"}
