"""
Tests for the FastMCP tool layer.

Covers:
- registration of every operation as a tool
- argument forwarding (optional arguments left unset are not sent)
- success payload passthrough and ToolError on failure
- end to end through the real dispatcher against the PayPal stub
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from integrations.paypal.errors import ErrorKind, NormalizedError
from paypal_mcp.dispatcher import OperationResult
from paypal_mcp.operations import ALL_OPERATIONS, build_dispatcher
from paypal_mcp.server import SERVER_NAME, build_server, register_tools


def _mock_dispatcher(result: OperationResult) -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.invoke = AsyncMock(return_value=result)
    dispatcher.operations = ALL_OPERATIONS
    return dispatcher


class TestRegistration:
    def test_registers_one_tool_per_operation(self):
        mcp = MagicMock()
        registered_fns = []
        mcp.tool.return_value = lambda fn: registered_fns.append(fn) or fn

        names = register_tools(mcp, _mock_dispatcher(OperationResult.success({})))

        assert mcp.tool.call_count == len(ALL_OPERATIONS) == 11
        assert sorted(fn.__name__ for fn in registered_fns) == sorted(names)

    def test_tool_descriptions_come_from_docstrings(self):
        mcp = MagicMock()
        registered_fns = []
        mcp.tool.return_value = lambda fn: registered_fns.append(fn) or fn

        register_tools(mcp, _mock_dispatcher(OperationResult.success({})))

        assert all(fn.__doc__ for fn in registered_fns)

    def test_build_server_names_the_server(self):
        mcp = build_server(_mock_dispatcher(OperationResult.success({})))
        assert isinstance(mcp, FastMCP)
        assert mcp.name == SERVER_NAME


class TestToolCalls:
    def _register(self, result: OperationResult):
        self.mcp = MagicMock()
        self.fns = []
        self.mcp.tool.return_value = lambda fn: self.fns.append(fn) or fn
        self.dispatcher = _mock_dispatcher(result)
        register_tools(self.mcp, self.dispatcher)

    def _fn(self, name):
        return next(f for f in self.fns if f.__name__ == name)

    @pytest.mark.anyio
    async def test_success_returns_payload(self):
        self._register(OperationResult.success({"id": "ORDER-1", "status": "CREATED"}))

        result = await self._fn("create_order")(
            intent="CAPTURE",
            purchase_units=[{"amount": {"currency_code": "USD", "value": "10.00"}}],
        )

        assert result == {"id": "ORDER-1", "status": "CREATED"}
        self.dispatcher.invoke.assert_awaited_once_with(
            "create_order",
            {
                "intent": "CAPTURE",
                "purchase_units": [{"amount": {"currency_code": "USD", "value": "10.00"}}],
            },
        )

    @pytest.mark.anyio
    async def test_unset_optionals_are_not_forwarded(self):
        self._register(OperationResult.success({}))

        await self._fn("capture_order")(order_id="ORDER-1")

        self.dispatcher.invoke.assert_awaited_once_with("capture_order", {"order_id": "ORDER-1"})

    @pytest.mark.anyio
    async def test_failure_raises_tool_error(self):
        error = NormalizedError(ErrorKind.RATE_LIMITED, "PayPal rate limit exceeded", status=429)
        self._register(OperationResult.failure(error))

        with pytest.raises(ToolError) as exc_info:
            await self._fn("get_web_profiles")()

        assert str(exc_info.value) == "RateLimited: PayPal rate limit exceeded"

    @pytest.mark.anyio
    async def test_get_userinfo_forwards_token(self):
        self._register(OperationResult.success({"user_id": "u"}))

        await self._fn("get_userinfo")(access_token="user-token")

        self.dispatcher.invoke.assert_awaited_once_with("get_userinfo", {"access_token": "user-token"})


class TestEndToEnd:
    @pytest.mark.anyio
    async def test_tool_call_reaches_paypal(self, manager, stub):
        stub.route(
            "POST", "/v1/catalogs/products", lambda r: httpx.Response(201, json={"id": "PROD-1"})
        )
        mcp = MagicMock()
        fns = []
        mcp.tool.return_value = lambda fn: fns.append(fn) or fn
        register_tools(mcp, build_dispatcher(manager))
        create_product = next(f for f in fns if f.__name__ == "create_product")

        result = await create_product(
            name="Video streaming", description="Monthly plan", type="SERVICE", category="SOFTWARE"
        )

        assert result == {"id": "PROD-1"}
        assert stub.token_calls == 1

    @pytest.mark.anyio
    async def test_validation_failure_becomes_tool_error(self, manager, stub):
        mcp = MagicMock()
        fns = []
        mcp.tool.return_value = lambda fn: fns.append(fn) or fn
        register_tools(mcp, build_dispatcher(manager))
        create_product = next(f for f in fns if f.__name__ == "create_product")

        with pytest.raises(ToolError, match="ValidationError"):
            await create_product(name="", description="d", type="BOOK", category="SOFTWARE")

        assert stub.token_calls == 0
