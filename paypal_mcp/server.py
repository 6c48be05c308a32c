"""
PayPal tools for FastMCP.

Usage:
    from paypal_mcp.server import build_server

    mcp = build_server(dispatcher)
    mcp.run()  # stdio

Each tool forwards its arguments to the dispatcher unchanged; validation,
authentication and error normalization all happen there. A failed operation
raises ``ToolError`` so the MCP result is flagged as an error.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from .dispatcher import OperationDispatcher

__all__ = ["SERVER_NAME", "build_server", "register_tools"]

SERVER_NAME = "paypal"

_INSTRUCTIONS = (
    "Tools for the PayPal REST API: orders, payments, vault tokens, "
    "subscriptions, products, invoices, payouts and web experience profiles. "
    "Amounts are strings such as '10.00' with 3-letter currency codes."
)


def _compact(**kwargs: Any) -> dict[str, Any]:
    return {k: v for k, v in kwargs.items() if v is not None}


def register_tools(mcp: FastMCP, dispatcher: OperationDispatcher) -> list[str]:
    """Register every PayPal operation as an MCP tool; return the tool names."""

    async def _call(name: str, arguments: dict[str, Any]) -> Any:
        result = await dispatcher.invoke(name, arguments)
        if result.ok:
            return result.payload
        raise ToolError(str(result.error))

    # --- Payments ---

    @mcp.tool()
    async def create_payment_token(
        customer: dict[str, Any],
        payment_source: dict[str, Any],
    ) -> dict:
        """
        Create a payment token for future use.

        Args:
            customer: {"id": ..., "email_address": optional}
            payment_source: {"card": {name, number, expiry "MM/YY", security_code}}
                or {"paypal": {"email_address": ...}}

        Returns:
            The vault payment token as returned by PayPal
        """
        return await _call(
            "create_payment_token",
            _compact(customer=customer, payment_source=payment_source),
        )

    @mcp.tool()
    async def create_order(
        intent: str,
        purchase_units: list[dict[str, Any]],
        application_context: dict[str, Any] | None = None,
    ) -> dict:
        """
        Create a new order in PayPal.

        Args:
            intent: "CAPTURE" or "AUTHORIZE"
            purchase_units: At least one unit, each with
                amount {"currency_code": "USD", "value": "10.00"}
            application_context: Optional brand_name, shipping_preference, user_action

        Returns:
            The created order as returned by PayPal
        """
        return await _call(
            "create_order",
            _compact(
                intent=intent,
                purchase_units=purchase_units,
                application_context=application_context,
            ),
        )

    @mcp.tool()
    async def capture_order(
        order_id: str,
        payment_source: dict[str, Any] | None = None,
    ) -> dict:
        """Capture payment for an authorized order."""
        return await _call(
            "capture_order", _compact(order_id=order_id, payment_source=payment_source)
        )

    @mcp.tool()
    async def create_payment(
        intent: str,
        payer: dict[str, Any],
        transactions: list[dict[str, Any]],
    ) -> dict:
        """Create a direct payment (v1 payments API)."""
        return await _call(
            "create_payment",
            _compact(intent=intent, payer=payer, transactions=transactions),
        )

    @mcp.tool()
    async def create_subscription(
        plan_id: str,
        subscriber: dict[str, Any],
        application_context: dict[str, Any] | None = None,
    ) -> dict:
        """Create a subscription for recurring billing."""
        return await _call(
            "create_subscription",
            _compact(
                plan_id=plan_id,
                subscriber=subscriber,
                application_context=application_context,
            ),
        )

    # --- Business ---

    @mcp.tool()
    async def create_product(
        name: str,
        description: str,
        type: str,
        category: str,
        image_url: str | None = None,
        home_url: str | None = None,
    ) -> dict:
        """
        Create a new product in the catalog.

        Args:
            name: Product name
            description: Product description
            type: "PHYSICAL", "DIGITAL" or "SERVICE"
            category: PayPal product category, e.g. "SOFTWARE"
            image_url: Optional product image URL
            home_url: Optional product home page URL
        """
        return await _call(
            "create_product",
            _compact(
                name=name,
                description=description,
                type=type,
                category=category,
                image_url=image_url,
                home_url=home_url,
            ),
        )

    @mcp.tool()
    async def create_invoice(
        invoice_number: str,
        reference: str,
        currency_code: str,
        recipient_email: str,
        items: list[dict[str, Any]],
        note: str | None = None,
        terms_and_conditions: str | None = None,
        memo: str | None = None,
        payment_term: dict[str, Any] | None = None,
    ) -> dict:
        """Generate a new invoice."""
        return await _call(
            "create_invoice",
            _compact(
                invoice_number=invoice_number,
                reference=reference,
                currency_code=currency_code,
                recipient_email=recipient_email,
                items=items,
                note=note,
                terms_and_conditions=terms_and_conditions,
                memo=memo,
                payment_term=payment_term,
            ),
        )

    @mcp.tool()
    async def create_payout(
        sender_batch_header: dict[str, Any],
        items: list[dict[str, Any]],
    ) -> dict:
        """Process a batch payout."""
        return await _call(
            "create_payout",
            _compact(sender_batch_header=sender_batch_header, items=items),
        )

    # --- Users ---

    @mcp.tool()
    async def get_userinfo(access_token: str) -> dict:
        """Retrieve user information for a user access token."""
        return await _call("get_userinfo", {"access_token": access_token})

    @mcp.tool()
    async def create_web_profile(
        name: str,
        presentation: dict[str, Any] | None = None,
        input_fields: dict[str, Any] | None = None,
        flow_config: dict[str, Any] | None = None,
    ) -> dict:
        """Create a web experience profile."""
        return await _call(
            "create_web_profile",
            _compact(
                name=name,
                presentation=presentation,
                input_fields=input_fields,
                flow_config=flow_config,
            ),
        )

    @mcp.tool()
    async def get_web_profiles() -> list:
        """Get list of web experience profiles."""
        return await _call("get_web_profiles", {})

    return [op.name for op in dispatcher.operations]


def build_server(dispatcher: OperationDispatcher, *, name: str = SERVER_NAME) -> FastMCP:
    """Create the FastMCP server; the dispatcher's HTTP client closes on shutdown."""

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[Optional[dict]]:
        try:
            yield {}
        finally:
            await dispatcher.aclose()

    mcp = FastMCP(name, instructions=_INSTRUCTIONS, lifespan=lifespan)
    register_tools(mcp, dispatcher)
    return mcp
