"""Payment operations: vault tokens, checkout orders, v1 payments, subscriptions."""
from __future__ import annotations

import logging
from typing import Any

from integrations.paypal.http import PayPalHTTP

from ..dispatcher import OperationDefinition
from ..schemas import (
    CaptureOrderArgs,
    CreateOrderArgs,
    CreatePaymentArgs,
    CreatePaymentTokenArgs,
    CreateSubscriptionArgs,
)

__all__ = ["OPERATIONS"]

_LOG = logging.getLogger(__name__)


async def create_payment_token(args: CreatePaymentTokenArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v1/vault/payment-tokens", args.to_payload())


async def create_order(args: CreateOrderArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v2/checkout/orders", args.to_payload())


async def capture_order(args: CaptureOrderArgs, http: PayPalHTTP) -> Any:
    """Capture an approved order; the body carries only the optional payment source."""

    _LOG.info("Capturing order %s", args.order_id)
    body = {}
    if args.payment_source is not None:
        body = {"payment_source": args.payment_source.to_payload()}
    return await http.post_json(
        f"/v2/checkout/orders/{args.order_id}/capture",
        body,
        endpoint="/v2/checkout/orders/{id}/capture",
    )


async def create_payment(args: CreatePaymentArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v1/payments/payment", args.to_payload())


async def create_subscription(args: CreateSubscriptionArgs, http: PayPalHTTP) -> Any:
    # PayPal reads plan_id from the request body
    _LOG.info("Creating subscription for plan %s", args.plan_id)
    return await http.post_json("/v1/billing/subscriptions", args.to_payload())


OPERATIONS = [
    OperationDefinition(
        name="create_payment_token",
        description="Create a payment token for future use",
        arguments=CreatePaymentTokenArgs,
        handler=create_payment_token,
    ),
    OperationDefinition(
        name="create_order",
        description="Create a new order in PayPal",
        arguments=CreateOrderArgs,
        handler=create_order,
    ),
    OperationDefinition(
        name="capture_order",
        description="Capture payment for an authorized order",
        arguments=CaptureOrderArgs,
        handler=capture_order,
    ),
    OperationDefinition(
        name="create_payment",
        description="Create a direct payment",
        arguments=CreatePaymentArgs,
        handler=create_payment,
    ),
    OperationDefinition(
        name="create_subscription",
        description="Create a subscription for recurring billing",
        arguments=CreateSubscriptionArgs,
        handler=create_subscription,
    ),
]
