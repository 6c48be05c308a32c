"""Business operations: catalog products, invoices, batch payouts."""
from __future__ import annotations

from typing import Any, Dict

from integrations.paypal.http import PayPalHTTP

from ..dispatcher import OperationDefinition
from ..schemas import CreateInvoiceArgs, CreatePayoutArgs, CreateProductArgs

__all__ = ["OPERATIONS", "build_invoice"]

# PayPal requires an invoicer name; the merchant profile is not consulted.
DEFAULT_INVOICER = {"name": {"given_name": "Business", "surname": "Owner"}}


async def create_product(args: CreateProductArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v1/catalogs/products", args.to_payload())


def build_invoice(args: CreateInvoiceArgs) -> Dict[str, Any]:
    """Reshape flat invoice arguments into the ``/v2/invoicing/invoices`` body."""

    flat = args.to_payload()
    detail_keys = (
        "invoice_number",
        "reference",
        "currency_code",
        "note",
        "terms_and_conditions",
        "memo",
        "payment_term",
    )
    return {
        "detail": {k: flat[k] for k in detail_keys if k in flat},
        "invoicer": DEFAULT_INVOICER,
        "primary_recipients": [
            {"billing_info": {"email_address": flat["recipient_email"]}}
        ],
        "items": flat["items"],
    }


async def create_invoice(args: CreateInvoiceArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v2/invoicing/invoices", build_invoice(args))


async def create_payout(args: CreatePayoutArgs, http: PayPalHTTP) -> Any:
    return await http.post_json("/v1/payments/payouts", args.to_payload())


OPERATIONS = [
    OperationDefinition(
        name="create_product",
        description="Create a new product in the catalog",
        arguments=CreateProductArgs,
        handler=create_product,
    ),
    OperationDefinition(
        name="create_invoice",
        description="Generate a new invoice",
        arguments=CreateInvoiceArgs,
        handler=create_invoice,
    ),
    OperationDefinition(
        name="create_payout",
        description="Process a batch payout",
        arguments=CreatePayoutArgs,
        handler=create_payout,
    ),
]
