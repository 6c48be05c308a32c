"""Argument models for catalog, invoicing and payout operations."""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from .common import (
    Amount,
    ArgumentsModel,
    CurrencyCode,
    Email,
    MoneyValue,
    PayPalObject,
    Quantity,
    Url,
    at_least_one,
    matches,
    required,
)

__all__ = ["CreateProductArgs", "CreateInvoiceArgs", "CreatePayoutArgs"]


class CreateProductArgs(ArgumentsModel):
    name: Annotated[str, required("Product name is required")]
    description: Annotated[str, required("Product description is required")]
    type: Literal["PHYSICAL", "DIGITAL", "SERVICE"]
    category: Annotated[str, required("Product category is required")]
    image_url: Optional[Url] = None
    home_url: Optional[Url] = None


class InvoiceTax(PayPalObject):
    name: Annotated[str, required("Tax name is required")]
    percent: Annotated[str, matches(r"^\d+(\.\d+)?$", "Tax percent must be a valid number")]


class InvoiceItem(PayPalObject):
    name: Annotated[str, required("Item name is required")]
    quantity: Quantity
    unit_amount: Amount
    description: Optional[str] = None
    tax: Optional[InvoiceTax] = None


class PaymentTerm(PayPalObject):
    term_type: Literal[
        "DUE_ON_RECEIPT",
        "DUE_ON_DATE",
        "NET_10",
        "NET_15",
        "NET_30",
        "NET_45",
        "NET_60",
        "NET_90",
    ]
    due_date: Optional[
        Annotated[str, matches(r"^\d{4}-\d{2}-\d{2}$", "Due date must be in YYYY-MM-DD format")]
    ] = None


class CreateInvoiceArgs(ArgumentsModel):
    invoice_number: Annotated[str, required("Invoice number is required")]
    reference: Annotated[str, required("Reference is required")]
    currency_code: CurrencyCode
    recipient_email: Email
    items: Annotated[List[InvoiceItem], at_least_one("At least one item is required")]
    note: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    memo: Optional[str] = None
    payment_term: Optional[PaymentTerm] = None


class SenderBatchHeader(PayPalObject):
    sender_batch_id: Annotated[str, required("Sender batch ID is required")]
    email_subject: Optional[str] = None
    recipient_type: Optional[str] = None


class PayoutAmount(PayPalObject):
    value: MoneyValue
    currency: CurrencyCode


class PayoutItem(PayPalObject):
    recipient_type: Annotated[str, required("Recipient type is required")]
    amount: PayoutAmount
    receiver: Annotated[str, required("Receiver is required")]
    note: Optional[str] = None


class CreatePayoutArgs(ArgumentsModel):
    sender_batch_header: SenderBatchHeader
    items: Annotated[List[PayoutItem], at_least_one("At least one payout item is required")]
