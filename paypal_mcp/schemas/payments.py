"""Argument models for payment operations (orders, vault, payments, subscriptions)."""
from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import Field, StrictInt, model_validator

from .common import (
    Amount,
    ArgumentsModel,
    CurrencyCode,
    Email,
    MoneyValue,
    PayPalObject,
    Quantity,
    at_least_one,
    matches,
    required,
)

__all__ = [
    "CreatePaymentTokenArgs",
    "CreateOrderArgs",
    "CaptureOrderArgs",
    "CreatePaymentArgs",
    "CreateSubscriptionArgs",
]

CardNumber = Annotated[str, matches(r"^\d{13,19}$", "Card number must be between 13 and 19 digits")]
ShippingPreference = Literal["GET_FROM_FILE", "NO_SHIPPING", "SET_PROVIDED_ADDRESS"]


# --- create_payment_token ----------------------------------------------------


class Card(PayPalObject):
    name: Annotated[str, required("Card holder name is required")]
    number: CardNumber
    expiry: Annotated[str, matches(r"^(0[1-9]|1[0-2])/\d{2}$", "Expiry must be in format MM/YY")]
    security_code: Annotated[str, matches(r"^\d{3,4}$", "Security code must be 3 or 4 digits")]


class PayPalWalletSource(PayPalObject):
    email_address: Email


class VaultPaymentSource(PayPalObject):
    card: Optional[Card] = None
    paypal: Optional[PayPalWalletSource] = None

    @model_validator(mode="after")
    def _one_source(self) -> "VaultPaymentSource":
        if self.card is None and self.paypal is None:
            raise ValueError("Either card or paypal payment source must be provided")
        return self


class Customer(PayPalObject):
    id: Annotated[str, required("Customer ID is required")]
    email_address: Optional[Email] = None


class CreatePaymentTokenArgs(ArgumentsModel):
    customer: Customer
    payment_source: VaultPaymentSource


# --- create_order / capture_order --------------------------------------------


class OrderItem(PayPalObject):
    name: Annotated[str, required("Item name is required")]
    quantity: Quantity
    unit_amount: Amount
    description: Optional[str] = None


class PurchaseUnit(PayPalObject):
    amount: Amount
    description: Optional[str] = None
    reference_id: Optional[str] = None
    items: Optional[List[OrderItem]] = None


class OrderApplicationContext(PayPalObject):
    brand_name: Optional[str] = None
    shipping_preference: Optional[ShippingPreference] = None
    user_action: Optional[Literal["CONTINUE", "PAY_NOW"]] = None


class CreateOrderArgs(ArgumentsModel):
    intent: Literal["CAPTURE", "AUTHORIZE"]
    purchase_units: Annotated[
        List[PurchaseUnit], at_least_one("At least one purchase unit is required")
    ]
    application_context: Optional[OrderApplicationContext] = None


class TokenReference(PayPalObject):
    id: str
    type: str


class CapturePaymentSource(PayPalObject):
    token: Optional[TokenReference] = None


class CaptureOrderArgs(ArgumentsModel):
    # interpolated into the URL path
    order_id: Annotated[
        str,
        required("Order ID is required"),
        matches(r"^[A-Za-z0-9_-]*$", "Order ID may only contain letters, digits, '-' and '_'"),
    ]
    payment_source: Optional[CapturePaymentSource] = None


# --- create_payment (v1 payments API) ----------------------------------------


class CreditCard(PayPalObject):
    number: CardNumber
    type: Annotated[str, required("Card type is required")]
    expire_month: Annotated[StrictInt, Field(ge=1, le=12)]
    expire_year: Annotated[StrictInt, Field(ge=2000)]
    cvv2: Annotated[str, matches(r"^\d{3,4}$", "CVV must be 3 or 4 digits")]
    first_name: Annotated[str, required("First name is required")]
    last_name: Annotated[str, required("Last name is required")]


class FundingInstrument(PayPalObject):
    credit_card: Optional[CreditCard] = None


class Payer(PayPalObject):
    payment_method: Annotated[str, required("Payment method is required")]
    funding_instruments: Optional[List[FundingInstrument]] = None


class TransactionAmount(PayPalObject):
    total: MoneyValue
    currency: CurrencyCode


class Transaction(PayPalObject):
    amount: TransactionAmount
    description: Optional[str] = None


class CreatePaymentArgs(ArgumentsModel):
    intent: Annotated[str, required("Intent is required")]
    payer: Payer
    transactions: Annotated[
        List[Transaction], at_least_one("At least one transaction is required")
    ]


# --- create_subscription -----------------------------------------------------


class SubscriberName(PayPalObject):
    given_name: Annotated[str, required("Given name is required")]
    surname: Annotated[str, required("Surname is required")]


class Subscriber(PayPalObject):
    name: SubscriberName
    email_address: Email


class SubscriptionPaymentMethod(PayPalObject):
    payer_selected: Optional[str] = None
    payee_preferred: Optional[str] = None


class SubscriptionApplicationContext(PayPalObject):
    brand_name: Optional[str] = None
    shipping_preference: Optional[ShippingPreference] = None
    user_action: Optional[Literal["CONTINUE", "SUBSCRIBE_NOW"]] = None
    payment_method: Optional[SubscriptionPaymentMethod] = None


class CreateSubscriptionArgs(ArgumentsModel):
    plan_id: Annotated[str, required("Plan ID is required")]
    subscriber: Subscriber
    application_context: Optional[SubscriptionApplicationContext] = None
