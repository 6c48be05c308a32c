"""Validated argument shapes, one model per operation."""
from .business import CreateInvoiceArgs, CreatePayoutArgs, CreateProductArgs
from .common import ArgumentsModel
from .payments import (
    CaptureOrderArgs,
    CreateOrderArgs,
    CreatePaymentArgs,
    CreatePaymentTokenArgs,
    CreateSubscriptionArgs,
)
from .users import CreateWebProfileArgs, GetUserInfoArgs, GetWebProfilesArgs

__all__ = [
    "ArgumentsModel",
    "CreatePaymentTokenArgs",
    "CreateOrderArgs",
    "CaptureOrderArgs",
    "CreatePaymentArgs",
    "CreateSubscriptionArgs",
    "CreateProductArgs",
    "CreateInvoiceArgs",
    "CreatePayoutArgs",
    "GetUserInfoArgs",
    "CreateWebProfileArgs",
    "GetWebProfilesArgs",
]
