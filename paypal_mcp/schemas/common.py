"""Shared field types for operation argument models."""
from __future__ import annotations

import re
from typing import Annotated, Any, Dict, Sequence
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict

__all__ = [
    "ArgumentsModel",
    "PayPalObject",
    "Amount",
    "CurrencyCode",
    "MoneyValue",
    "Quantity",
    "Email",
    "Url",
    "required",
    "matches",
    "at_least_one",
]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ArgumentsModel(BaseModel):
    """Base for validated operation arguments. Unknown top-level keys are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class PayPalObject(ArgumentsModel):
    """A nested PayPal request object.

    Only the fields listed are checked; any other keys (``breakdown``,
    ``payee``, ``shipping`` and the like) are forwarded to PayPal unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)


def required(message: str) -> AfterValidator:
    def check(value: str) -> str:
        if not value:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def matches(pattern: str, message: str) -> AfterValidator:
    compiled = re.compile(pattern)

    def check(value: str) -> str:
        if not compiled.match(value):
            raise ValueError(message)
        return value

    return AfterValidator(check)


def at_least_one(message: str) -> AfterValidator:
    def check(value: Sequence[Any]) -> Sequence[Any]:
        if len(value) < 1:
            raise ValueError(message)
        return value

    return AfterValidator(check)


def _currency_code(value: str) -> str:
    if len(value) != 3:
        raise ValueError("Currency code must be exactly 3 characters")
    return value.upper()


def _email(value: str) -> str:
    if not _EMAIL_RE.match(value):
        raise ValueError("Must be a valid email address")
    return value


def _url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Must be a valid URL")
    return value


CurrencyCode = Annotated[str, AfterValidator(_currency_code)]
MoneyValue = Annotated[str, matches(r"^\d+\.?\d*$", "Must be a valid currency amount")]
Quantity = Annotated[str, matches(r"^\d+$", "Quantity must be a positive integer")]
Email = Annotated[str, AfterValidator(_email)]
Url = Annotated[str, AfterValidator(_url)]


class Amount(PayPalObject):
    currency_code: CurrencyCode
    value: MoneyValue
