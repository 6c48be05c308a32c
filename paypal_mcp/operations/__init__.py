"""All operations the gateway exposes, grouped by PayPal product area."""
from __future__ import annotations

from typing import List

from integrations.paypal.auth import CredentialManager

from ..dispatcher import OperationDefinition, OperationDispatcher
from .business import OPERATIONS as BUSINESS_OPERATIONS
from .payments import OPERATIONS as PAYMENT_OPERATIONS
from .users import OPERATIONS as USER_OPERATIONS

__all__ = ["ALL_OPERATIONS", "build_dispatcher"]

ALL_OPERATIONS: List[OperationDefinition] = [
    *PAYMENT_OPERATIONS,
    *BUSINESS_OPERATIONS,
    *USER_OPERATIONS,
]


def build_dispatcher(credentials: CredentialManager) -> OperationDispatcher:
    return OperationDispatcher(credentials, ALL_OPERATIONS)
