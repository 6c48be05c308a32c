"""Masking of secret-like fields before anything reaches a log sink."""
from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel

__all__ = ["MASK", "is_sensitive_key", "redact"]

MASK = "[REDACTED]"

# Matched anywhere in the key, case-insensitively.
_SENSITIVE_FRAGMENTS = (
    "secret",
    "token",
    "password",
    "cvv",
    "security_code",
    "authorization",
)

# Matched against the whole key only; "number" alone is a card number, while
# "invoice_number" is not.
_SENSITIVE_KEYS = frozenset({"number", "card_number", "account_number"})


def is_sensitive_key(key: Any) -> bool:
    if not isinstance(key, str):
        return False
    lowered = key.lower()
    if lowered in _SENSITIVE_KEYS:
        return True
    return any(fragment in lowered for fragment in _SENSITIVE_FRAGMENTS)


def redact(value: Any) -> Any:
    """Return a copy of *value* with sensitive fields replaced by :data:`MASK`.

    Mappings, lists, tuples and pydantic models are walked recursively. The
    input is never mutated; scalars are returned as-is.
    """

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, Mapping):
        return {
            k: (MASK if is_sensitive_key(k) else redact(v)) for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value
