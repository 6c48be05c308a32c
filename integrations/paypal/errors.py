"""Failure taxonomy for PayPal calls and the normalizer that maps onto it.

Everything that can go wrong in an operation ends up as exactly one
:class:`NormalizedError`:

* ``ValidationError``        : arguments rejected before any network call
* ``AuthError``              : credential exchange failed or bearer token rejected (401)
* ``RateLimited``            : HTTP 429, with the Retry-After hint when present
* ``TransientNetworkError``  : no response at all (timeout, reset, DNS)
* ``ProviderError``          : any other 4xx/5xx from PayPal
* ``UnknownError``           : everything else

Messages never carry request payloads or credentials; ``detail`` is always
passed through :func:`common.redaction.redact` first.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from email.utils import parsedate_to_datetime
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, List, Optional

import httpx
import pydantic

from common.redaction import redact

__all__ = [
    "ErrorKind",
    "NormalizedError",
    "PayPalError",
    "InputValidationError",
    "AuthError",
    "RateLimitedError",
    "TransientNetworkError",
    "ProviderError",
    "describe_validation_errors",
    "normalize_error",
    "bearer_token_of",
]

_LOG = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    AUTH = "AuthError"
    RATE_LIMITED = "RateLimited"
    TRANSIENT = "TransientNetworkError"
    PROVIDER = "ProviderError"
    UNKNOWN = "UnknownError"


@dataclass(frozen=True, slots=True)
class NormalizedError:
    kind: ErrorKind
    message: str
    detail: Any = None
    status: Optional[int] = None
    retry_after: Optional[float] = None

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return {k: v for k, v in data.items() if v is not None}

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


# ---------------------------------------------------------------------------
# Exception hierarchy (raised inside the integration layer)
# ---------------------------------------------------------------------------


class PayPalError(Exception):
    """Base class for failures that already know their taxonomy kind."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        detail: Any = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.status = status

    def to_normalized(self) -> NormalizedError:
        return NormalizedError(
            kind=self.kind,
            message=self.message,
            detail=redact(self.detail) if self.detail is not None else None,
            status=self.status,
        )


class InputValidationError(PayPalError):
    kind = ErrorKind.VALIDATION

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        message = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(message or "Invalid arguments", detail={"errors": errors})
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc: pydantic.ValidationError) -> "InputValidationError":
        return cls(describe_validation_errors(exc))


class AuthError(PayPalError):
    kind = ErrorKind.AUTH


class RateLimitedError(PayPalError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, *, retry_after: Optional[float] = None, **kw: Any) -> None:
        super().__init__(message, **kw)
        self.retry_after = retry_after

    def to_normalized(self) -> NormalizedError:
        base = super().to_normalized()
        return NormalizedError(
            kind=base.kind,
            message=base.message,
            detail=base.detail,
            status=base.status,
            retry_after=self.retry_after,
        )


class TransientNetworkError(PayPalError):
    kind = ErrorKind.TRANSIENT


class ProviderError(PayPalError):
    kind = ErrorKind.PROVIDER


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def describe_validation_errors(exc: pydantic.ValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``[{"field": "a.0.b", "message": "..."}]``."""

    described: List[Dict[str, str]] = []
    for err in exc.errors(include_url=False):
        field = ".".join(str(part) for part in err.get("loc", ())) or "(root)"
        message = str(err.get("msg", "Invalid value"))
        # custom validators raise ValueError; pydantic prefixes those
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        described.append({"field": field, "message": message})
    return described


def bearer_token_of(request: Optional[httpx.Request]) -> Optional[str]:
    """Return the bearer token a request was sent with, if any."""

    if request is None:
        return None
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def _network_reason(exc: Exception) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "request timed out"
    text = str(exc)
    # httpx may echo request headers in transport errors
    if not text or "Authorization" in text or "Bearer" in text or "Basic" in text:
        return type(exc).__name__
    return f"{type(exc).__name__}: {text}"


def _json_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def _from_status(
    exc: httpx.HTTPStatusError,
    on_auth_failure: Optional[Callable[[Optional[str]], None]],
) -> NormalizedError:
    response = exc.response
    status = response.status_code
    body = _json_body(response)
    detail = redact(body) if body else None

    if status == 401:
        if on_auth_failure is not None:
            on_auth_failure(bearer_token_of(exc.request))
        return NormalizedError(
            kind=ErrorKind.AUTH,
            message="Authentication failed with PayPal API. Token may have expired.",
            detail=detail,
            status=status,
        )

    if status == 429:
        raw_hint = response.headers.get("Retry-After")
        retry_after = _parse_retry_after(raw_hint)
        message = "PayPal rate limit exceeded"
        if retry_after is not None:
            message += f"; retry after {retry_after:g} seconds"
        elif raw_hint:
            message += f"; retry after {raw_hint}"
        return NormalizedError(
            kind=ErrorKind.RATE_LIMITED,
            message=message,
            detail=detail,
            status=status,
            retry_after=retry_after,
        )

    described = None
    if body:
        for key in ("error_description", "message"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                described = value
                break
    return NormalizedError(
        kind=ErrorKind.PROVIDER,
        message=described or f"provider request failed with status {status}",
        detail=detail,
        status=status,
    )


def normalize_error(
    exc: BaseException,
    *,
    on_auth_failure: Optional[Callable[[Optional[str]], None]] = None,
) -> NormalizedError:
    """Classify *exc* into the gateway's error taxonomy.

    ``on_auth_failure`` is called with the rejected bearer token whenever a
    401 is classified, so the credential cache can drop it.
    """

    if isinstance(exc, PayPalError):
        return exc.to_normalized()
    if isinstance(exc, pydantic.ValidationError):
        return InputValidationError.from_pydantic(exc).to_normalized()
    if isinstance(exc, httpx.HTTPStatusError):
        return _from_status(exc, on_auth_failure)
    if isinstance(exc, httpx.RequestError):
        return NormalizedError(
            kind=ErrorKind.TRANSIENT,
            message=f"Network error talking to PayPal: {_network_reason(exc)}",
        )

    _LOG.debug("Unclassified failure: %s", type(exc).__name__)
    return NormalizedError(
        kind=ErrorKind.UNKNOWN,
        message=str(exc) or type(exc).__name__,
        detail={"type": type(exc).__name__},
    )
