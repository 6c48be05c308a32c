"""Request-issuing capability for PayPal REST calls.

A :class:`PayPalHTTP` is a thin view over the shared ``httpx.AsyncClient``
owned by :class:`integrations.paypal.auth.CredentialManager`:

* base URL fixed by the manager's environment (sandbox or live)
* ``Authorization: Bearer`` + JSON content headers fixed per instance
* Prometheus counters + histogram (labels: endpoint, method, status)
* a 401 carrying the bound token reports the token back for invalidation

No retry loop: 401, 429 and transport failures are raised to the caller.

Tests swap the transport for ``httpx.MockTransport``; no network is used in CI.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from common.metrics import http_latency_seconds, http_requests_total

from .errors import bearer_token_of

__all__ = ["PayPalHTTP"]

_LOG = logging.getLogger(__name__)


class PayPalHTTP:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        token: Optional[str] = None,
        on_auth_rejected: Optional[Callable[[Optional[str]], Any]] = None,
    ) -> None:
        self._client = client
        self._token = token
        self._on_auth_rejected = on_auth_rejected

    @property
    def base_url(self) -> str:
        return str(self._client.base_url).rstrip("/")

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self._token is not None:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        endpoint: Optional[str] = None,
    ) -> httpx.Response:
        """Issue exactly one request; raise ``httpx`` errors for non-2xx."""

        merged = {**self.headers, **(headers or {})}
        endpoint_label = endpoint or url.split("?", 1)[0]
        method = method.upper()

        start = time.perf_counter()
        try:
            resp = await self._client.request(
                method, url, json=json, params=params, headers=merged
            )
        except httpx.RequestError as exc:
            http_requests_total.labels(endpoint_label, method.lower(), "error").inc()
            _LOG.warning(
                "PayPal %s %s failed without response: %s",
                method,
                endpoint_label,
                type(exc).__name__,
            )
            raise
        finally:
            http_latency_seconds.labels(endpoint_label).observe(time.perf_counter() - start)

        http_requests_total.labels(endpoint_label, method.lower(), resp.status_code).inc()
        _LOG.debug("PayPal %s %s -> %s", method, endpoint_label, resp.status_code)

        if resp.status_code == 401 and self._on_auth_rejected is not None:
            rejected = bearer_token_of(resp.request)
            # only report our own token; callers may send a user token instead
            if rejected is not None and rejected == self._token:
                self._on_auth_rejected(rejected)

        resp.raise_for_status()
        return resp

    async def get_json(self, url: str, **kw: Any) -> Any:
        resp = await self.request("GET", url, **kw)
        return _decode(resp)

    async def post_json(self, url: str, json: Any = None, **kw: Any) -> Any:
        resp = await self.request("POST", url, json=json, **kw)
        return _decode(resp)


def _decode(resp: httpx.Response) -> Any:
    # 201/204 responses from some PayPal endpoints have no body
    if not resp.content:
        return {}
    return resp.json()
