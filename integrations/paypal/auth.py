"""OAuth2 client-credentials lifecycle for the PayPal REST API.

One :class:`CredentialManager` per (client id, environment) owns the current
access token. Callers never see the token directly; they ask for a
:class:`~integrations.paypal.http.PayPalHTTP` capability which carries it.

Renewal happens lazily: a cached token is reused until it is within
``buffer_seconds`` of expiry, and concurrent callers that find it stale share
a single exchange request.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

import httpx

from common.metrics import (
    oauth_exchange_errors_total,
    oauth_invalidations_total,
    oauth_token_expiry_seconds,
    oauth_tokens_issued_total,
)
from common.redaction import redact

from . import (
    DEFAULT_BUFFER_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    SANDBOX,
    TOKEN_PATH,
    base_url_for,
)
from .errors import AuthError, TransientNetworkError
from .http import PayPalHTTP

__all__ = ["Credential", "CredentialManager"]

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Credential:
    """An issued access token. Renewal replaces it; it is never mutated."""

    access_token: str = field(repr=False)
    expires_in: int
    issued_at: float
    scope: str = ""
    token_type: str = "Bearer"
    app_id: Optional[str] = None

    @property
    def expires_at(self) -> float:
        return self.issued_at + self.expires_in

    def is_usable(self, now: float, buffer_seconds: float) -> bool:
        # a token inside the buffer window counts as expired
        return now < self.expires_at - buffer_seconds

    @classmethod
    def from_response(cls, payload: Mapping[str, Any], *, issued_at: float) -> "Credential":
        """Build from a ``/v1/oauth2/token`` response body.

        Raises ``ValueError`` when a load-bearing field is missing or malformed.
        """

        token = payload.get("access_token")
        if not isinstance(token, str) or not token:
            raise ValueError("access_token missing")
        try:
            expires_in = int(payload["expires_in"])
        except (KeyError, TypeError, ValueError):
            raise ValueError("expires_in missing or not an integer") from None
        if expires_in < 0:
            raise ValueError("expires_in is negative")
        return cls(
            access_token=token,
            expires_in=expires_in,
            issued_at=issued_at,
            scope=str(payload.get("scope") or ""),
            app_id=payload.get("app_id"),
        )


class CredentialManager:
    """Obtains, caches and renews the PayPal access token."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        environment: str = SANDBOX,
        buffer_seconds: float = DEFAULT_BUFFER_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not client_id or not client_secret:
            raise ValueError("client_id and client_secret are required")
        if buffer_seconds < 0:
            raise ValueError("buffer_seconds must be >= 0")
        self._client_id = client_id
        self._client_secret = client_secret
        self._environment = environment
        self._base_url = base_url_for(environment)
        self._buffer_seconds = buffer_seconds
        self._clock = clock

        self._credential: Optional[Credential] = None
        self._inflight: Optional[asyncio.Task] = None

        self._client = httpx.AsyncClient(
            base_url=self._base_url, timeout=timeout, transport=transport
        )
        _LOG.debug(
            "PayPal credential manager ready: environment=%s buffer=%ss",
            environment,
            buffer_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Any, **kw: Any) -> "CredentialManager":
        return cls(
            settings.client_id,
            settings.client_secret,
            environment=settings.environment,
            buffer_seconds=settings.token_buffer_seconds,
            timeout=settings.http_timeout_seconds,
            **kw,
        )

    def __repr__(self) -> str:
        return f"CredentialManager(environment={self._environment!r}, base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def buffer_seconds(self) -> float:
        return self._buffer_seconds

    @property
    def credential(self) -> Optional[Credential]:
        return self._credential

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ensure_credential(self) -> Credential:
        """Return a usable credential, exchanging for a new one if needed."""

        current = self._credential
        if current is not None and current.is_usable(self._clock(), self._buffer_seconds):
            return current
        return await self._shared_exchange()

    async def authenticated_client(self) -> PayPalHTTP:
        """Return a request capability carrying a currently valid bearer token."""

        credential = await self.ensure_credential()
        return PayPalHTTP(
            self._client,
            token=credential.access_token,
            on_auth_rejected=self.invalidate,
        )

    def anonymous_client(self) -> PayPalHTTP:
        """Capability for calls authorised by a caller-supplied token."""

        return PayPalHTTP(self._client)

    async def verify_credentials(self) -> bool:
        """Force one exchange to confirm PayPal accepts the client id/secret."""

        try:
            await self._shared_exchange()
        except AuthError as exc:
            _LOG.error("PayPal credential verification failed: %s", exc.message)
            raise AuthError(
                "PayPal credentials invalid. Check the client ID and secret.",
                status=exc.status,
            ) from exc
        _LOG.info("PayPal credentials verified (environment=%s)", self._environment)
        return True

    def invalidate(self, token: Optional[str] = None) -> bool:
        """Discard the cached credential so the next call exchanges again.

        With *token*, only discard if that token is still the current one: a
        late 401 for an older token must not drop a newer credential.
        """

        current = self._credential
        if current is None:
            return False
        if token is not None and token != current.access_token:
            _LOG.debug("Ignoring rejection of a superseded PayPal token")
            return False
        self._credential = None
        oauth_invalidations_total.labels(self._environment).inc()
        _LOG.info("Discarded cached PayPal access token after rejection")
        return True

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CredentialManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Exchange
    # ------------------------------------------------------------------

    async def _shared_exchange(self) -> Credential:
        # single-flight: every caller arriving while an exchange is running
        # waits on the same task
        task = self._inflight
        if task is None or task.done():
            task = asyncio.get_running_loop().create_task(self._exchange())
            task.add_done_callback(_consume_result)
            self._inflight = task
        # shield so one cancelled waiter does not cancel it for the others
        return await asyncio.shield(task)

    async def _exchange(self) -> Credential:
        env = self._environment
        requested_at = self._clock()
        try:
            try:
                resp = await self._client.post(
                    TOKEN_PATH,
                    data={"grant_type": "client_credentials"},
                    headers={"Accept": "application/json", "Accept-Language": "en_US"},
                    auth=httpx.BasicAuth(self._client_id, self._client_secret),
                )
            except httpx.TimeoutException as exc:
                oauth_exchange_errors_total.labels(env, "timeout").inc()
                _LOG.error("PayPal token exchange timed out")
                raise TransientNetworkError(
                    "Timed out obtaining PayPal access token"
                ) from exc
            except httpx.RequestError as exc:
                oauth_exchange_errors_total.labels(env, "network").inc()
                _LOG.error("PayPal token exchange failed: %s", type(exc).__name__)
                raise TransientNetworkError(
                    f"Network error obtaining PayPal access token: {type(exc).__name__}"
                ) from exc

            if not resp.is_success:
                raise self._rejected(resp)

            try:
                credential = Credential.from_response(resp.json(), issued_at=requested_at)
            except (ValueError, AttributeError) as exc:
                oauth_exchange_errors_total.labels(env, "malformed").inc()
                _LOG.error("PayPal token response was malformed: %s", exc)
                raise AuthError(
                    "Failed to authenticate with PayPal API: malformed token response",
                    status=resp.status_code,
                ) from exc

            # stored only once fully parsed
            self._credential = credential
            oauth_tokens_issued_total.labels(env).inc()
            oauth_token_expiry_seconds.labels(env).set(credential.expires_in)
            _LOG.debug(
                "Obtained new PayPal access token; expires_in=%s scope_len=%s",
                credential.expires_in,
                len(credential.scope),
            )
            return credential
        finally:
            self._inflight = None

    def _rejected(self, resp: httpx.Response) -> AuthError:
        status = resp.status_code
        oauth_exchange_errors_total.labels(self._environment, f"http_{status}").inc()
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = None
        _LOG.error(
            "PayPal token exchange rejected: status=%s body=%s", status, redact(body)
        )

        message = "Failed to authenticate with PayPal API"
        description = (body or {}).get("error_description") or (body or {}).get("error")
        if isinstance(description, str) and description and self._client_secret not in description:
            message = f"{message}: {description}"
        return AuthError(message, status=status, detail=body)


def _consume_result(task: asyncio.Task) -> None:
    # keeps asyncio from warning when every waiter was cancelled
    if not task.cancelled():
        task.exception()
