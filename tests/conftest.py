import asyncio
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from common import secrets as secrets_module
from integrations.paypal.auth import CredentialManager


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _secrets(monkeypatch) -> None:
    """Isolate every test from the real secrets file and PayPal env vars."""

    for key in (
        "PAYPAL_CLIENT_ID",
        "PAYPAL_CLIENT_SECRET",
        "PAYPAL_ENVIRONMENT",
        "PAYPAL_TOKEN_BUFFER_SECONDS",
        "PAYPAL_HTTP_TIMEOUT_SECONDS",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(key, raising=False)
    secrets_module.secrets.set_override({})
    yield
    secrets_module.secrets.set_override({})


# ---------------------------------------------------------------------------
# PayPal stub
# ---------------------------------------------------------------------------

Route = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class PayPalStub(httpx.AsyncBaseTransport):
    """Token endpoint plus per-route business handlers; counts every call.

    Business routes require a bearer token the stub has issued and that has
    not been revoked, like the real API does.
    """

    def __init__(self, *, expires_in: int = 32400) -> None:
        self.expires_in = expires_in
        self.token_calls = 0
        self.token_requests: List[httpx.Request] = []
        self.requests: List[httpx.Request] = []
        self.issued: List[str] = []
        self.revoked: set = set()
        self.token_route: Optional[Route] = None
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.require_bearer = True

    def route(self, method: str, path: str, handler: Route) -> None:
        self.routes[(method.upper(), path)] = handler

    async def handle_async_request(self, request):  # type: ignore[override]
        # yield like a real network round-trip would
        await asyncio.sleep(0)
        if request.url.path == "/v1/oauth2/token":
            self.token_calls += 1
            self.token_requests.append(request)
            if self.token_route is not None:
                return self.token_route(request)
            token = f"A21AA-token-{self.token_calls}"
            self.issued.append(token)
            return httpx.Response(
                200,
                json={
                    "scope": "https://uri.paypal.com/services/payments/payment",
                    "access_token": token,
                    "token_type": "Bearer",
                    "app_id": "APP-80W284485P519543T",
                    "expires_in": self.expires_in,
                    "nonce": "2024-01-01T00:00:00Zabc",
                },
            )

        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND", "message": "no route"})
        if self.require_bearer:
            scheme, _, token = request.headers.get("Authorization", "").partition(" ")
            if scheme != "Bearer" or token not in self.issued or token in self.revoked:
                return httpx.Response(
                    401,
                    json={"error": "invalid_token", "error_description": "Token signature verification failed"},
                )
        return handler(request)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def stub() -> PayPalStub:
    return PayPalStub()


@pytest.fixture
async def manager(anyio_backend, stub, clock):
    mgr = CredentialManager(
        "client-id-123",
        "s3cr3t-value",
        environment="sandbox",
        transport=stub,
        clock=clock,
    )
    yield mgr
    await mgr.aclose()
