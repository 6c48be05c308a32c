"""PayPal REST integration: credential lifecycle, HTTP capability, error taxonomy."""
from typing import Final, Mapping

SANDBOX: Final[str] = "sandbox"
LIVE: Final[str] = "live"

BASE_URLS: Final[Mapping[str, str]] = {
    SANDBOX: "https://api-m.sandbox.paypal.com",
    LIVE: "https://api-m.paypal.com",
}

TOKEN_PATH: Final[str] = "/v1/oauth2/token"

DEFAULT_BUFFER_SECONDS: Final[int] = 300
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


def base_url_for(environment: str) -> str:
    try:
        return BASE_URLS[environment]
    except KeyError:
        raise ValueError(
            f"Unsupported PayPal environment: {environment!r} (expected 'sandbox' or 'live')"
        ) from None
