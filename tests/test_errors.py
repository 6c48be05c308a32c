import httpx
import pydantic
import pytest

from integrations.paypal.errors import (
    AuthError,
    ErrorKind,
    InputValidationError,
    NormalizedError,
    RateLimitedError,
    bearer_token_of,
    normalize_error,
)

_URL = "https://api-m.sandbox.paypal.com/v2/checkout/orders"


def _status_error(status, *, json=None, content=None, headers=None, token="tok-1"):
    request = httpx.Request("POST", _URL, headers={"Authorization": f"Bearer {token}"})
    if json is not None:
        response = httpx.Response(status, json=json, headers=headers, request=request)
    else:
        response = httpx.Response(status, content=content or b"", headers=headers, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


def _timeout():
    return httpx.ReadTimeout("timed out", request=httpx.Request("GET", _URL))


@pytest.mark.parametrize(
    "exc_factory,expected",
    [
        (_timeout, ErrorKind.TRANSIENT),
        (lambda: httpx.DecodingError("bad gzip", request=httpx.Request("GET", _URL)), ErrorKind.TRANSIENT),
        (lambda: httpx.TooManyRedirects("loop", request=httpx.Request("GET", _URL)), ErrorKind.TRANSIENT),
        (lambda: _status_error(401), ErrorKind.AUTH),
        (lambda: _status_error(429), ErrorKind.RATE_LIMITED),
        (
            lambda: _status_error(
                400, json={"error": "invalid_request", "error_description": "Bad amount"}
            ),
            ErrorKind.PROVIDER,
        ),
        (lambda: _status_error(500), ErrorKind.PROVIDER),
        (lambda: RuntimeError("boom"), ErrorKind.UNKNOWN),
    ],
)
def test_classification_table(exc_factory, expected):
    assert normalize_error(exc_factory()).kind is expected


def test_kind_values_match_taxonomy_names():
    assert [k.value for k in ErrorKind] == [
        "ValidationError",
        "AuthError",
        "RateLimited",
        "TransientNetworkError",
        "ProviderError",
        "UnknownError",
    ]


def test_401_reports_rejected_token():
    seen = []
    err = normalize_error(_status_error(401, token="stale"), on_auth_failure=seen.append)
    assert err.kind is ErrorKind.AUTH
    assert err.status == 401
    assert seen == ["stale"]


def test_429_surfaces_retry_after():
    err = normalize_error(_status_error(429, headers={"Retry-After": "30"}))
    assert err.kind is ErrorKind.RATE_LIMITED
    assert err.retry_after == 30.0
    assert "30" in err.message


def test_429_without_hint():
    err = normalize_error(_status_error(429))
    assert err.retry_after is None
    assert err.message == "PayPal rate limit exceeded"


def test_provider_error_prefers_error_description_then_message():
    err = normalize_error(_status_error(400, json={"error_description": "Bad amount"}))
    assert err.message == "Bad amount"

    body = {
        "name": "UNPROCESSABLE_ENTITY",
        "message": "The requested action could not be performed.",
        "details": [{"issue": "ORDER_NOT_APPROVED"}],
    }
    err = normalize_error(_status_error(422, json=body))
    assert err.kind is ErrorKind.PROVIDER
    assert err.message == "The requested action could not be performed."
    assert err.detail["details"] == [{"issue": "ORDER_NOT_APPROVED"}]
    assert err.status == 422


def test_provider_error_without_body_is_generic():
    err = normalize_error(_status_error(500))
    assert err.message == "provider request failed with status 500"
    assert err.detail is None

    err = normalize_error(_status_error(502, content=b"<html>Bad Gateway</html>"))
    assert err.message == "provider request failed with status 502"


def test_provider_error_detail_is_redacted():
    body = {"message": "declined", "payment_source": {"card": {"number": "4111111111111111"}}}
    err = normalize_error(_status_error(422, json=body))
    assert err.detail["payment_source"]["card"]["number"] == "[REDACTED]"


def test_transient_message_never_echoes_credentials():
    exc = httpx.ConnectError(
        "failed with headers Authorization: Bearer abc", request=httpx.Request("GET", _URL)
    )
    err = normalize_error(exc)
    assert err.kind is ErrorKind.TRANSIENT
    assert "abc" not in err.message
    assert "ConnectError" in err.message


def test_timeout_message_names_reason():
    err = normalize_error(_timeout())
    assert "timed out" in err.message


def test_pydantic_errors_become_validation_errors():
    class _Model(pydantic.BaseModel):
        a: int
        b: str

    with pytest.raises(pydantic.ValidationError) as exc_info:
        _Model.model_validate({"a": "x"})

    err = normalize_error(exc_info.value)
    assert err.kind is ErrorKind.VALIDATION
    fields = [e["field"] for e in err.detail["errors"]]
    assert fields == ["a", "b"]
    assert err.message.startswith("a: ")


def test_classified_errors_pass_through():
    err = normalize_error(AuthError("nope", status=401))
    assert err == NormalizedError(ErrorKind.AUTH, "nope", status=401)

    err = normalize_error(RateLimitedError("slow down", retry_after=5))
    assert err.retry_after == 5

    err = normalize_error(InputValidationError([{"field": "x", "message": "bad"}]))
    assert err.kind is ErrorKind.VALIDATION
    assert err.message == "x: bad"


def test_unknown_keeps_exception_message():
    err = normalize_error(KeyError("missing"))
    assert err.kind is ErrorKind.UNKNOWN
    assert "missing" in err.message


def test_as_dict_and_str():
    err = NormalizedError(ErrorKind.RATE_LIMITED, "slow down", retry_after=2.0, status=429)
    assert err.as_dict() == {
        "kind": "RateLimited",
        "message": "slow down",
        "status": 429,
        "retry_after": 2.0,
    }
    assert str(err) == "RateLimited: slow down"


def test_bearer_token_of():
    assert bearer_token_of(httpx.Request("GET", _URL, headers={"Authorization": "Bearer xyz"})) == "xyz"
    assert bearer_token_of(httpx.Request("GET", _URL, headers={"Authorization": "Basic abc"})) is None
    assert bearer_token_of(None) is None
