import pytest

from common.redaction import MASK, is_sensitive_key, redact
from paypal_mcp.schemas import CreatePaymentTokenArgs


def test_masks_card_fields_and_keeps_customer_id():
    payload = {
        "security_code": "123",
        "number": "4111111111111111",
        "customer": {"id": "abc"},
    }
    out = redact(payload)
    assert out == {"security_code": MASK, "number": MASK, "customer": {"id": "abc"}}
    # input untouched
    assert payload["number"] == "4111111111111111"


@pytest.mark.parametrize(
    "key",
    [
        "client_secret",
        "access_token",
        "Authorization",
        "PASSWORD",
        "cvv2",
        "Security_Code",
        "number",
        "card_number",
        "token",
    ],
)
def test_sensitive_keys(key):
    assert is_sensitive_key(key)


@pytest.mark.parametrize("key", ["invoice_number", "id", "email_address", "name", 3, None])
def test_ordinary_keys(key):
    assert not is_sensitive_key(key)


def test_walks_lists_and_nested_mappings():
    payload = {
        "payer": {
            "funding_instruments": [
                {"credit_card": {"number": "4111111111111111", "cvv2": "999", "first_name": "Ada"}}
            ]
        }
    }
    card = redact(payload)["payer"]["funding_instruments"][0]["credit_card"]
    assert card == {"number": MASK, "cvv2": MASK, "first_name": "Ada"}


def test_redacts_pydantic_models():
    args = CreatePaymentTokenArgs.model_validate(
        {
            "customer": {"id": "cust-1"},
            "payment_source": {
                "card": {
                    "name": "Ada Lovelace",
                    "number": "4111111111111111",
                    "expiry": "12/30",
                    "security_code": "123",
                }
            },
        }
    )
    out = redact(args)
    assert out["customer"] == {"id": "cust-1"}
    assert out["payment_source"]["card"]["number"] == MASK
    assert out["payment_source"]["card"]["security_code"] == MASK
    assert out["payment_source"]["card"]["name"] == "Ada Lovelace"


def test_scalars_pass_through():
    assert redact("plain") == "plain"
    assert redact(None) is None
    assert redact(5) == 5
