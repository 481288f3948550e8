"""
Unit tests for StripeBillingGateway (SDK calls mocked, signatures real).
"""

from unittest.mock import Mock, patch

import pytest
import stripe

from renomapro.crosscutting.exceptions import InvalidSignatureError, ProviderError
from renomapro.infrastructure.services.stripe_billing import StripeBillingGateway
from tests.helpers import TEST_WEBHOOK_SECRET, invoice_paid_event, sign_stripe_payload

pytestmark = pytest.mark.unit


@pytest.fixture
def gateway():
    return StripeBillingGateway(secret_key="sk_test_123", price_id="price_123")


def test_is_configured_requires_key_and_price():
    assert StripeBillingGateway(secret_key="sk", price_id="price").is_configured()
    assert not StripeBillingGateway(secret_key="", price_id="price").is_configured()
    assert not StripeBillingGateway(secret_key="sk", price_id=" ").is_configured()


def test_create_customer_scopes_email_and_user_id(gateway):
    with patch("stripe.Customer.create", return_value=Mock(id="cus_123")) as create:
        ref = gateway.create_customer(email="jan@example.com", user_id=7)

    assert ref == "cus_123"
    kwargs = create.call_args.kwargs
    assert kwargs["email"] == "jan@example.com"
    assert kwargs["metadata"] == {"user_id": "7"}
    assert kwargs["api_key"] == "sk_test_123"


def test_create_subscription_checkout_parameters(gateway):
    session = Mock(id="cs_1", url="https://checkout.stripe.com/c/cs_1")
    with patch("stripe.checkout.Session.create", return_value=session) as create:
        result = gateway.create_subscription_checkout(
            customer_ref="cus_123",
            success_url="https://a/?checkout=success",
            cancel_url="https://a/?checkout=cancel",
        )

    assert result.url == "https://checkout.stripe.com/c/cs_1"
    kwargs = create.call_args.kwargs
    assert kwargs["mode"] == "subscription"
    assert kwargs["customer"] == "cus_123"
    assert kwargs["payment_method_types"] == ["card"]
    assert kwargs["line_items"] == [{"price": "price_123", "quantity": 1}]
    assert kwargs["success_url"] == "https://a/?checkout=success"


def test_sdk_errors_become_provider_error(gateway):
    with patch("stripe.Customer.create", side_effect=stripe.StripeError("card network down")):
        with pytest.raises(ProviderError) as exc_info:
            gateway.create_customer(email="jan@example.com", user_id=7)
    assert "card network" not in exc_info.value.message


def test_verify_event_accepts_valid_signature(gateway):
    payload = invoice_paid_event("cus_123")

    event = gateway.verify_event(payload, sign_stripe_payload(payload), TEST_WEBHOOK_SECRET)

    assert event["type"] == "invoice.payment_succeeded"
    assert event["data"]["object"]["customer"] == "cus_123"


def test_verify_event_rejects_bad_signature(gateway):
    payload = invoice_paid_event("cus_123")

    with pytest.raises(InvalidSignatureError):
        gateway.verify_event(payload, sign_stripe_payload(payload, secret="whsec_x"), TEST_WEBHOOK_SECRET)
    with pytest.raises(InvalidSignatureError):
        gateway.verify_event(payload, "", TEST_WEBHOOK_SECRET)
    with pytest.raises(InvalidSignatureError):
        gateway.verify_event(payload, "garbage", TEST_WEBHOOK_SECRET)


def test_verify_event_rejects_old_timestamp(gateway):
    payload = invoice_paid_event("cus_123")
    stale = sign_stripe_payload(payload, timestamp=1_000_000)

    with pytest.raises(InvalidSignatureError):
        gateway.verify_event(payload, stale, TEST_WEBHOOK_SECRET)
