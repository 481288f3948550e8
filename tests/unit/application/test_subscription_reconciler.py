"""
Unit tests for SubscriptionReconciler (checkout + webhook events).
"""

import json
from unittest.mock import Mock

import pytest

from renomapro.application.credential_store import CredentialStore
from renomapro.application.subscription_reconciler import (
    SubscriptionReconciler,
    WebhookSettings,
)
from renomapro.crosscutting.exceptions import (
    InvalidSignatureError,
    ProviderError,
    ProviderUnavailableError,
)
from renomapro.domain.services import CheckoutSession
from renomapro.infrastructure.repositories.in_memory import InMemoryUserRepository
from renomapro.infrastructure.services import FakeBillingGateway
from tests.helpers import TEST_WEBHOOK_SECRET, invoice_paid_event, sign_stripe_payload

pytestmark = pytest.mark.unit


@pytest.fixture
def store():
    return CredentialStore(
        InMemoryUserRepository(),
        password_hasher=lambda p: f"h:{p}",
        password_verifier=lambda p, h: h == f"h:{p}",
    )


@pytest.fixture
def gateway():
    return FakeBillingGateway()


def _reconciler(store, gateway, *, secret=TEST_WEBHOOK_SECRET, allow_unsigned=False):
    return SubscriptionReconciler(
        store,
        gateway,
        webhook=WebhookSettings(signing_secret=secret, allow_unsigned=allow_unsigned),
        public_base_url="https://renomapro.test/",
    )


# =========================================================
# Checkout
# =========================================================


def test_start_checkout_creates_customer_once(store, gateway):
    user = store.create("Jan", "jan@example.com", "pw")
    reconciler = _reconciler(store, gateway)

    first = reconciler.start_checkout(user.id)
    second = reconciler.start_checkout(user.id)

    assert first.startswith("https://checkout.stripe.test/pay/")
    assert first != second
    assert len(gateway.customers) == 1
    assert gateway.customers[0]["email"] == "jan@example.com"
    assert gateway.customers[0]["user_id"] == user.id

    customer_ref = gateway.customers[0]["id"]
    assert store.get_billing_linkage(user.id).customer_ref == customer_ref
    assert {s["customer"] for s in gateway.sessions} == {customer_ref}


def test_start_checkout_default_urls_use_public_base_url(store, gateway):
    user = store.create("Jan", "jan@example.com", "pw")
    _reconciler(store, gateway).start_checkout(user.id)

    session = gateway.sessions[0]
    assert session["success_url"] == "https://renomapro.test/?checkout=success"
    assert session["cancel_url"] == "https://renomapro.test/?checkout=cancel"


def test_start_checkout_prefers_origin_and_explicit_urls(store, gateway):
    user = store.create("Jan", "jan@example.com", "pw")
    reconciler = _reconciler(store, gateway)

    reconciler.start_checkout(user.id, origin="https://app.example.com")
    reconciler.start_checkout(
        user.id, success_url="https://x.test/ok", cancel_url="https://x.test/ko"
    )

    assert gateway.sessions[0]["success_url"] == "https://app.example.com/?checkout=success"
    assert gateway.sessions[1]["success_url"] == "https://x.test/ok"
    assert gateway.sessions[1]["cancel_url"] == "https://x.test/ko"


def test_start_checkout_uses_stored_ref_when_concurrent_writer_won(store):
    user = store.create("Jan", "jan@example.com", "pw")
    store.set_billing_customer_ref(user.id, "cus_winner")

    gateway = Mock()
    gateway.is_configured.return_value = True
    gateway.create_subscription_checkout.return_value = CheckoutSession(id="cs_1", url="https://pay/1")

    url = _reconciler(store, gateway).start_checkout(user.id)

    assert url == "https://pay/1"
    gateway.create_customer.assert_not_called()
    assert gateway.create_subscription_checkout.call_args.kwargs["customer_ref"] == "cus_winner"


def test_start_checkout_not_configured(store):
    user = store.create("Jan", "jan@example.com", "pw")
    gateway = FakeBillingGateway(configured=False)

    with pytest.raises(ProviderUnavailableError):
        _reconciler(store, gateway).start_checkout(user.id)
    assert store.get_billing_linkage(user.id).customer_ref is None


def test_start_checkout_provider_failure(store):
    user = store.create("Jan", "jan@example.com", "pw")
    gateway = FakeBillingGateway(fail_with=RuntimeError("stripe down"))

    with pytest.raises(ProviderError):
        _reconciler(store, gateway).start_checkout(user.id)


def test_start_checkout_wraps_unexpected_sdk_errors(store):
    user = store.create("Jan", "jan@example.com", "pw")
    gateway = Mock()
    gateway.is_configured.return_value = True
    gateway.create_customer.side_effect = ConnectionError("network")

    with pytest.raises(ProviderError):
        _reconciler(store, gateway).start_checkout(user.id)


# =========================================================
# Webhooks
# =========================================================


def _subscribed_user(store, ref="cus_A"):
    user = store.create("Jan", "jan@example.com", "pw")
    store.set_billing_customer_ref(user.id, ref)
    return user


def test_signed_invoice_event_marks_user_subscribed(store, gateway):
    user = _subscribed_user(store)
    payload = invoice_paid_event("cus_A")

    outcome = _reconciler(store, gateway).handle_event(payload, sign_stripe_payload(payload))

    assert outcome.acknowledgement() == {"received": True}
    assert outcome.subscribed_users == 1
    assert store.get_billing_linkage(user.id).subscribed is True


def test_replayed_event_is_idempotent(store, gateway):
    user = _subscribed_user(store)
    payload = invoice_paid_event("cus_A")
    reconciler = _reconciler(store, gateway)

    reconciler.handle_event(payload, sign_stripe_payload(payload))
    reconciler.handle_event(payload, sign_stripe_payload(payload))

    assert store.get_billing_linkage(user.id).subscribed is True


def test_tampered_payload_is_rejected(store, gateway):
    user = _subscribed_user(store)
    signature = sign_stripe_payload(invoice_paid_event("cus_A"))
    tampered = invoice_paid_event("cus_B")

    with pytest.raises(InvalidSignatureError):
        _reconciler(store, gateway).handle_event(tampered, signature)
    assert store.get_billing_linkage(user.id).subscribed is False


def test_wrong_secret_and_missing_header_are_rejected(store, gateway):
    _subscribed_user(store)
    payload = invoice_paid_event("cus_A")
    reconciler = _reconciler(store, gateway)

    with pytest.raises(InvalidSignatureError):
        reconciler.handle_event(payload, sign_stripe_payload(payload, secret="whsec_other"))
    with pytest.raises(InvalidSignatureError):
        reconciler.handle_event(payload, None)


def test_checkout_completed_has_no_state_effect(store, gateway):
    user = _subscribed_user(store)
    payload = json.dumps(
        {"type": "checkout.session.completed", "data": {"object": {"id": "cs_1", "customer": "cus_A"}}}
    ).encode()

    outcome = _reconciler(store, gateway).handle_event(payload, sign_stripe_payload(payload))

    assert outcome.subscribed_users == 0
    assert store.get_billing_linkage(user.id).subscribed is False


def test_unknown_customer_is_acknowledged(store, gateway):
    _subscribed_user(store)
    payload = invoice_paid_event("cus_unknown")

    outcome = _reconciler(store, gateway).handle_event(payload, sign_stripe_payload(payload))

    assert outcome.acknowledgement() == {"received": True}
    assert outcome.subscribed_users == 0


def test_unsigned_events_fail_closed_without_secret(store, gateway):
    user = _subscribed_user(store)
    reconciler = _reconciler(store, gateway, secret="")

    with pytest.raises(InvalidSignatureError):
        reconciler.handle_event(invoice_paid_event("cus_A"), None)
    assert store.get_billing_linkage(user.id).subscribed is False


def test_insecure_mode_accepts_unsigned_events(store, gateway):
    user = _subscribed_user(store)
    reconciler = _reconciler(store, gateway, secret="", allow_unsigned=True)

    reconciler.handle_event(invoice_paid_event("cus_A"), None)

    assert store.get_billing_linkage(user.id).subscribed is True


def test_insecure_mode_rejects_unparseable_body(store, gateway):
    reconciler = _reconciler(store, gateway, secret="", allow_unsigned=True)

    with pytest.raises(InvalidSignatureError):
        reconciler.handle_event(b"not json", None)


@pytest.mark.parametrize(
    "event",
    [
        {"type": "invoice.payment_succeeded", "data": {"object": "cus_A"}},
        {"type": "invoice.payment_succeeded", "data": ["cus_A"]},
        {"type": "checkout.session.completed", "data": "cs_1"},
    ],
)
def test_malformed_event_data_is_rejected(store, gateway, event):
    user = _subscribed_user(store)
    reconciler = _reconciler(store, gateway, secret="", allow_unsigned=True)

    with pytest.raises(InvalidSignatureError, match="invalid payload"):
        reconciler.handle_event(json.dumps(event).encode("utf-8"), None)
    assert store.get_billing_linkage(user.id).subscribed is False


def test_signed_event_with_malformed_data_is_rejected(store, gateway):
    reconciler = _reconciler(store, gateway)
    payload = json.dumps({"type": "invoice.payment_succeeded", "data": {"object": "cus_A"}}).encode()

    with pytest.raises(InvalidSignatureError):
        reconciler.handle_event(payload, sign_stripe_payload(payload))


def test_event_without_data_is_acknowledged(store, gateway):
    reconciler = _reconciler(store, gateway, secret="", allow_unsigned=True)

    outcome = reconciler.handle_event(b'{"type": "invoice.payment_succeeded"}', None)

    assert outcome.subscribed_users == 0
    assert outcome.acknowledgement() == {"received": True}
