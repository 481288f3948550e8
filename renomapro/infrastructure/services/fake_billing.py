"""
Fake BillingGateway (tests / local dev, FAKE_BILLING=true).

- No sale a la red: customers y sesiones se generan en proceso.
- La verificación de firma usa el mismo esquema de Stripe (stripe.WebhookSignature),
  así los tests ejercitan el camino real de verificación.
- Registra las llamadas para inspección en tests.
"""

from __future__ import annotations

import json
from itertools import count
from threading import Lock
from typing import Any

import stripe

from ...crosscutting.exceptions import InvalidSignatureError, ProviderError
from ...domain.services import CheckoutSession


class FakeBillingGateway:
    def __init__(
        self,
        *,
        configured: bool = True,
        fail_with: Exception | None = None,
        checkout_base_url: str = "https://checkout.stripe.test/pay",
    ) -> None:
        self._configured = configured
        self._fail_with = fail_with
        self._checkout_base_url = checkout_base_url.rstrip("/")
        self._lock = Lock()
        self._seq = count(1)
        self.customers: list[dict[str, Any]] = []
        self.sessions: list[dict[str, Any]] = []

    def is_configured(self) -> bool:
        return self._configured

    def _maybe_fail(self) -> None:
        if self._fail_with is not None:
            raise ProviderError("Error del proveedor de pagos.", original_error=self._fail_with)

    def create_customer(self, *, email: str, user_id: int) -> str:
        self._maybe_fail()
        with self._lock:
            ref = f"cus_fake_{next(self._seq)}"
            self.customers.append({"id": ref, "email": email, "user_id": user_id})
        return ref

    def create_subscription_checkout(
        self, *, customer_ref: str, success_url: str, cancel_url: str
    ) -> CheckoutSession:
        self._maybe_fail()
        with self._lock:
            session_id = f"cs_fake_{next(self._seq)}"
            self.sessions.append(
                {
                    "id": session_id,
                    "customer": customer_ref,
                    "success_url": success_url,
                    "cancel_url": cancel_url,
                }
            )
        return CheckoutSession(id=session_id, url=f"{self._checkout_base_url}/{session_id}")

    def verify_event(self, payload: bytes, signature: str, secret: str) -> dict[str, Any]:
        if not signature:
            raise InvalidSignatureError("Webhook Error: missing Stripe-Signature header")
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidSignatureError(f"Webhook Error: invalid payload ({exc})") from exc

        try:
            stripe.WebhookSignature.verify_header(body, signature, secret, tolerance=300)
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignatureError(f"Webhook Error: {exc}") from exc

        try:
            event = json.loads(payload)
        except ValueError as exc:
            raise InvalidSignatureError(f"Webhook Error: invalid payload ({exc})") from exc
        if not isinstance(event, dict):
            raise InvalidSignatureError("Webhook Error: invalid payload")
        return event
