"""
===============================================================================
TARJETA CRC — infrastructure/services/stripe_billing.py
===============================================================================

Componente:
    StripeBillingGateway (implementación de BillingGateway)

Responsabilidades:
    - Crear customers con metadata user_id.
    - Crear sesiones de Checkout en modo suscripción para el price configurado.
    - Verificar la firma de webhooks (Stripe-Signature) y devolver el evento.

Colaboradores:
    - stripe SDK
    - crosscutting.exceptions (ProviderError / InvalidSignatureError)

Notas:
    - La api_key se pasa por llamada; no se muta estado global del SDK.
    - Los errores del SDK se loguean completos y se re-lanzan como ProviderError.
===============================================================================
"""

from __future__ import annotations

import json
from typing import Any

import stripe

from ...crosscutting.exceptions import InvalidSignatureError, ProviderError
from ...crosscutting.logger import logger
from ...domain.services import CheckoutSession


class StripeBillingGateway:
    def __init__(self, *, secret_key: str, price_id: str) -> None:
        self._secret_key = (secret_key or "").strip()
        self._price_id = (price_id or "").strip()

    def is_configured(self) -> bool:
        return bool(self._secret_key and self._price_id)

    def create_customer(self, *, email: str, user_id: int) -> str:
        try:
            customer = stripe.Customer.create(
                api_key=self._secret_key,
                email=email,
                metadata={"user_id": str(user_id)},
            )
        except stripe.StripeError as exc:
            logger.error(
                "Stripe error creando customer",
                extra={"user_id": user_id, "error": str(exc)},
            )
            raise ProviderError("Error del proveedor de pagos.", original_error=exc) from exc

        logger.info(
            "Stripe customer creado",
            extra={"user_id": user_id, "customer_ref": customer.id},
        )
        return customer.id

    def create_subscription_checkout(
        self, *, customer_ref: str, success_url: str, cancel_url: str
    ) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self._secret_key,
                mode="subscription",
                customer=customer_ref,
                payment_method_types=["card"],
                line_items=[{"price": self._price_id, "quantity": 1}],
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as exc:
            logger.error(
                "Stripe error creando checkout session",
                extra={"customer_ref": customer_ref, "error": str(exc)},
            )
            raise ProviderError("Error del proveedor de pagos.", original_error=exc) from exc

        return CheckoutSession(id=session.id, url=session.url)

    def verify_event(self, payload: bytes, signature: str, secret: str) -> dict[str, Any]:
        if not signature:
            raise InvalidSignatureError("Webhook Error: missing Stripe-Signature header")
        try:
            stripe.Webhook.construct_event(payload, signature, secret)
        except stripe.SignatureVerificationError as exc:
            raise InvalidSignatureError(f"Webhook Error: {exc}") from exc
        except ValueError as exc:
            raise InvalidSignatureError(f"Webhook Error: invalid payload ({exc})") from exc

        # R: la firma ya validó el body exacto; lo devolvemos como dict plano.
        event = json.loads(payload)
        if not isinstance(event, dict):
            raise InvalidSignatureError("Webhook Error: invalid payload")
        return event
