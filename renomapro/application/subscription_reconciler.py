"""
===============================================================================
TARJETA CRC — application/subscription_reconciler.py
===============================================================================

Componente:
    SubscriptionReconciler

Responsabilidades:
    - Iniciar el checkout hospedado de suscripción (start_checkout):
        * crear el customer externo la primera vez y persistir la referencia;
        * crear la sesión de checkout para el price configurado.
    - Convertir eventos asíncronos del proveedor en estado durable (handle_event):
        * verificar procedencia con el secreto de firma;
        * invoice.payment_succeeded -> mark_subscribed(customer);
        * cualquier otro tipo se acusa sin efecto.

Colaboradores:
    - application.credential_store.CredentialStore
    - domain.services.BillingGateway (Stripe / fake)
    - crosscutting.exceptions (InvalidSignature / ProviderUnavailable / ProviderError)

Políticas:
    - Sin secreto de firma => rechazo (fail-closed), salvo modo inseguro explícito
      (STRIPE_WEBHOOK_ALLOW_UNSIGNED) pensado solo para pruebas locales.
    - La causa de errores del proveedor se loguea; al cliente le llega un error genérico.
    - Sin reintentos.
===============================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..crosscutting.exceptions import (
    InvalidSignatureError,
    ProviderError,
    ProviderUnavailableError,
    RenomaError,
)
from ..crosscutting.logger import logger
from ..domain.services import BillingGateway
from .credential_store import CredentialStore

EVENT_CHECKOUT_COMPLETED = "checkout.session.completed"
EVENT_INVOICE_PAID = "invoice.payment_succeeded"


@dataclass(frozen=True, slots=True)
class WebhookSettings:
    signing_secret: str
    allow_unsigned: bool


@dataclass(frozen=True, slots=True)
class EventOutcome:
    """Resultado del manejo de un evento (siempre acusado al proveedor)."""

    event_type: str
    subscribed_users: int = 0

    def acknowledgement(self) -> dict[str, bool]:
        return {"received": True}


class SubscriptionReconciler:
    def __init__(
        self,
        store: CredentialStore,
        gateway: BillingGateway,
        *,
        webhook: WebhookSettings,
        public_base_url: str,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._webhook = webhook
        self._public_base_url = public_base_url.rstrip("/")

    # =========================================================
    # Checkout
    # =========================================================
    def start_checkout(
        self,
        user_id: int,
        *,
        success_url: str | None = None,
        cancel_url: str | None = None,
        origin: str | None = None,
    ) -> str:
        """Devuelve la URL de redirección al checkout hospedado."""
        if not self._gateway.is_configured():
            raise ProviderUnavailableError("Billing no configurado en el servidor.")

        linkage = self._store.get_billing_linkage(user_id)
        base = (origin or self._public_base_url).rstrip("/")

        try:
            customer_ref = linkage.customer_ref
            if not customer_ref:
                created = self._gateway.create_customer(
                    email=linkage.email, user_id=user_id
                )
                customer_ref = self._store.set_billing_customer_ref(user_id, created)
                if customer_ref != created:
                    logger.warning(
                        "Customer externo huérfano por checkout concurrente",
                        extra={"user_id": user_id, "orphan_customer_ref": created},
                    )

            session = self._gateway.create_subscription_checkout(
                customer_ref=customer_ref,
                success_url=success_url or f"{base}/?checkout=success",
                cancel_url=cancel_url or f"{base}/?checkout=cancel",
            )
        except RenomaError:
            raise
        except Exception as exc:
            logger.exception(
                "Falla creando checkout", extra={"user_id": user_id, "error": str(exc)}
            )
            raise ProviderError("Error del proveedor de pagos.", original_error=exc) from exc

        logger.info(
            "Checkout de suscripción creado",
            extra={"user_id": user_id, "session_id": session.id},
        )
        return session.url

    # =========================================================
    # Webhooks
    # =========================================================
    def handle_event(self, raw_body: bytes, signature_header: str | None) -> EventOutcome:
        event = self._parse_trusted_event(raw_body, signature_header)

        event_type = str(event.get("type") or "")
        data_object = _event_object(event)

        if event_type == EVENT_INVOICE_PAID:
            customer_ref = data_object.get("customer")
            if not customer_ref:
                logger.warning("invoice sin customer; se ignora", extra={"event_type": event_type})
                return EventOutcome(event_type=event_type)
            matched = self._store.mark_subscribed(str(customer_ref))
            logger.info(
                "Suscripción activada",
                extra={"customer_ref": customer_ref, "matched_users": matched},
            )
            return EventOutcome(event_type=event_type, subscribed_users=matched)

        if event_type == EVENT_CHECKOUT_COMPLETED:
            # R: informativo; la activación depende del pago de la factura.
            logger.info(
                "Checkout completado",
                extra={"session_id": data_object.get("id"), "customer_ref": data_object.get("customer")},
            )
        else:
            logger.debug("Evento ignorado", extra={"event_type": event_type})

        return EventOutcome(event_type=event_type)

    def _parse_trusted_event(
        self, raw_body: bytes, signature_header: str | None
    ) -> dict[str, Any]:
        secret = (self._webhook.signing_secret or "").strip()
        if secret:
            try:
                return self._gateway.verify_event(raw_body, signature_header or "", secret)
            except InvalidSignatureError as exc:
                logger.error(
                    "Verificación de firma del webhook falló",
                    extra={"reason": exc.message},
                )
                raise

        if not self._webhook.allow_unsigned:
            logger.error("Webhook rechazado: no hay secreto de firma configurado")
            raise InvalidSignatureError(
                "Webhook Error: no signing secret configured; unsigned events are rejected"
            )

        logger.warning("Webhook SIN verificar (modo inseguro de pruebas)")
        try:
            event = json.loads(raw_body)
        except (TypeError, ValueError) as exc:
            raise InvalidSignatureError(f"Webhook Error: invalid payload ({exc})") from exc
        if not isinstance(event, dict):
            raise InvalidSignatureError("Webhook Error: invalid payload")
        return event


def _event_object(event: dict[str, Any]) -> dict[str, Any]:
    """`data.object` del evento; una forma inesperada se rechaza como payload inválido."""
    data = event.get("data")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidSignatureError("Webhook Error: invalid payload")
    data_object = data.get("object")
    if data_object is None:
        return {}
    if not isinstance(data_object, dict):
        raise InvalidSignatureError("Webhook Error: invalid payload")
    return data_object
