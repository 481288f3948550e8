"""
===============================================================================
TARJETA CRC — domain/services.py
===============================================================================

Módulo:
    Puertos de Servicios Externos (Protocols)

Responsabilidades:
    - Definir contratos para el proveedor de pagos y el envío de mails.
    - Proteger a application de detalles del proveedor (SDK de Stripe, SMTP).

Colaboradores:
    - infrastructure/services/*: implementaciones concretas y fakes.
    - application/subscription_reconciler.py, api/lead_routes.py: consumidores.

Reglas:
    - SOLO interfaces: nada de implementación.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """Sesión de checkout hospedada por el proveedor."""

    id: str
    url: str


class BillingGateway(Protocol):
    """Contrato con el proveedor de pagos (Stripe)."""

    def is_configured(self) -> bool:
        """True si hay credenciales y price configurados."""
        ...

    def create_customer(self, *, email: str, user_id: int) -> str:
        """Crea un customer y devuelve su referencia externa."""
        ...

    def create_subscription_checkout(
        self, *, customer_ref: str, success_url: str, cancel_url: str
    ) -> CheckoutSession:
        """Crea una sesión de checkout de suscripción para el price configurado."""
        ...

    def verify_event(self, payload: bytes, signature: str, secret: str) -> dict[str, Any]:
        """
        Verifica la firma y devuelve el evento como dict.

        Raises:
            InvalidSignatureError: firma inválida, header ausente o body no parseable.
        """
        ...


class Mailer(Protocol):
    """Contrato de envío de notificaciones (best-effort)."""

    def is_configured(self) -> bool:
        ...

    def send(self, *, subject: str, body: str) -> bool:
        """Envía al destinatario configurado. Nunca lanza: retorna False si falla."""
        ...
