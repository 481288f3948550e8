"""
===============================================================================
TARJETA CRC — api/billing_routes.py (Checkout + Webhook de Stripe)
===============================================================================

Responsabilidades:
  - POST /api/create-checkout-session: URL de checkout hospedado para el caller.
  - POST /webhook: recibe eventos de Stripe con el body crudo (la firma cubre
    los bytes exactos, por eso no se parsea como JSON antes de verificar).

Colaboradores:
  - application.subscription_reconciler.SubscriptionReconciler
  - identity.auth_users.require_user
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Request
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import AuthClaim, require_user
from .deps import get_container

router = APIRouter(tags=["billing"], responses=OPENAPI_ERROR_RESPONSES)


class CheckoutRequest(BaseModel):
    successUrl: str | None = Field(default=None, max_length=2048)
    cancelUrl: str | None = Field(default=None, max_length=2048)


class CheckoutResponse(BaseModel):
    url: str


@router.post("/api/create-checkout-session", response_model=CheckoutResponse)
def create_checkout_session(
    req: CheckoutRequest | None = None,
    origin: str | None = Header(None, alias="Origin"),
    claim: AuthClaim = Depends(require_user()),
    container: AppContainer = Depends(get_container),
):
    req = req or CheckoutRequest()
    url = container.reconciler.start_checkout(
        claim.user_id,
        success_url=req.successUrl,
        cancel_url=req.cancelUrl,
        origin=origin,
    )
    return CheckoutResponse(url=url)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="Stripe-Signature"),
    container: AppContainer = Depends(get_container),
):
    raw_body = await request.body()
    outcome = await run_in_threadpool(
        container.reconciler.handle_event, raw_body, stripe_signature
    )
    return outcome.acknowledgement()
