"""
===============================================================================
TARJETA CRC — api/admin_routes.py (Paneles admin / owner)
===============================================================================

Responsabilidades:
  - /api/admin/leads, /api/admin/fachowcy: listados para moderación.
  - /api/owner/stats, /api/owner/leads, /api/owner/payments: tablero del dueño.

Seguridad:
  - Todas las rutas dependen de require_admin(): el rol se re-lee del
    Credential Store en cada request (un token con rol viejo no alcanza).

Colaboradores:
  - application.directory: ProviderDirectory / owner_stats
  - domain.repositories: LeadRepository / UserRepository
===============================================================================
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..application.directory import owner_stats
from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..domain.entities import Lead
from ..identity.auth_users import require_admin
from .deps import get_container
from .provider_routes import ProviderResponse, to_provider_response

router = APIRouter(
    prefix="/api",
    tags=["admin"],
    responses=OPENAPI_ERROR_RESPONSES,
    dependencies=[Depends(require_admin())],
)


class LeadResponse(BaseModel):
    id: int
    name: str | None
    phone: str | None
    desc: str | None
    created_at: datetime | None


class OwnerStatsResponse(BaseModel):
    users: int
    fachowcy: int
    leads: int
    subscribers: int


class PaymentRowResponse(BaseModel):
    id: int
    name: str
    email: str
    stripe_customer_id: str | None
    subscribed: bool
    created_at: datetime | None


def _to_lead_response(lead: Lead) -> LeadResponse:
    return LeadResponse(
        id=lead.id,
        name=lead.name,
        phone=lead.phone,
        desc=lead.description,
        created_at=lead.created_at,
    )


@router.get("/admin/leads", response_model=list[LeadResponse])
def admin_leads(container: AppContainer = Depends(get_container)):
    return [_to_lead_response(lead) for lead in container.lead_repo.list_leads()]


@router.get("/admin/fachowcy", response_model=list[ProviderResponse])
def admin_providers(container: AppContainer = Depends(get_container)):
    return [to_provider_response(r) for r in container.directory.list_admin()]


@router.get("/owner/stats", response_model=OwnerStatsResponse)
def owner_dashboard_stats(container: AppContainer = Depends(get_container)):
    stats = owner_stats(
        users=container.user_repo,
        providers=container.provider_repo,
        leads=container.lead_repo,
    )
    return OwnerStatsResponse(
        users=stats.users,
        fachowcy=stats.providers,
        leads=stats.leads,
        subscribers=stats.subscribers,
    )


@router.get("/owner/leads", response_model=list[LeadResponse])
def owner_leads(container: AppContainer = Depends(get_container)):
    return [_to_lead_response(lead) for lead in container.lead_repo.list_leads()]


@router.get("/owner/payments", response_model=list[PaymentRowResponse])
def owner_payments(container: AppContainer = Depends(get_container)):
    return [
        PaymentRowResponse(
            id=u.id,
            name=u.name,
            email=u.email,
            stripe_customer_id=u.stripe_customer_id,
            subscribed=u.subscribed,
            created_at=u.created_at,
        )
        for u in container.user_repo.list_billing_users()
    ]
