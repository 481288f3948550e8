"""
===============================================================================
TARJETA CRC — api/lead_routes.py (Formulario público de consultas)
===============================================================================

Responsabilidades:
  - POST /api/leads: persistir la consulta y devolver {"id"}.
  - Programar la notificación por mail (best-effort) después de responder.

Notas:
  - Sin SMTP_HOST no se programa ningún envío.
  - Una falla de mail nunca llega al cliente.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..domain.entities import Lead
from ..domain.services import Mailer
from .deps import get_container

router = APIRouter(prefix="/api", tags=["leads"], responses=OPENAPI_ERROR_RESPONSES)

LEAD_NOTIFICATION_SUBJECT = "Nowe zgłoszenie"


class LeadRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    desc: str | None = Field(default=None, max_length=5000)


def _lead_notification_body(lead: Lead) -> str:
    return (
        f"Imię: {lead.name or '-'}\n"
        f"Telefon: {lead.phone or '-'}\n"
        f"Opis: {lead.description or '-'}\n"
    )


def notify_new_lead(mailer: Mailer, lead: Lead) -> None:
    mailer.send(subject=LEAD_NOTIFICATION_SUBJECT, body=_lead_notification_body(lead))


@router.post("/leads")
def create_lead(
    req: LeadRequest,
    background_tasks: BackgroundTasks,
    container: AppContainer = Depends(get_container),
):
    lead = container.lead_repo.create_lead(
        name=req.name, phone=req.phone, description=req.desc
    )
    if container.mailer.is_configured():
        background_tasks.add_task(notify_new_lead, container.mailer, lead)
    return {"id": lead.id}
