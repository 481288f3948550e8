"""
Opiniones sobre fachowcy.

- POST /api/opinions: solo clientes (rol re-leído del Credential Store).
- GET  /api/opinions/{fachowiec_id}: público.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import AuthClaim, require_role
from ..identity.users import UserRole
from .deps import get_container

router = APIRouter(prefix="/api", tags=["opinions"], responses=OPENAPI_ERROR_RESPONSES)


class OpinionRequest(BaseModel):
    fachowiec_id: int
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=5000)


class OpinionResponse(BaseModel):
    id: int
    fachowiec_id: int
    client_id: int
    rating: int
    comment: str | None
    created_at: datetime | None


@router.post("/opinions")
def create_opinion(
    req: OpinionRequest,
    claim: AuthClaim = Depends(require_role(UserRole.CLIENT)),
    container: AppContainer = Depends(get_container),
):
    opinion = container.opinion_repo.create_opinion(
        provider_id=req.fachowiec_id,
        client_id=claim.user_id,
        rating=req.rating,
        comment=req.comment,
    )
    return {"id": opinion.id}


@router.get("/opinions/{fachowiec_id}", response_model=list[OpinionResponse])
def list_opinions(fachowiec_id: int, container: AppContainer = Depends(get_container)):
    return [
        OpinionResponse(
            id=o.id,
            fachowiec_id=o.provider_id,
            client_id=o.client_id,
            rating=o.rating,
            comment=o.comment,
            created_at=o.created_at,
        )
        for o in container.opinion_repo.list_for_provider(fachowiec_id)
    ]
