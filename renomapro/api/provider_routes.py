"""
===============================================================================
TARJETA CRC — api/provider_routes.py (Directorio de fachowcy)
===============================================================================

Responsabilidades:
  - GET    /api/fachowcy        público
  - POST   /api/fachowcy        autenticado; el registro queda a nombre del caller
  - PUT    /api/fachowcy/{id}   autenticado + ownership -> {"changes": n}
  - DELETE /api/fachowcy/{id}   autenticado + ownership -> {"deleted": n}

Colaboradores:
  - application.directory.ProviderDirectory
  - identity.auth_users.require_user
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..domain.entities import ProviderChanges, ProviderRecord
from ..identity.auth_users import AuthClaim, require_user
from .deps import get_container

router = APIRouter(prefix="/api", tags=["fachowcy"], responses=OPENAPI_ERROR_RESPONSES)


class ProviderRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=50)
    city: str | None = Field(default=None, max_length=200)
    about: str | None = Field(default=None, max_length=5000)


class ProviderUpdateRequest(ProviderRequest):
    verified: bool = False


class ProviderResponse(BaseModel):
    id: int
    name: str | None
    category: str | None
    phone: str | None
    city: str | None
    verified: bool
    about: str | None
    user_id: int | None


def to_provider_response(record: ProviderRecord) -> ProviderResponse:
    return ProviderResponse(
        id=record.id,
        name=record.name,
        category=record.category,
        phone=record.phone,
        city=record.city,
        verified=record.verified,
        about=record.about,
        user_id=record.user_id,
    )


@router.get("/fachowcy", response_model=list[ProviderResponse])
def list_providers(container: AppContainer = Depends(get_container)):
    return [to_provider_response(r) for r in container.directory.list_public()]


@router.post("/fachowcy")
def create_provider(
    req: ProviderRequest,
    claim: AuthClaim = Depends(require_user()),
    container: AppContainer = Depends(get_container),
):
    record = container.directory.create(
        user_id=claim.user_id,
        name=req.name,
        category=req.category,
        phone=req.phone,
        city=req.city,
        about=req.about,
    )
    return {"id": record.id}


@router.put("/fachowcy/{provider_id}")
def update_provider(
    provider_id: int,
    req: ProviderUpdateRequest,
    claim: AuthClaim = Depends(require_user()),
    container: AppContainer = Depends(get_container),
):
    changes = ProviderChanges(
        name=req.name,
        category=req.category,
        phone=req.phone,
        city=req.city,
        about=req.about,
        verified=req.verified,
    )
    updated = container.directory.update(provider_id, changes, actor_id=claim.user_id)
    return {"changes": updated}


@router.delete("/fachowcy/{provider_id}")
def delete_provider(
    provider_id: int,
    claim: AuthClaim = Depends(require_user()),
    container: AppContainer = Depends(get_container),
):
    deleted = container.directory.delete(provider_id, actor_id=claim.user_id)
    return {"deleted": deleted}
