"""
===============================================================================
TARJETA CRC — api/auth_routes.py (Registro, Login, Identidad)
===============================================================================

Responsabilidades:
  - POST /api/register: alta self-service (roles "pro" / "client") + JWT.
  - POST /api/login: verifica credenciales y devuelve JWT + rol + suscripción.
  - GET /api/me: identidad del claim firmado.

Colaboradores:
  - application.credential_store.CredentialStore
  - identity.auth_users: create_access_token, require_user

Notas:
  - Email inexistente y password incorrecto responden el mismo 401.
  - El rol "admin" no se puede elegir en el registro público.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from ..container import AppContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES, unauthorized
from ..crosscutting.exceptions import BadCredentialError, NotFoundError
from ..crosscutting.logger import logger
from ..identity.auth_users import (
    AuthClaim,
    auth_settings_from,
    create_access_token,
    require_user,
)
from ..identity.users import SELF_SERVICE_ROLES, UserRole
from .deps import get_container

router = APIRouter(prefix="/api", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)

INVALID_LOGIN_DETAIL = "Credenciales inválidas."


# -----------------------------------------------------------------------------
# Modelos HTTP (DTOs)
# -----------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)
    role: UserRole | None = None

    @field_validator("email")
    @classmethod
    def normalizar_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def solo_roles_self_service(cls, v: UserRole | None) -> UserRole | None:
        if v is not None and v not in SELF_SERVICE_ROLES:
            raise ValueError("role must be 'pro' or 'client'")
        return v


class RegisterResponse(BaseModel):
    token: str
    id: int


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=512)


class LoginResponse(BaseModel):
    token: str
    role: UserRole
    subscribed: bool


class MeResponse(BaseModel):
    id: int
    email: str
    role: UserRole


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.post("/register", response_model=RegisterResponse)
def register(req: RegisterRequest, container: AppContainer = Depends(get_container)):
    user = container.credential_store.create(req.name, req.email, req.password, req.role)
    token, _ = create_access_token(user, auth_settings_from(container.settings))
    return RegisterResponse(token=token, id=user.id)


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, container: AppContainer = Depends(get_container)):
    try:
        user = container.credential_store.verify_password(req.email, req.password)
    except (NotFoundError, BadCredentialError) as exc:
        logger.info("Login rechazado", extra={"reason": exc.error_code})
        raise unauthorized(INVALID_LOGIN_DETAIL) from exc

    token, _ = create_access_token(user, auth_settings_from(container.settings))
    return LoginResponse(token=token, role=user.role, subscribed=user.subscribed)


@router.get("/me", response_model=MeResponse)
def me(claim: AuthClaim = Depends(require_user())):
    return MeResponse(id=claim.user_id, email=claim.email, role=claim.role)
