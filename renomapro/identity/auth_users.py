"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Autenticación y autorización de usuarios (JWT)

Responsabilidades:
    - Hashear/verificar passwords (Argon2).
    - Emitir JWT de acceso con expiración (7 días por defecto).
    - Decodificar y validar JWT (firma, exp, claims mínimos).
    - Exponer dependencias FastAPI:
        * require_user(): identidad desde el claim firmado (sin ir al store).
        * require_role(role) / require_admin(): rol re-leído del Credential Store.

Colaboradores:
    - crosscutting.config.Settings: secreto y TTL (vía el container del request).
    - crosscutting.exceptions: MissingCredential / InvalidCredential / Forbidden.
    - application.credential_store.CredentialStore: rol autoritativo.
    - identity.users: User / UserRole.

Decisiones de diseño:
    - Máquina de estados por request:
        Unauthenticated -> Authenticated -> {Authorized, Forbidden}
    - Las decisiones privilegiadas NO confían en el rol del token: puede estar
      desactualizado respecto del store durante los 7 días de validez.
    - No hay revocación server-side: validez = firma + expiración.
    - No loguear secretos ni tokens.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi import Header, Request

from ..crosscutting.exceptions import (
    ForbiddenError,
    InvalidCredentialError,
    MissingCredentialError,
    NotFoundError,
)
from ..crosscutting.logger import logger
from .users import User, UserRole

if TYPE_CHECKING:
    from ..container import AppContainer

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_ROLE: str = "role"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

_password_hasher = PasswordHasher()


# ---------------------------------------------------------------------------
# Contratos internos
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Settings de auth (snapshot)."""

    jwt_secret: str
    jwt_access_ttl_minutes: int


@dataclass(frozen=True, slots=True)
class AuthClaim:
    """Claim decodificado de un access token: {id, email, role}."""

    user_id: int
    email: str
    role: UserRole


def auth_settings_from(settings) -> AuthSettings:
    """Construye un snapshot de settings de auth."""
    return AuthSettings(
        jwt_secret=settings.jwt_secret,
        jwt_access_ttl_minutes=settings.jwt_access_ttl_minutes,
    )


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# ---------------------------------------------------------------------------
# Tokens JWT (emitir / decodificar)
# ---------------------------------------------------------------------------


def create_access_token(user: User, settings: AuthSettings) -> tuple[str, int]:
    """Crea un JWT de acceso firmado.

    Retorna:
        (token, expires_in_seconds)
    """
    now = datetime.now(timezone.utc)
    expires_in = int(settings.jwt_access_ttl_minutes * 60)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_ROLE: user.role.value,
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int((now + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(token: str, settings: AuthSettings) -> AuthClaim:
    """Decodifica y valida un JWT de acceso.

    Errores:
        - InvalidCredentialError si expiró, la firma no coincide o faltan claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_ROLE, CLAIM_EXP]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidCredentialError("Token expirado.") from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidCredentialError("Token inválido.") from exc

    token_type = payload.get(CLAIM_TYP)
    # R: si viene typ, lo validamos; si no viene, lo aceptamos por compatibilidad.
    if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
        raise InvalidCredentialError("Tipo de token inválido.")

    try:
        user_id = int(payload[CLAIM_SUB])
        role = UserRole(str(payload[CLAIM_ROLE]))
    except (TypeError, ValueError) as exc:
        raise InvalidCredentialError("Token inválido.") from exc

    email = str(payload.get(CLAIM_EMAIL) or "")
    if not email:
        raise InvalidCredentialError("Token inválido.")

    return AuthClaim(user_id=user_id, email=email, role=role)


# ---------------------------------------------------------------------------
# Extracción de token
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


# ---------------------------------------------------------------------------
# Transiciones del guard (puras, testeables sin FastAPI)
# ---------------------------------------------------------------------------


def authenticate(authorization: str | None, settings: AuthSettings) -> AuthClaim:
    """Unauthenticated -> Authenticated."""
    token = extract_bearer_token(authorization)
    if not token:
        raise MissingCredentialError("Falta token Bearer.")
    return decode_access_token(token, settings)


def authorize_role(claim: AuthClaim, required: UserRole, store) -> UserRole:
    """
    Authenticated -> Authorized | Forbidden.

    El rol se re-lee del Credential Store; el del token no se usa.
    """
    try:
        current_role = store.get_role(claim.user_id)
    except NotFoundError as exc:
        raise ForbiddenError("Acceso denegado.") from exc

    if current_role != required:
        logger.warning(
            "Rol insuficiente",
            extra={
                "user_id": claim.user_id,
                "required_role": required.value,
                "claimed_role": claim.role.value,
                "stored_role": current_role.value,
            },
        )
        raise ForbiddenError("Rol insuficiente.")
    return current_role


# ---------------------------------------------------------------------------
# Dependencias FastAPI
# ---------------------------------------------------------------------------


def _container_from(request: Request) -> "AppContainer":
    return request.app.state.container


def require_user() -> Callable:
    """Dependency FastAPI: requiere identidad válida (claim firmado)."""

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> AuthClaim:
        container = _container_from(request)
        claim = authenticate(authorization, auth_settings_from(container.settings))
        request.state.claim = claim
        return claim

    return dependency


def require_role(role: UserRole | str) -> Callable:
    """Dependency FastAPI: requiere un rol específico (re-leído del store)."""
    required_role = UserRole(role)

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> AuthClaim:
        claim = await require_user()(request, authorization)
        authorize_role(claim, required_role, _container_from(request).credential_store)
        return claim

    return dependency


def require_admin() -> Callable:
    """Dependency FastAPI: rutas solo-admin."""
    return require_role(UserRole.ADMIN)
