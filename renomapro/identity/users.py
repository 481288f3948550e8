"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario (JWT + billing)

Responsabilidades:
    - Definir el enum de roles de usuario (pro / client / admin).
    - Definir el dataclass User utilizado por Credential Store, guard y billing.
    - Definir el snapshot de vinculación con el proveedor de pagos.

Colaboradores:
    - identity/auth_users.py: usa User y UserRole para emitir/validar JWT.
    - application/credential_store.py: crea/lee usuarios.
    - infrastructure/repositories/*/user.py: mapean filas -> User.

Notas:
    - Este módulo NO contiene lógica de negocio: solo “shapes” de datos.
    - El rol se fija al crear el usuario; ningún endpoint lo modifica.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """Roles soportados."""

    PRO = "pro"
    CLIENT = "client"
    ADMIN = "admin"


# Roles que un usuario puede elegir al registrarse por la API pública.
SELF_SERVICE_ROLES: frozenset[UserRole] = frozenset({UserRole.PRO, UserRole.CLIENT})


@dataclass(frozen=True, slots=True)
class User:
    """Registro de usuario (identidad + rol + billing)."""

    id: int
    name: str
    email: str
    password_hash: str
    role: UserRole
    stripe_customer_id: str | None = None
    subscribed: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class BillingLinkage:
    """Vinculación del usuario con el proveedor de pagos."""

    user_id: int
    email: str
    customer_ref: str | None
    subscribed: bool
