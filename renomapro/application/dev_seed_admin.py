# =============================================================================
# FILE: application/dev_seed_admin.py
# =============================================================================
"""
===============================================================================
TASK: Dev Seed Admin (solo entornos no productivos)
===============================================================================

Qué es:
    Asegura que exista un usuario admin para desarrollo cuando DEV_SEED_ADMIN=true.
    La API pública no permite registrar admins; este seed y scripts/create_admin.py
    son los únicos caminos.

Seguridad:
    - Guard estricto: solo corre en app_env local / development / test.

CRC:
    Component: ensure_dev_admin
    Responsibilities:
      - Validar guard de ambiente
      - Crear el admin si falta (idempotente)
    Collaborators:
      - CredentialStore (create / lookup)
      - Settings
===============================================================================
"""

from __future__ import annotations

from typing import Final

from ..crosscutting.config import Settings
from ..crosscutting.exceptions import (
    BadCredentialError,
    DuplicateEmailError,
    NotFoundError,
)
from ..crosscutting.logger import logger
from ..identity.users import UserRole
from .credential_store import CredentialStore

_ALLOWED_ENVS: Final[frozenset[str]] = frozenset({"local", "development", "test"})


def _assert_allowed_environment(settings: Settings) -> None:
    env = (settings.app_env or "").strip().lower()
    if env not in _ALLOWED_ENVS:
        raise RuntimeError(
            f"FATAL: DEV_SEED_ADMIN is enabled but ENV is '{env}'. "
            "Only local/development/test environments may seed an admin."
        )


def ensure_dev_admin(settings: Settings, *, store: CredentialStore) -> bool:
    """
    Crea el admin de desarrollo si está habilitado y no existe.

    Retorna True si se creó un usuario.
    """
    if not settings.dev_seed_admin:
        return False

    _assert_allowed_environment(settings)

    email = (settings.dev_seed_admin_email or "").strip()
    password = settings.dev_seed_admin_password or ""
    if not email or not password:
        raise ValueError("Dev seed admin is enabled but email/password are empty")

    try:
        store.verify_password(email, password)
        logger.info("Dev seed admin: user exists; skipping", extra={"email": email})
        return False
    except NotFoundError:
        pass
    except BadCredentialError:
        # R: existe con otro password; no se pisa.
        logger.info("Dev seed admin: user exists; skipping", extra={"email": email})
        return False

    try:
        store.create(settings.dev_seed_admin_name, email, password, role=UserRole.ADMIN)
    except DuplicateEmailError:
        logger.info("Dev seed admin: created concurrently; skipping", extra={"email": email})
        return False

    logger.info("Dev seed admin: user created", extra={"email": email})
    return True
