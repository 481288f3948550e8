"""
===============================================================================
TARJETA CRC — application/credential_store.py
===============================================================================

Componente:
    CredentialStore (fuente de verdad de identidad, rol y billing)

Responsabilidades:
    - Crear usuarios con password hasheado (Argon2) y rol por defecto "pro".
    - Verificar credenciales de login (NotFound / BadCredential).
    - Exponer lecturas de rol y vinculación de billing.
    - Asignar la referencia de customer (CAS, idempotente) y marcar suscripciones.

Colaboradores:
    - domain.repositories.UserRepository (persistencia)
    - identity.auth_users.hash_password / verify_password
    - crosscutting.exceptions (taxonomía de errores)

Invariantes:
    - Email único (normalizado trim/lower) al crear; sin filas parciales.
    - Una sola referencia de billing por usuario una vez asignada.
    - El rol no se modifica después de crear el usuario.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from ..crosscutting.exceptions import BadCredentialError, NotFoundError
from ..crosscutting.logger import logger
from ..domain.repositories import UserRepository
from ..identity.auth_users import hash_password, verify_password
from ..identity.users import BillingLinkage, User, UserRole

DEFAULT_ROLE = UserRole.PRO


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class CredentialStore:
    def __init__(
        self,
        user_repo: UserRepository,
        *,
        password_hasher: Callable[[str], str] = hash_password,
        password_verifier: Callable[[str, str], bool] = verify_password,
    ) -> None:
        self._users = user_repo
        self._hash = password_hasher
        self._verify = password_verifier

    def create(
        self,
        name: str | None,
        email: str,
        password: str,
        role: UserRole | str | None = None,
    ) -> User:
        """
        Crea un usuario.

        Raises:
            DuplicateEmailError: el email ya existe (lo lanza el repositorio).
        """
        resolved_role = UserRole(role) if role else DEFAULT_ROLE
        user = self._users.create_user(
            name=(name or "").strip(),
            email=normalize_email(email),
            password_hash=self._hash(password),
            role=resolved_role,
        )
        logger.info(
            "Usuario creado",
            extra={"user_id": user.id, "role": user.role.value},
        )
        return user

    def verify_password(self, email: str, password: str) -> User:
        user = self._users.get_user_by_email(normalize_email(email))
        if user is None:
            raise NotFoundError("Usuario no encontrado.")
        if not self._verify(password, user.password_hash):
            raise BadCredentialError("Password incorrecto.")
        return user

    def get_user(self, user_id: int) -> User:
        user = self._users.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError(f"Usuario {user_id} no encontrado.")
        return user

    def get_role(self, user_id: int) -> UserRole:
        return self.get_user(user_id).role

    def get_billing_linkage(self, user_id: int) -> BillingLinkage:
        user = self.get_user(user_id)
        return BillingLinkage(
            user_id=user.id,
            email=user.email,
            customer_ref=user.stripe_customer_id,
            subscribed=user.subscribed,
        )

    def set_billing_customer_ref(self, user_id: int, ref: str) -> str:
        """
        Asigna la referencia de customer (solo si no había una).

        Retorna la referencia efectiva: si otra request ya asignó una distinta,
        se conserva la existente.
        """
        effective = self._users.set_stripe_customer_id(user_id, ref)
        if effective is None:
            raise NotFoundError(f"Usuario {user_id} no encontrado.")
        if effective != ref:
            logger.warning(
                "Referencia de billing ya asignada; se conserva la existente",
                extra={
                    "user_id": user_id,
                    "customer_ref": effective,
                    "discarded_ref": ref,
                },
            )
        return effective

    def mark_subscribed(self, customer_ref: str) -> int:
        """Marca como suscriptos a los usuarios con esa referencia (0 o 1 esperado)."""
        matched = self._users.mark_subscribed_by_customer(customer_ref)
        if matched == 0:
            logger.warning(
                "mark_subscribed sin usuarios para la referencia",
                extra={"customer_ref": customer_ref},
            )
        return matched
