"""
===============================================================================
TARJETA CRC — application/directory.py
===============================================================================

Componente:
    ProviderDirectory (directorio de fachowcy + tablero del owner)

Responsabilidades:
    - Alta de fachowcy asociada al usuario autenticado.
    - Update / delete con regla de ownership (dueño o admin) configurable.
    - Calcular las estadísticas del tablero (users, fachowcy, leads, subscribers).

Colaboradores:
    - domain.repositories: ProviderRepository / LeadRepository / UserRepository
    - application.credential_store.CredentialStore: rol autoritativo del admin

Notas:
    - Con PROVIDER_OWNERSHIP_ENFORCED=false cualquier identidad autenticada puede
      modificar cualquier registro.
    - Un registro inexistente no es error: se informa 0 filas afectadas.
===============================================================================
"""

from __future__ import annotations

from ..crosscutting.exceptions import ForbiddenError, NotFoundError
from ..crosscutting.logger import logger
from ..domain.entities import OwnerStats, ProviderChanges, ProviderRecord
from ..domain.repositories import LeadRepository, ProviderRepository, UserRepository
from ..identity.users import UserRole
from .credential_store import CredentialStore


class ProviderDirectory:
    def __init__(
        self,
        providers: ProviderRepository,
        store: CredentialStore,
        *,
        ownership_enforced: bool = True,
    ) -> None:
        self._providers = providers
        self._store = store
        self._ownership_enforced = ownership_enforced

    def list_public(self) -> list[ProviderRecord]:
        return self._providers.list_providers()

    def list_admin(self) -> list[ProviderRecord]:
        return self._providers.list_providers(newest_first=True)

    def create(
        self,
        *,
        user_id: int,
        name: str | None,
        category: str | None,
        phone: str | None,
        city: str | None,
        about: str | None,
    ) -> ProviderRecord:
        record = self._providers.create_provider(
            name=name,
            category=category,
            phone=phone,
            city=city,
            about=about,
            user_id=user_id,
        )
        logger.info(
            "Fachowiec creado", extra={"provider_id": record.id, "user_id": user_id}
        )
        return record

    def update(self, provider_id: int, changes: ProviderChanges, *, actor_id: int) -> int:
        if not self._can_mutate(provider_id, actor_id):
            return 0
        return self._providers.update_provider(provider_id, changes)

    def delete(self, provider_id: int, *, actor_id: int) -> int:
        if not self._can_mutate(provider_id, actor_id):
            return 0
        return self._providers.delete_provider(provider_id)

    def _can_mutate(self, provider_id: int, actor_id: int) -> bool:
        """
        True si el actor puede modificar el registro.

        Retorna False si el registro no existe; lanza ForbiddenError si existe
        y el actor no es dueño ni admin.
        """
        if not self._ownership_enforced:
            return True

        record = self._providers.get_provider(provider_id)
        if record is None:
            return False
        if record.is_owned_by(actor_id):
            return True

        try:
            role = self._store.get_role(actor_id)
        except NotFoundError as exc:
            raise ForbiddenError("Acceso denegado.") from exc
        if role == UserRole.ADMIN:
            return True

        logger.warning(
            "Modificación de fachowiec ajeno rechazada",
            extra={"provider_id": provider_id, "user_id": actor_id},
        )
        raise ForbiddenError("Solo el dueño o un admin puede modificar este registro.")


def owner_stats(
    *,
    users: UserRepository,
    providers: ProviderRepository,
    leads: LeadRepository,
) -> OwnerStats:
    return OwnerStats(
        users=users.count_users(),
        providers=providers.count_providers(),
        leads=leads.count_leads(),
        subscribers=users.count_subscribers(),
    )
