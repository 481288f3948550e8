"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (ProviderRecord, Lead, Opinion)

Responsabilidades:
    - Definir las estructuras del directorio de fachowcy, leads y opiniones.
    - Mantener tipos claros para repositorios y rutas.

Colaboradores:
    - domain.repositories: persisten/recuperan estas entidades.
    - api/*_routes.py: serializan estas entidades.

Principios:
    - Sin dependencias a DB/FastAPI.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class ProviderRecord:
    """Fachowiec: proveedor de servicios listado en el directorio."""

    id: int
    name: str | None
    category: str | None
    phone: str | None
    city: str | None
    about: str | None
    user_id: int | None
    verified: bool = False

    def is_owned_by(self, user_id: int) -> bool:
        return self.user_id is not None and self.user_id == user_id


@dataclass
class ProviderChanges:
    """Campos editables de un fachowiec (update completo)."""

    name: str | None
    category: str | None
    phone: str | None
    city: str | None
    about: str | None
    verified: bool = False


@dataclass
class Lead:
    """Consulta de un cliente enviada desde el formulario público."""

    id: int
    name: str | None
    phone: str | None
    description: str | None
    created_at: datetime | None = None


@dataclass
class Opinion:
    """Opinión de un cliente sobre un fachowiec."""

    id: int
    provider_id: int
    client_id: int
    rating: int
    comment: str | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class OwnerStats:
    users: int
    providers: int
    leads: int
    subscribers: int
