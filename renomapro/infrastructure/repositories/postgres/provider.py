"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/provider.py
============================================================
Class: PostgresProviderRepository

Responsibilities:
  - CRUD del directorio de fachowcy (tabla `fachowcy`).
  - Orden público por id ascendente; orden admin por id descendente.

Collaborators:
  - psycopg_pool.ConnectionPool
  - domain.entities.ProviderRecord / ProviderChanges
============================================================
"""

from __future__ import annotations

from typing import Optional

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import ProviderChanges, ProviderRecord
from . import _sql

_PROVIDER_COLUMNS = "id, name, category, phone, city, about, user_id, verified"


def _row_to_provider(row: tuple) -> ProviderRecord:
    return ProviderRecord(
        id=row[0],
        name=row[1],
        category=row[2],
        phone=row[3],
        city=row[4],
        about=row[5],
        user_id=row[6],
        verified=bool(row[7]),
    )


class PostgresProviderRepository:
    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def list_providers(self, *, newest_first: bool = False) -> list[ProviderRecord]:
        # R: el orden sale de un literal controlado por código, no de input.
        order = "id DESC" if newest_first else "id ASC"
        rows = _sql.fetchall(
            self._pool,
            query=f"SELECT {_PROVIDER_COLUMNS} FROM fachowcy ORDER BY {order}",
            log_msg="PostgresProviderRepository: list_providers failed",
            log_extra={"newest_first": newest_first},
        )
        return [_row_to_provider(r) for r in rows]

    def get_provider(self, provider_id: int) -> Optional[ProviderRecord]:
        row = _sql.fetchone(
            self._pool,
            query=f"SELECT {_PROVIDER_COLUMNS} FROM fachowcy WHERE id = %s",
            params=(provider_id,),
            log_msg="PostgresProviderRepository: get_provider failed",
            log_extra={"provider_id": provider_id},
        )
        return _row_to_provider(row) if row else None

    def create_provider(
        self,
        *,
        name: str | None,
        category: str | None,
        phone: str | None,
        city: str | None,
        about: str | None,
        user_id: int,
    ) -> ProviderRecord:
        row = _sql.fetchone(
            self._pool,
            query=f"""
                INSERT INTO fachowcy (name, category, phone, city, about, user_id)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_PROVIDER_COLUMNS}
            """,
            params=(name, category, phone, city, about, user_id),
            log_msg="PostgresProviderRepository: create_provider failed",
            log_extra={"user_id": user_id},
        )
        if not row:
            raise DatabaseError("PostgresProviderRepository: create_provider returned no row")
        return _row_to_provider(row)

    def update_provider(self, provider_id: int, changes: ProviderChanges) -> int:
        return _sql.execute_rowcount(
            self._pool,
            query="""
                UPDATE fachowcy
                SET name = %s, category = %s, phone = %s, city = %s,
                    about = %s, verified = %s
                WHERE id = %s
            """,
            params=(
                changes.name,
                changes.category,
                changes.phone,
                changes.city,
                changes.about,
                changes.verified,
                provider_id,
            ),
            log_msg="PostgresProviderRepository: update_provider failed",
            log_extra={"provider_id": provider_id},
        )

    def delete_provider(self, provider_id: int) -> int:
        return _sql.execute_rowcount(
            self._pool,
            query="DELETE FROM fachowcy WHERE id = %s",
            params=(provider_id,),
            log_msg="PostgresProviderRepository: delete_provider failed",
            log_extra={"provider_id": provider_id},
        )

    def count_providers(self) -> int:
        return _sql.fetch_count(
            self._pool,
            query="SELECT COUNT(*) FROM fachowcy",
            log_msg="PostgresProviderRepository: count_providers failed",
        )
