"""Repositorio Postgres de opiniones (tabla `opinions`)."""

from __future__ import annotations

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import Opinion
from . import _sql

_OPINION_COLUMNS = "id, fachowiec_id, client_id, rating, comment, created_at"


def _row_to_opinion(row: tuple) -> Opinion:
    return Opinion(
        id=row[0],
        provider_id=row[1],
        client_id=row[2],
        rating=row[3],
        comment=row[4],
        created_at=row[5],
    )


class PostgresOpinionRepository:
    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def create_opinion(
        self,
        *,
        provider_id: int,
        client_id: int,
        rating: int,
        comment: str | None,
    ) -> Opinion:
        row = _sql.fetchone(
            self._pool,
            query=f"""
                INSERT INTO opinions (fachowiec_id, client_id, rating, comment)
                VALUES (%s, %s, %s, %s)
                RETURNING {_OPINION_COLUMNS}
            """,
            params=(provider_id, client_id, rating, comment),
            log_msg="PostgresOpinionRepository: create_opinion failed",
            log_extra={"provider_id": provider_id, "client_id": client_id},
        )
        if not row:
            raise DatabaseError("PostgresOpinionRepository: create_opinion returned no row")
        return _row_to_opinion(row)

    def list_for_provider(self, provider_id: int) -> list[Opinion]:
        rows = _sql.fetchall(
            self._pool,
            query=f"""
                SELECT {_OPINION_COLUMNS}
                FROM opinions
                WHERE fachowiec_id = %s
                ORDER BY created_at DESC, id DESC
            """,
            params=(provider_id,),
            log_msg="PostgresOpinionRepository: list_for_provider failed",
            log_extra={"provider_id": provider_id},
        )
        return [_row_to_opinion(r) for r in rows]
