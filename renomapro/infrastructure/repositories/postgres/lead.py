"""Repositorio Postgres de leads (tabla `leads`)."""

from __future__ import annotations

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....domain.entities import Lead
from . import _sql

_LEAD_COLUMNS = "id, name, phone, description, created_at"


def _row_to_lead(row: tuple) -> Lead:
    return Lead(
        id=row[0],
        name=row[1],
        phone=row[2],
        description=row[3],
        created_at=row[4],
    )


class PostgresLeadRepository:
    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    def create_lead(
        self, *, name: str | None, phone: str | None, description: str | None
    ) -> Lead:
        row = _sql.fetchone(
            self._pool,
            query=f"""
                INSERT INTO leads (name, phone, description)
                VALUES (%s, %s, %s)
                RETURNING {_LEAD_COLUMNS}
            """,
            params=(name, phone, description),
            log_msg="PostgresLeadRepository: create_lead failed",
            log_extra={},
        )
        if not row:
            raise DatabaseError("PostgresLeadRepository: create_lead returned no row")
        return _row_to_lead(row)

    def list_leads(self) -> list[Lead]:
        rows = _sql.fetchall(
            self._pool,
            query=f"SELECT {_LEAD_COLUMNS} FROM leads ORDER BY created_at DESC, id DESC",
            log_msg="PostgresLeadRepository: list_leads failed",
            log_extra={},
        )
        return [_row_to_lead(r) for r in rows]

    def count_leads(self) -> int:
        return _sql.fetch_count(
            self._pool,
            query="SELECT COUNT(*) FROM leads",
            log_msg="PostgresLeadRepository: count_leads failed",
        )
