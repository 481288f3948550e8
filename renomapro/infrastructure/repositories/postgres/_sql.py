"""
Helpers de ejecución SQL compartidos por los repositorios Postgres.

- Centralizan logging + DatabaseError.
- El pool es inyectable; si es None se usa el global.
"""

from __future__ import annotations

from typing import Iterable

from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError
from ....crosscutting.logger import logger


def resolve_pool(pool: ConnectionPool | None) -> ConnectionPool:
    if pool is not None:
        return pool
    from ...db.pool import get_pool

    return get_pool()


def fetchone(
    pool: ConnectionPool | None,
    *,
    query: str,
    params: Iterable[object] = (),
    log_msg: str,
    log_extra: dict[str, object],
) -> tuple | None:
    """Ejecuta una sentencia y devuelve la primera fila (o None)."""
    try:
        with resolve_pool(pool).connection() as conn:
            return conn.execute(query, tuple(params)).fetchone()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc


def fetchall(
    pool: ConnectionPool | None,
    *,
    query: str,
    params: Iterable[object] = (),
    log_msg: str,
    log_extra: dict[str, object],
) -> list[tuple]:
    try:
        with resolve_pool(pool).connection() as conn:
            return conn.execute(query, tuple(params)).fetchall()
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc


def execute_rowcount(
    pool: ConnectionPool | None,
    *,
    query: str,
    params: Iterable[object] = (),
    log_msg: str,
    log_extra: dict[str, object],
) -> int:
    """Ejecuta UPDATE/DELETE y devuelve filas afectadas."""
    try:
        with resolve_pool(pool).connection() as conn:
            return conn.execute(query, tuple(params)).rowcount
    except Exception as exc:
        logger.exception(log_msg, extra={**log_extra, "error": str(exc)})
        raise DatabaseError(f"{log_msg}: {exc}", original_error=exc) from exc


def fetch_count(pool: ConnectionPool | None, *, query: str, log_msg: str) -> int:
    row = fetchone(pool, query=query, log_msg=log_msg, log_extra={})
    return int(row[0]) if row else 0
