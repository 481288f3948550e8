"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool de conexiones PostgreSQL (singleton)

Responsabilidades:
  - Inicializar, exponer y cerrar el pool de conexiones.
  - Aplicar statement_timeout a cada conexión nueva.

Colaboradores:
  - psycopg_pool.ConnectionPool

Principios:
  - Fail-fast (doble init, uso sin init)
  - Pool global único por proceso
===============================================================================
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Optional

from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError

if TYPE_CHECKING:
    from psycopg_pool import ConnectionPool

_pool: Optional["ConnectionPool"] = None
_pool_lock = threading.Lock()


def _statement_timeout_configurer(timeout_ms: int):
    def _configure_connection(conn) -> None:
        # Guardrail contra queries colgadas.
        if timeout_ms > 0:
            conn.execute(f"SET statement_timeout = {int(timeout_ms)}")
            conn.commit()

    return _configure_connection


def init_pool(
    database_url: str,
    min_size: int,
    max_size: int,
    *,
    statement_timeout_ms: int = 0,
) -> "ConnectionPool":
    """Inicializa el pool (una vez por proceso)."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("El pool ya fue inicializado.")

        # Lazy import: en modo test no se abre ninguna conexión.
        from psycopg_pool import ConnectionPool

        logger.info(
            "Inicializando pool DB",
            extra={"min_size": min_size, "max_size": max_size},
        )

        _pool = ConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_statement_timeout_configurer(statement_timeout_ms),
            open=True,
        )

        logger.info("Pool DB inicializado")
        return _pool


def get_pool() -> "ConnectionPool":
    if _pool is None:
        raise PoolNotInitializedError(
            "Pool no inicializado. Llamar init_pool() primero."
        )
    return _pool


def close_pool() -> None:
    """Cierra el pool (idempotente)."""
    global _pool

    with _pool_lock:
        if _pool is not None:
            logger.info("Cerrando pool DB")
            try:
                _pool.close()
            finally:
                _pool = None
            logger.info("Pool DB cerrado")
