"""
===============================================================================
CRC CARD — infrastructure/db/errors.py
===============================================================================

Componente:
  Errores tipados del Pool

Responsabilidades:
  - Distinguir "no inicializado" de "ya inicializado" en el ciclo de vida del pool.
===============================================================================
"""


class DatabasePoolError(Exception):
    """Base de errores de pool de base de datos."""


class PoolAlreadyInitializedError(DatabasePoolError):
    """Se intentó inicializar el pool más de una vez."""


class PoolNotInitializedError(DatabasePoolError):
    """Se intentó usar el pool sin init_pool()."""
