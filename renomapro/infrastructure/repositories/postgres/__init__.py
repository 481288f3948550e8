"""
PostgreSQL Repository Implementations.

Raw parameterized SQL over psycopg 3 + psycopg_pool.
"""

from .lead import PostgresLeadRepository
from .opinion import PostgresOpinionRepository
from .provider import PostgresProviderRepository
from .user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresProviderRepository",
    "PostgresLeadRepository",
    "PostgresOpinionRepository",
]
