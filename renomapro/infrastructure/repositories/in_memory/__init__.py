"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .lead import InMemoryLeadRepository
from .opinion import InMemoryOpinionRepository
from .provider import InMemoryProviderRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryUserRepository",
    "InMemoryProviderRepository",
    "InMemoryLeadRepository",
    "InMemoryOpinionRepository",
]
