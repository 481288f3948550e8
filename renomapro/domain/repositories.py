"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts (ports) for users, provider records, leads and opinions.
- Keep application components independent from infrastructure (PostgreSQL, in-memory).
- Enable dependency inversion and straightforward unit testing.

Collaborators
- identity.users: User, UserRole
- domain.entities: ProviderRecord, ProviderChanges, Lead, Opinion
- infrastructure.repositories: postgres/*, in_memory/* implementations

Constraints
- Pure interfaces only: no side effects, no SQL.
- Implementations MUST match method signatures exactly.
- "Not found" is expressed as None (or 0 affected rows), never as an exception.
"""

from typing import List, Optional, Protocol

from ..identity.users import User, UserRole
from .entities import Lead, Opinion, ProviderChanges, ProviderRecord


class UserRepository(Protocol):
    """
    R: Interface for user persistence (Credential Store backing table).
    """

    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        """
        R: Insert a user.

        Raises:
            DuplicateEmailError: if the email already exists (no row is created)
        """
        ...

    def get_user_by_email(self, email: str) -> Optional[User]:
        ...

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        ...

    def set_stripe_customer_id(self, user_id: int, customer_id: str) -> Optional[str]:
        """
        R: Compare-and-swap of the billing reference.

        Writes only when the stored value is NULL or already equal.

        Returns:
            The effective stored reference, or None if the user does not exist.
        """
        ...

    def mark_subscribed_by_customer(self, customer_id: str) -> int:
        """R: Set subscribed=true for every user with this reference; returns matches."""
        ...

    def count_users(self) -> int:
        ...

    def count_subscribers(self) -> int:
        ...

    def list_billing_users(self) -> List[User]:
        """R: Users that are subscribed or have a billing reference."""
        ...


class ProviderRepository(Protocol):
    """R: Interface for the provider directory (fachowcy)."""

    def list_providers(self, *, newest_first: bool = False) -> List[ProviderRecord]:
        ...

    def get_provider(self, provider_id: int) -> Optional[ProviderRecord]:
        ...

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
        ...

    def update_provider(self, provider_id: int, changes: ProviderChanges) -> int:
        """R: Returns affected rows (0 or 1)."""
        ...

    def delete_provider(self, provider_id: int) -> int:
        """R: Returns affected rows (0 or 1)."""
        ...

    def count_providers(self) -> int:
        ...


class LeadRepository(Protocol):
    """R: Interface for lead persistence."""

    def create_lead(
        self, *, name: str | None, phone: str | None, description: str | None
    ) -> Lead:
        ...

    def list_leads(self) -> List[Lead]:
        """R: Newest first (created_at DESC, id DESC)."""
        ...

    def count_leads(self) -> int:
        ...


class OpinionRepository(Protocol):
    """R: Interface for opinions (reviews)."""

    def create_opinion(
        self,
        *,
        provider_id: int,
        client_id: int,
        rating: int,
        comment: str | None,
    ) -> Opinion:
        ...

    def list_for_provider(self, provider_id: int) -> List[Opinion]:
        ...
