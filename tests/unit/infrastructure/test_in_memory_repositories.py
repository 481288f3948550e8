"""
Unit tests for in-memory repositories (constraints mirrored from Postgres).
"""

import pytest

from renomapro.crosscutting.exceptions import DatabaseError, DuplicateEmailError
from renomapro.domain.entities import ProviderChanges
from renomapro.identity.users import UserRole
from renomapro.infrastructure.repositories.in_memory import (
    InMemoryLeadRepository,
    InMemoryOpinionRepository,
    InMemoryProviderRepository,
    InMemoryUserRepository,
)

pytestmark = pytest.mark.unit


def _create(repo, email, role=UserRole.PRO):
    return repo.create_user(name="X", email=email, password_hash="h", role=role)


def test_user_ids_are_sequential_and_email_unique():
    repo = InMemoryUserRepository()
    assert _create(repo, "a@x.pl").id == 1
    assert _create(repo, "b@x.pl").id == 2
    with pytest.raises(DuplicateEmailError):
        _create(repo, "a@x.pl")


def test_customer_ref_cas_and_uniqueness():
    repo = InMemoryUserRepository()
    a = _create(repo, "a@x.pl")
    b = _create(repo, "b@x.pl")

    assert repo.set_stripe_customer_id(a.id, "cus_1") == "cus_1"
    assert repo.set_stripe_customer_id(a.id, "cus_2") == "cus_1"
    assert repo.set_stripe_customer_id(999, "cus_3") is None
    with pytest.raises(DatabaseError):
        repo.set_stripe_customer_id(b.id, "cus_1")


def test_billing_users_listing():
    repo = InMemoryUserRepository()
    a = _create(repo, "a@x.pl")
    _create(repo, "b@x.pl")
    c = _create(repo, "c@x.pl")
    repo.set_stripe_customer_id(a.id, "cus_a")
    repo.set_stripe_customer_id(c.id, "cus_c")
    repo.mark_subscribed_by_customer("cus_c")

    assert [u.id for u in repo.list_billing_users()] == [c.id, a.id]
    assert repo.count_subscribers() == 1


def test_provider_update_delete_report_affected_rows():
    repo = InMemoryProviderRepository()
    record = repo.create_provider(
        name="Jan", category="dekarz", phone=None, city="Łódź", about=None, user_id=1
    )
    changes = ProviderChanges(
        name="Jan K.", category="dekarz", phone="1", city="Łódź", about="20 lat", verified=True
    )

    assert repo.update_provider(record.id, changes) == 1
    assert repo.get_provider(record.id).verified is True
    assert repo.update_provider(999, changes) == 0
    assert repo.delete_provider(record.id) == 1
    assert repo.delete_provider(record.id) == 0


def test_provider_returns_copies():
    repo = InMemoryProviderRepository()
    record = repo.create_provider(
        name="Jan", category=None, phone=None, city=None, about=None, user_id=1
    )
    record.name = "mutated"
    assert repo.get_provider(record.id).name == "Jan"


def test_leads_newest_first():
    repo = InMemoryLeadRepository()
    first = repo.create_lead(name="A", phone="1", description="x")
    second = repo.create_lead(name="B", phone="2", description="y")

    assert [lead.id for lead in repo.list_leads()] == [second.id, first.id]
    assert repo.count_leads() == 2


def test_opinions_filtered_by_provider():
    repo = InMemoryOpinionRepository()
    repo.create_opinion(provider_id=1, client_id=5, rating=5, comment="super")
    repo.create_opinion(provider_id=2, client_id=5, rating=3, comment=None)

    opinions = repo.list_for_provider(1)
    assert [(o.provider_id, o.rating) for o in opinions] == [(1, 5)]
    assert repo.list_for_provider(3) == []
