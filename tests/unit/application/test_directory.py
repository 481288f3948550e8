"""
Unit tests for ProviderDirectory (ownership rule) and owner stats.
"""

import pytest

from renomapro.application.credential_store import CredentialStore
from renomapro.application.directory import ProviderDirectory, owner_stats
from renomapro.crosscutting.exceptions import ForbiddenError
from renomapro.domain.entities import ProviderChanges
from renomapro.infrastructure.repositories.in_memory import (
    InMemoryLeadRepository,
    InMemoryProviderRepository,
    InMemoryUserRepository,
)

pytestmark = pytest.mark.unit

CHANGES = ProviderChanges(
    name="Hydro-Max", category="hydraulik", phone="600100200", city="Kraków", about=None
)


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def store(users):
    return CredentialStore(
        users, password_hasher=lambda p: p, password_verifier=lambda p, h: p == h
    )


@pytest.fixture
def providers():
    return InMemoryProviderRepository()


def _directory(providers, store, enforced=True):
    return ProviderDirectory(providers, store, ownership_enforced=enforced)


def _seed(directory, owner_id):
    return directory.create(
        user_id=owner_id, name="Jan", category="elektryk", phone=None, city="Gdańsk", about=None
    )


def test_owner_can_update_and_delete(store, providers):
    owner = store.create("Jan", "jan@example.com", "pw")
    directory = _directory(providers, store)
    record = _seed(directory, owner.id)

    assert directory.update(record.id, CHANGES, actor_id=owner.id) == 1
    assert providers.get_provider(record.id).name == "Hydro-Max"
    assert directory.delete(record.id, actor_id=owner.id) == 1
    assert providers.get_provider(record.id) is None


def test_stranger_is_forbidden(store, providers):
    owner = store.create("Jan", "jan@example.com", "pw")
    stranger = store.create("Ola", "ola@example.com", "pw", "client")
    directory = _directory(providers, store)
    record = _seed(directory, owner.id)

    with pytest.raises(ForbiddenError):
        directory.update(record.id, CHANGES, actor_id=stranger.id)
    with pytest.raises(ForbiddenError):
        directory.delete(record.id, actor_id=stranger.id)
    assert providers.get_provider(record.id).name == "Jan"


def test_admin_can_mutate_any_record(store, providers):
    owner = store.create("Jan", "jan@example.com", "pw")
    admin = store.create("Admin", "admin@example.com", "pw", "admin")
    directory = _directory(providers, store)
    record = _seed(directory, owner.id)

    assert directory.update(record.id, CHANGES, actor_id=admin.id) == 1


def test_missing_record_reports_zero(store, providers):
    user = store.create("Jan", "jan@example.com", "pw")
    directory = _directory(providers, store)

    assert directory.update(999, CHANGES, actor_id=user.id) == 0
    assert directory.delete(999, actor_id=user.id) == 0


def test_ownership_disabled_allows_any_identity(store, providers):
    owner = store.create("Jan", "jan@example.com", "pw")
    stranger = store.create("Ola", "ola@example.com", "pw", "client")
    directory = _directory(providers, store, enforced=False)
    record = _seed(directory, owner.id)

    assert directory.update(record.id, CHANGES, actor_id=stranger.id) == 1
    assert directory.delete(record.id, actor_id=stranger.id) == 1


def test_listing_order(store, providers):
    owner = store.create("Jan", "jan@example.com", "pw")
    directory = _directory(providers, store)
    ids = [_seed(directory, owner.id).id for _ in range(3)]

    assert [r.id for r in directory.list_public()] == ids
    assert [r.id for r in directory.list_admin()] == list(reversed(ids))


def test_owner_stats_counts(store, users, providers):
    leads = InMemoryLeadRepository()
    user = store.create("Jan", "jan@example.com", "pw")
    store.create("Ola", "ola@example.com", "pw", "client")
    store.set_billing_customer_ref(user.id, "cus_A")
    store.mark_subscribed("cus_A")
    _seed(_directory(providers, store), user.id)
    leads.create_lead(name="A", phone="1", description="x")
    leads.create_lead(name="B", phone="2", description="y")

    stats = owner_stats(users=users, providers=providers, leads=leads)

    assert (stats.users, stats.providers, stats.leads, stats.subscribers) == (2, 1, 2, 1)
