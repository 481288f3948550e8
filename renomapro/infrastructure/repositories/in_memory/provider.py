"""In-memory directory of provider records (tests / local dev)."""

from __future__ import annotations

from dataclasses import replace
from itertools import count
from threading import Lock
from typing import Dict, List, Optional

from ....domain.entities import ProviderChanges, ProviderRecord


class InMemoryProviderRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._providers: Dict[int, ProviderRecord] = {}
        self._ids = count(1)

    def list_providers(self, *, newest_first: bool = False) -> List[ProviderRecord]:
        with self._lock:
            items = [replace(p) for p in self._providers.values()]
        return sorted(items, key=lambda p: p.id, reverse=newest_first)

    def get_provider(self, provider_id: int) -> Optional[ProviderRecord]:
        with self._lock:
            record = self._providers.get(provider_id)
            return replace(record) if record else None

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
        with self._lock:
            record = ProviderRecord(
                id=next(self._ids),
                name=name,
                category=category,
                phone=phone,
                city=city,
                about=about,
                user_id=user_id,
            )
            self._providers[record.id] = record
            return replace(record)

    def update_provider(self, provider_id: int, changes: ProviderChanges) -> int:
        with self._lock:
            record = self._providers.get(provider_id)
            if record is None:
                return 0
            self._providers[provider_id] = replace(
                record,
                name=changes.name,
                category=changes.category,
                phone=changes.phone,
                city=changes.city,
                about=changes.about,
                verified=changes.verified,
            )
            return 1

    def delete_provider(self, provider_id: int) -> int:
        with self._lock:
            return 1 if self._providers.pop(provider_id, None) else 0

    def count_providers(self) -> int:
        with self._lock:
            return len(self._providers)
