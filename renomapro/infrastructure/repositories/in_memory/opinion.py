"""In-memory opinions (tests / local dev)."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import List

from ....domain.entities import Opinion


class InMemoryOpinionRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._opinions: List[Opinion] = []
        self._ids = count(1)

    def create_opinion(
        self,
        *,
        provider_id: int,
        client_id: int,
        rating: int,
        comment: str | None,
    ) -> Opinion:
        with self._lock:
            opinion = Opinion(
                id=next(self._ids),
                provider_id=provider_id,
                client_id=client_id,
                rating=rating,
                comment=comment,
                created_at=datetime.now(timezone.utc),
            )
            self._opinions.append(opinion)
            return replace(opinion)

    def list_for_provider(self, provider_id: int) -> List[Opinion]:
        with self._lock:
            items = [replace(o) for o in self._opinions if o.provider_id == provider_id]
        return sorted(items, key=lambda o: (o.created_at, o.id), reverse=True)
