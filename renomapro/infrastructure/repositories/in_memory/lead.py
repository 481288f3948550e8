"""In-memory leads (tests / local dev)."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import List

from ....domain.entities import Lead


class InMemoryLeadRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._leads: List[Lead] = []
        self._ids = count(1)

    def create_lead(
        self, *, name: str | None, phone: str | None, description: str | None
    ) -> Lead:
        with self._lock:
            lead = Lead(
                id=next(self._ids),
                name=name,
                phone=phone,
                description=description,
                created_at=datetime.now(timezone.utc),
            )
            self._leads.append(lead)
            return replace(lead)

    def list_leads(self) -> List[Lead]:
        with self._lock:
            items = [replace(lead) for lead in self._leads]
        # R: mismo orden que Postgres: created_at DESC, id DESC.
        return sorted(items, key=lambda lead: (lead.created_at, lead.id), reverse=True)

    def count_leads(self) -> int:
        with self._lock:
            return len(self._leads)
