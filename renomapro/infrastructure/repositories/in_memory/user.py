"""
============================================================
TARJETA CRC — infrastructure/repositories/in_memory/user.py
============================================================
Class: InMemoryUserRepository

Responsibilities:
  - Almacenar usuarios en memoria (tests / local dev).
  - Replicar las restricciones de la tabla `users`:
      - email único
      - stripe_customer_id único y con compare-and-swap
  - Ids enteros autoincrementales.

Collaborators:
  - identity.users.User / UserRole
  - domain.repositories.UserRepository (contrato)

Constraints / Notes:
  - Thread-safe: acceso protegido por Lock.
  - User es inmutable: cada escritura reemplaza el registro (dataclasses.replace).
============================================================
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from threading import Lock
from typing import Dict, List, Optional

from ....crosscutting.exceptions import DatabaseError, DuplicateEmailError
from ....identity.users import User, UserRole


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._users: Dict[int, User] = {}
        self._ids = count(1)

    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                raise DuplicateEmailError("El email ya está registrado.")
            user = User(
                id=next(self._ids),
                name=name,
                email=email,
                password_hash=password_hash,
                role=UserRole(role),
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def set_stripe_customer_id(self, user_id: int, customer_id: str) -> Optional[str]:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            if user.stripe_customer_id not in (None, customer_id):
                return user.stripe_customer_id
            if any(
                u.stripe_customer_id == customer_id and u.id != user_id
                for u in self._users.values()
            ):
                raise DatabaseError("uq_users_stripe_customer_id violated")
            self._users[user_id] = replace(user, stripe_customer_id=customer_id)
            return customer_id

    def mark_subscribed_by_customer(self, customer_id: str) -> int:
        with self._lock:
            matched = [
                u for u in self._users.values() if u.stripe_customer_id == customer_id
            ]
            for user in matched:
                self._users[user.id] = replace(user, subscribed=True)
            return len(matched)

    def count_users(self) -> int:
        with self._lock:
            return len(self._users)

    def count_subscribers(self) -> int:
        with self._lock:
            return sum(1 for u in self._users.values() if u.subscribed)

    def list_billing_users(self) -> List[User]:
        with self._lock:
            selected = [
                u
                for u in self._users.values()
                if u.subscribed or u.stripe_customer_id is not None
            ]
        return sorted(selected, key=lambda u: u.id, reverse=True)
