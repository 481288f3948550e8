"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Persistir usuarios del Credential Store (tabla `users`).
  - Crear usuarios respetando el email único (uq_users_email).
  - Asignar la referencia de Stripe con compare-and-swap.
  - Marcar suscripciones por referencia de customer.
  - Mapear filas crudas -> entidad `User` validando `UserRole`.

Collaborators:
  - psycopg_pool.ConnectionPool
  - identity.users.User / UserRole
  - crosscutting.exceptions.DuplicateEmailError / DatabaseError

Constraints / Notes:
  - Retorna None cuando no existe el recurso.
  - SQL parametrizado siempre.
  - La normalización del email es política del Credential Store, no del repo.
============================================================
"""

from __future__ import annotations

from typing import Optional

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import DatabaseError, DuplicateEmailError
from ....crosscutting.logger import logger
from ....identity.users import User, UserRole
from . import _sql

_USER_COLUMNS = (
    "id, name, email, password_hash, role, stripe_customer_id, subscribed, created_at"
)


def _row_to_user(row: tuple) -> User:
    try:
        role = UserRole(row[4])
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {row[4]}") from exc

    return User(
        id=row[0],
        name=row[1] or "",
        email=row[2],
        password_hash=row[3],
        role=role,
        stripe_customer_id=row[5],
        subscribed=bool(row[6]),
        created_at=row[7],
    )


class PostgresUserRepository:
    def __init__(self, pool: ConnectionPool | None = None) -> None:
        self._pool = pool

    # --- Lectura ---
    def get_user_by_email(self, email: str) -> Optional[User]:
        row = _sql.fetchone(
            self._pool,
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            params=(email,),
            log_msg="PostgresUserRepository: get_user_by_email failed",
            log_extra={},
        )
        return _row_to_user(row) if row else None

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = _sql.fetchone(
            self._pool,
            query=f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            params=(user_id,),
            log_msg="PostgresUserRepository: get_user_by_id failed",
            log_extra={"user_id": user_id},
        )
        return _row_to_user(row) if row else None

    def count_users(self) -> int:
        return _sql.fetch_count(
            self._pool,
            query="SELECT COUNT(*) FROM users",
            log_msg="PostgresUserRepository: count_users failed",
        )

    def count_subscribers(self) -> int:
        return _sql.fetch_count(
            self._pool,
            query="SELECT COUNT(*) FROM users WHERE subscribed = TRUE",
            log_msg="PostgresUserRepository: count_subscribers failed",
        )

    def list_billing_users(self) -> list[User]:
        rows = _sql.fetchall(
            self._pool,
            query=f"""
                SELECT {_USER_COLUMNS}
                FROM users
                WHERE subscribed = TRUE OR stripe_customer_id IS NOT NULL
                ORDER BY id DESC
            """,
            log_msg="PostgresUserRepository: list_billing_users failed",
            log_extra={},
        )
        return [_row_to_user(r) for r in rows]

    # --- Escritura ---
    def create_user(
        self, *, name: str, email: str, password_hash: str, role: UserRole
    ) -> User:
        """
        Inserta un usuario.

        La violación de uq_users_email se traduce a DuplicateEmailError;
        el INSERT es atómico, así que no quedan filas parciales.
        """
        try:
            with _sql.resolve_pool(self._pool).connection() as conn:
                row = conn.execute(
                    f"""
                    INSERT INTO users (name, email, password_hash, role)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_USER_COLUMNS}
                    """,
                    (name, email, password_hash, role.value),
                ).fetchone()
        except pg_errors.UniqueViolation as exc:
            raise DuplicateEmailError("El email ya está registrado.") from exc
        except Exception as exc:
            logger.exception(
                "PostgresUserRepository: create_user failed",
                extra={"role": role.value, "error": str(exc)},
            )
            raise DatabaseError(
                f"PostgresUserRepository: create_user failed: {exc}", original_error=exc
            ) from exc

        if not row:
            raise DatabaseError("PostgresUserRepository: create_user returned no row")
        return _row_to_user(row)

    def set_stripe_customer_id(self, user_id: int, customer_id: str) -> Optional[str]:
        row = _sql.fetchone(
            self._pool,
            query="""
                UPDATE users
                SET stripe_customer_id = %s
                WHERE id = %s
                  AND (stripe_customer_id IS NULL OR stripe_customer_id = %s)
                RETURNING stripe_customer_id
            """,
            params=(customer_id, user_id, customer_id),
            log_msg="PostgresUserRepository: set_stripe_customer_id failed",
            log_extra={"user_id": user_id},
        )
        if row:
            return row[0]

        # CAS perdido o usuario inexistente: devolvemos lo que quedó guardado.
        current = self.get_user_by_id(user_id)
        return current.stripe_customer_id if current else None

    def mark_subscribed_by_customer(self, customer_id: str) -> int:
        return _sql.execute_rowcount(
            self._pool,
            query="UPDATE users SET subscribed = TRUE WHERE stripe_customer_id = %s",
            params=(customer_id,),
            log_msg="PostgresUserRepository: mark_subscribed_by_customer failed",
            log_extra={"customer_ref": customer_id},
        )
