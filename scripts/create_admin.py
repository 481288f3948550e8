"""
Name: Admin Bootstrap Script

Responsibilities:
  - Create an admin user (idempotent); the public API never creates admins
  - Hash passwords with Argon2
  - Store user in PostgreSQL

Usage:
  DATABASE_URL=postgresql://... python scripts/create_admin.py --email owner@example.com
"""

from __future__ import annotations

import argparse
import getpass
import os
import sys

import psycopg

from renomapro.application.credential_store import normalize_email
from renomapro.identity.auth_users import hash_password
from renomapro.identity.users import UserRole


def _require_database_url() -> str:
    db_url = os.getenv("DATABASE_URL")
    if not db_url:
        raise SystemExit("DATABASE_URL is required to create a user.")
    return db_url


def _prompt_email() -> str:
    email = normalize_email(input("Email: "))
    if not email:
        raise SystemExit("Email is required.")
    return email


def _prompt_password() -> str:
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password is required.")
    confirm = getpass.getpass("Confirm password: ")
    if password != confirm:
        raise SystemExit("Passwords do not match.")
    return password


def _parse_args(argv: list[str]) -> argparse.Namespace:
    if argv and argv[0] == "--":
        argv = argv[1:]
    parser = argparse.ArgumentParser(description="Create an admin user (idempotent).")
    parser.add_argument("--email", help="User email (will be normalized)")
    parser.add_argument("--name", default="Admin", help="Display name")
    parser.add_argument(
        "--password",
        help="User password (omit to be prompted securely)",
    )
    parser.add_argument(
        "--role",
        default=UserRole.ADMIN.value,
        choices=[role.value for role in UserRole],
        help="User role (default: admin)",
    )
    return parser.parse_args(argv)


def _maybe_create_user(db_url: str, *, name: str, email: str, password: str, role: str) -> None:
    with psycopg.connect(db_url) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT id, role FROM users WHERE email = %s", (email,))
            row = cur.fetchone()
            if row:
                print(f"User already exists: id={row[0]} email={email} role={row[1]}")
                return

            cur.execute(
                """
                INSERT INTO users (name, email, password_hash, role)
                VALUES (%s, %s, %s, %s)
                RETURNING id
                """,
                (name, email, hash_password(password), role),
            )
            user_id = cur.fetchone()[0]
            conn.commit()
            print(f"Created user: id={user_id} email={email} role={role}")


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    db_url = _require_database_url()
    email = normalize_email(args.email) if args.email else _prompt_email()
    if not email:
        raise SystemExit("Email is required.")
    password = args.password or _prompt_password()
    _maybe_create_user(db_url, name=args.name, email=email, password=password, role=args.role)


if __name__ == "__main__":
    main()
