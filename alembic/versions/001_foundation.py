"""
============================================================
TARJETA CRC — 001_foundation (Alembic Migration)
============================================================
Responsibilities:
  - Crear el esquema completo: users, fachowcy, leads, opinions.
  - Enforzar en la base las invariantes del Credential Store:
      - email único (uq_users_email)
      - una referencia de Stripe por usuario (uq_users_stripe_customer_id)

Policy:
  - Migración BASELINE. Downgrade elimina todas las tablas.
  - Convención de nombres:
      pk_<tabla> / uq_<tabla>_<col> / ix_<tabla>_<col> / fk_<tabla>_<col>__<ref_tabla>
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_foundation"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # =========================================================
    # 1) IDENTITY (users)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.String(200), nullable=False, server_default=""),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("role", sa.String(32), nullable=False, server_default="pro"),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column(
            "subscribed", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "role IN ('pro', 'client', 'admin')", name="ck_users_role_valid"
        ),
    )
    # R: único parcial; NULL = todavía sin customer.
    op.create_index(
        "uq_users_stripe_customer_id",
        "users",
        ["stripe_customer_id"],
        unique=True,
        postgresql_where=sa.text("stripe_customer_id IS NOT NULL"),
    )

    # =========================================================
    # 2) DIRECTORY (fachowcy)
    # =========================================================
    op.create_table(
        "fachowcy",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("category", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("city", sa.String(200), nullable=True),
        sa.Column(
            "verified", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("about", sa.Text, nullable=True),
        sa.Column("user_id", sa.Integer, nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_fachowcy"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_fachowcy_user_id__users",
            ondelete="SET NULL",
        ),
    )
    op.create_index("ix_fachowcy_user_id", "fachowcy", ["user_id"])

    # =========================================================
    # 3) LEADS
    # =========================================================
    op.create_table(
        "leads",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_leads"),
    )

    # =========================================================
    # 4) OPINIONS
    # =========================================================
    op.create_table(
        "opinions",
        sa.Column("id", sa.Integer, sa.Identity(always=False), nullable=False),
        sa.Column("fachowiec_id", sa.Integer, nullable=False),
        sa.Column("client_id", sa.Integer, nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_opinions"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_opinions_rating_range"),
    )
    op.create_index("ix_opinions_fachowiec_id", "opinions", ["fachowiec_id"])


def downgrade() -> None:
    op.drop_table("opinions")
    op.drop_table("leads")
    op.drop_table("fachowcy")
    op.drop_index("uq_users_stripe_customer_id", table_name="users")
    op.drop_table("users")
