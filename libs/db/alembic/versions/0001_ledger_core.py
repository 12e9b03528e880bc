# ruff: noqa: I001
"""Ledger core tables: users, accounts, categories, parties, transactions.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_on",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "modified_on",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("password_hash", sa.LargeBinary(64), nullable=True),
        sa.Column("password_salt", sa.LargeBinary(128), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(
            "(password_hash IS NULL) = (password_salt IS NULL)",
            name="ck_users_credentials_paired",
        ),
    )

    op.create_table(
        "accounts",
        sa.Column("account_id", sa.Uuid(), primary_key=True),
        sa.Column("account_name", sa.String(128), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        sa.Column("category_id", sa.Uuid(), primary_key=True),
        sa.Column("category_name", sa.String(128), nullable=False),
        sa.Column("category_type", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint("category_type in (0, 1, 2)", name="ck_categories_category_type"),
    )

    op.create_table(
        "transaction_parties",
        sa.Column("transaction_party_id", sa.Uuid(), primary_key=True),
        sa.Column("transaction_party_name", sa.String(128), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "default_category_id",
            sa.Uuid(),
            sa.ForeignKey("categories.category_id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
    )

    op.create_table(
        "transactions",
        sa.Column("transaction_id", sa.Uuid(), primary_key=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column(
            "account_in_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.account_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "account_out_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.account_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "transaction_party_id",
            sa.Uuid(),
            sa.ForeignKey("transaction_parties.transaction_party_id"),
            nullable=False,
        ),
        sa.Column(
            "category_id",
            sa.Uuid(),
            sa.ForeignKey("categories.category_id"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_transactions_user_date",
        "transactions",
        ["user_id", "transaction_date"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_user_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("transaction_parties")
    op.drop_table("categories")
    op.drop_table("accounts")
    op.drop_table("users")
