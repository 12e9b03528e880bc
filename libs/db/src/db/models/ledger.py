from __future__ import annotations

import enum
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CategoryType(enum.IntEnum):
    """Stored as an integer in ``categories.category_type``."""

    EXPENSE = 0
    INCOME = 1
    TRANSFER = 2


# ---------------------------
# Identity: users
# ---------------------------


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Case-sensitive as stored. The unique constraint is the authoritative guard
    # against two registrations racing past the service-level check.
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    password_hash: Mapped[bytes | None] = mapped_column(LargeBinary(64), nullable=True)
    password_salt: Mapped[bytes | None] = mapped_column(LargeBinary(128), nullable=True)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    modified_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    # Owned rows go away with the user (hard delete, no tombstones).
    accounts: Mapped[list[Account]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    categories: Mapped[list[Category]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    transaction_parties: Mapped[list[TransactionParty]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )
    transactions: Mapped[list[Transaction]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint(
            "(password_hash IS NULL) = (password_salt IS NULL)",
            name="ck_users_credentials_paired",
        ),
    )


# ---------------------------
# Reference: accounts / categories / parties
# ---------------------------


class Account(Base):
    __tablename__ = "accounts"

    account_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    account_name: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    modified_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    user: Mapped[User] = relationship(back_populates="accounts")


class Category(Base):
    __tablename__ = "categories"

    category_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    category_name: Mapped[str] = mapped_column(String(128), nullable=False)
    category_type: Mapped[int] = mapped_column(
        Integer, nullable=False, default=int(CategoryType.EXPENSE)
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    modified_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    user: Mapped[User] = relationship(back_populates="categories")

    __table_args__ = (
        CheckConstraint("category_type in (0, 1, 2)", name="ck_categories_category_type"),
    )


class TransactionParty(Base):
    __tablename__ = "transaction_parties"

    transaction_party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    transaction_party_name: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    # Suggested category when recording a new transaction with this party.
    default_category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("categories.category_id", ondelete="SET NULL"), nullable=True
    )
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    modified_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    user: Mapped[User] = relationship(back_populates="transaction_parties")
    default_category: Mapped[Category | None] = relationship()


# ---------------------------
# Core: transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    transaction_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    # Signed; the expense/income/transfer reading comes from the account
    # references, never from the sign.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # Destination account (money flows in) and source account (money flows out).
    account_in_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("accounts.account_id", ondelete="SET NULL"), nullable=True
    )
    account_out_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("accounts.account_id", ondelete="SET NULL"), nullable=True
    )
    is_shared: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transaction_party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("transaction_parties.transaction_party_id"), nullable=False
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.category_id"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    modified_on: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    user: Mapped[User] = relationship(back_populates="transactions")
    transaction_party: Mapped[TransactionParty] = relationship()
    category: Mapped[Category] = relationship()

    __table_args__ = (Index("ix_transactions_user_date", "user_id", "transaction_date"),)


__all__ = [
    "Account",
    "Base",
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionParty",
    "User",
]
