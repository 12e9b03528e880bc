"""Shared SQLAlchemy models registry for the ledger database."""

from .ledger import (
    Account,
    Base,
    Category,
    CategoryType,
    Transaction,
    TransactionParty,
    User,
)

__all__ = [
    "Account",
    "Base",
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionParty",
    "User",
]
