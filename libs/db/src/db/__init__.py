"""db: shared database library (SQLAlchemy/Alembic) for the ledger.

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.ledger`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.ledger import (
    Account,
    Base,
    Category,
    CategoryType,
    Transaction,
    TransactionParty,
    User,
)

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Account",
    "Base",
    "Category",
    "CategoryType",
    "metadata",
    "Transaction",
    "TransactionParty",
    "User",
]
