"""Data transfer models for the ledger's service boundary.

These are the shapes that cross the HTTP boundary and reach display code. ORM
rows (``db.models.ledger``) never leave the service layer directly, and no
model here carries credential bytes.

Wire names are camelCase (``transactionId``, ``isShared``...) while Python
attributes stay snake_case; models accept either on input.
"""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from pydantic.alias_generators import to_camel

TransactionKind: TypeAlias = Literal["expense", "income", "transfer"]
"""Display classification derived from a transaction's account references."""


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserDto(_WireModel):
    """Public projection of a user; ``token`` is set only after authentication."""

    user_id: uuid.UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    token: str | None = None


class AuthenticateRequest(_WireModel):
    email: str = ""
    password: str = ""


class RegisterRequest(_WireModel):
    email: str
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = None

    @field_validator("email")
    @classmethod
    def _email_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("email must be non-empty")
        return v


class UpdateRequest(RegisterRequest):
    """Profile edit: names and email always overwrite; password is optional."""


# ---------------------------------------------------------------------------
# Transactions and parties
# ---------------------------------------------------------------------------


class TransactionDto(_WireModel):
    transaction_id: uuid.UUID
    transaction_date: date
    amount: Decimal | None = None
    account_in_id: uuid.UUID | None = None
    account_out_id: uuid.UUID | None = None
    is_shared: bool = False
    transaction_party_name: str | None = None
    category_name: str | None = None

    @field_serializer("amount", when_used="json")
    def _amount_as_number(self, v: Decimal | None) -> float | None:
        return float(v) if v is not None else None


class TransactionPartyDto(_WireModel):
    transaction_party_id: uuid.UUID
    transaction_party_name: str


__all__ = [
    "AuthenticateRequest",
    "RegisterRequest",
    "TransactionDto",
    "TransactionKind",
    "TransactionPartyDto",
    "UpdateRequest",
    "UserDto",
]
