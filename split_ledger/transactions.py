"""Transaction and transaction-party queries, ordering and classification.

Server side, :func:`query_transactions` and :func:`query_parties` read a
user's rows through a caller-owned session and project them to wire DTOs.
Display side, :func:`sort_transactions`, :func:`sort_parties` and
:func:`classify` shape what the client received. Both sorts rely on Python's
stable sort, so rows that compare equal keep their received order.
"""

from __future__ import annotations

import calendar
import uuid
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from db.models.ledger import Account, Category, CategoryType, Transaction, TransactionParty
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from .errors import InvalidArgument, NotFound
from .logging_setup import get_logger
from .models import TransactionDto, TransactionKind, TransactionPartyDto

_logger = get_logger("split_ledger.transactions")

DAY_FORMAT = "%Y-%m-%d"


# ---------------------------
# Dates
# ---------------------------


def parse_day(value: str | date | None, *, param: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` day, raising :class:`InvalidArgument` when malformed."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = (value or "").strip()
    try:
        return datetime.strptime(s, DAY_FORMAT).date()
    except ValueError as e:
        raise InvalidArgument(f"{param} must be a YYYY-MM-DD date, got {value!r}", param=param) from e


def format_day(value: date) -> str:
    return value.strftime(DAY_FORMAT)


def default_range(today: date | None = None) -> tuple[date, date]:
    """Return the default listing window: one calendar month back through ``today``.

    The day of month is clamped, so 31 March maps back to 28/29 February.
    """

    end = today or date.today()
    year, month = (end.year, end.month - 1) if end.month > 1 else (end.year - 1, 12)
    day = min(end.day, calendar.monthrange(year, month)[1])
    return date(year, month, day), end


# ---------------------------
# Display helpers
# ---------------------------


def classify(tx: TransactionDto) -> TransactionKind:
    """Expense moves money out only, income moves money in only, anything else is a transfer."""

    if tx.account_out_id and not tx.account_in_id:
        return "expense"
    if tx.account_in_id and not tx.account_out_id:
        return "income"
    return "transfer"


def sort_transactions(transactions: Iterable[TransactionDto]) -> list[TransactionDto]:
    """Return a new list ordered by transaction date, newest first."""

    return sorted(transactions, key=lambda t: t.transaction_date, reverse=True)


def sort_parties(parties: Iterable[TransactionPartyDto]) -> list[TransactionPartyDto]:
    """Return a new list ordered by upper-cased party name, ascending."""

    return sorted(parties, key=lambda p: p.transaction_party_name.upper())


# ---------------------------
# Server-side queries
# ---------------------------


def _to_dto(row: Transaction) -> TransactionDto:
    return TransactionDto(
        transaction_id=row.transaction_id,
        transaction_date=row.transaction_date,
        amount=row.amount,
        account_in_id=row.account_in_id,
        account_out_id=row.account_out_id,
        is_shared=bool(row.is_shared),
        transaction_party_name=row.transaction_party.transaction_party_name,
        category_name=row.category.category_name,
    )


def query_transactions(
    session: Session,
    *,
    user_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> list[TransactionDto]:
    """Return the user's transactions dated within ``[start_date, end_date]``, newest first."""

    if start_date > end_date:
        raise InvalidArgument(
            f"startDate {format_day(start_date)} is after endDate {format_day(end_date)}",
            param="startDate",
        )

    stmt = (
        select(Transaction)
        .options(joinedload(Transaction.transaction_party), joinedload(Transaction.category))
        .where(
            Transaction.user_id == user_id,
            Transaction.transaction_date >= start_date,
            Transaction.transaction_date <= end_date,
        )
        .order_by(Transaction.transaction_date.desc(), Transaction.created_on)
    )
    rows = session.scalars(stmt).all()
    _logger.debug(
        "user %s: %d transactions between %s and %s",
        user_id,
        len(rows),
        start_date,
        end_date,
    )
    return sort_transactions(_to_dto(r) for r in rows)


def query_parties(session: Session, *, user_id: uuid.UUID) -> list[TransactionPartyDto]:
    rows = session.scalars(
        select(TransactionParty).where(TransactionParty.user_id == user_id)
    ).all()
    return sort_parties(
        TransactionPartyDto(
            transaction_party_id=r.transaction_party_id,
            transaction_party_name=r.transaction_party_name,
        )
        for r in rows
    )


# ---------------------------
# Recording
# ---------------------------


def _owned(session: Session, model, pk: uuid.UUID, user_id: uuid.UUID, label: str):
    row = session.get(model, pk)
    if row is None or row.user_id != user_id:
        raise NotFound(f"{label} {pk} not found")
    return row


def create_account(session: Session, *, user_id: uuid.UUID, name: str) -> Account:
    if not name or not name.strip():
        raise InvalidArgument("Account name is required", param="name")
    account = Account(account_id=uuid.uuid4(), account_name=name.strip(), user_id=user_id)
    session.add(account)
    session.flush()
    return account


def create_category(
    session: Session,
    *,
    user_id: uuid.UUID,
    name: str,
    category_type: CategoryType = CategoryType.EXPENSE,
) -> Category:
    if not name or not name.strip():
        raise InvalidArgument("Category name is required", param="name")
    category = Category(
        category_id=uuid.uuid4(),
        category_name=name.strip(),
        category_type=int(category_type),
        user_id=user_id,
    )
    session.add(category)
    session.flush()
    return category


def create_party(
    session: Session,
    *,
    user_id: uuid.UUID,
    name: str,
    default_category_id: uuid.UUID | None = None,
) -> TransactionParty:
    if not name or not name.strip():
        raise InvalidArgument("Transaction party name is required", param="name")
    if default_category_id is not None:
        _owned(session, Category, default_category_id, user_id, "Category")
    party = TransactionParty(
        transaction_party_id=uuid.uuid4(),
        transaction_party_name=name.strip(),
        user_id=user_id,
        default_category_id=default_category_id,
    )
    session.add(party)
    session.flush()
    return party


def create_transaction(
    session: Session,
    *,
    user_id: uuid.UUID,
    transaction_date: date,
    amount: Decimal | int | str,
    transaction_party_id: uuid.UUID,
    category_id: uuid.UUID | None = None,
    account_in_id: uuid.UUID | None = None,
    account_out_id: uuid.UUID | None = None,
    is_shared: bool = False,
    notes: str | None = None,
) -> Transaction:
    """Record a transaction; the party's default category is used when none is given."""

    party = _owned(session, TransactionParty, transaction_party_id, user_id, "Transaction party")
    if category_id is None:
        category_id = party.default_category_id
    if category_id is None:
        raise InvalidArgument("Category is required", param="category_id")
    _owned(session, Category, category_id, user_id, "Category")
    for account_id in (account_in_id, account_out_id):
        if account_id is not None:
            _owned(session, Account, account_id, user_id, "Account")

    try:
        amount_d = Decimal(str(amount)).quantize(Decimal("0.01"))
    except InvalidOperation as e:
        raise InvalidArgument(f"Invalid amount: {amount!r}", param="amount") from e

    tx = Transaction(
        transaction_id=uuid.uuid4(),
        transaction_date=transaction_date,
        amount=amount_d,
        account_in_id=account_in_id,
        account_out_id=account_out_id,
        is_shared=is_shared,
        transaction_party_id=transaction_party_id,
        category_id=category_id,
        user_id=user_id,
        notes=notes,
    )
    session.add(tx)
    session.flush()
    _logger.info("user %s recorded transaction %s", user_id, tx.transaction_id)
    return tx


__all__ = [
    "classify",
    "create_account",
    "create_category",
    "create_party",
    "create_transaction",
    "default_range",
    "format_day",
    "parse_day",
    "query_parties",
    "query_transactions",
    "sort_parties",
    "sort_transactions",
]
