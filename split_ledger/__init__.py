"""Public interface for the ``split_ledger`` package.

Re-exports the domain services, display helpers and error types. The HTTP
layer (``split_ledger.server``), its client (``split_ledger.remote``) and the
CLI are imported from their own modules.
"""

from .errors import Conflict, DuplicateRecords, InvalidArgument, LedgerError, NotFound
from .models import TransactionDto, TransactionKind, TransactionPartyDto, UserDto
from .passwords import PasswordCredentials, derive_password_hash, verify_password_hash
from .transactions import (
    classify,
    query_parties,
    query_transactions,
    sort_parties,
    sort_transactions,
)
from .users import UserService

__all__ = [
    # Services
    "UserService",
    "derive_password_hash",
    "verify_password_hash",
    "query_transactions",
    "query_parties",
    "classify",
    "sort_transactions",
    "sort_parties",
    # Models / types
    "PasswordCredentials",
    "TransactionDto",
    "TransactionKind",
    "TransactionPartyDto",
    "UserDto",
    # Errors
    "LedgerError",
    "InvalidArgument",
    "Conflict",
    "NotFound",
    "DuplicateRecords",
]
