"""Error taxonomy shared by the services, the HTTP boundary and the CLI.

Failed authentication is not an error: :meth:`UserService.authenticate`
returns ``None`` for any credential mismatch.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Root of the ledger's distinguishable error conditions."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgument(LedgerError, ValueError):
    """Malformed or missing required input."""

    status_code = 400

    def __init__(self, message: str, *, param: str | None = None) -> None:
        super().__init__(message)
        self.param = param


class Conflict(LedgerError):
    """A uniqueness rule (registered email) would be violated."""

    status_code = 409


class NotFound(LedgerError, LookupError):
    """The referenced user or record does not exist."""

    status_code = 404


class DuplicateRecords(NotFound):
    """A lookup expected exactly one row and found several (integrity fault)."""


__all__ = [
    "Conflict",
    "DuplicateRecords",
    "InvalidArgument",
    "LedgerError",
    "NotFound",
]
