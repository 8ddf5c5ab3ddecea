"""
Ledger error types.

Every error a service raises on purpose is a LedgerError. Each
subclass carries the HTTP status the API layer answers with, so
routers can translate failures without knowing the details.
"""


class LedgerError(ValueError):
    """Base class for expected ledger failures."""

    status_code = 400


class ValidationError(LedgerError):
    """Malformed or missing input, such as a bad amount."""

    status_code = 400


class AuthorizationError(LedgerError):
    """Caller lacks rights over the target branch or fund."""

    status_code = 403


class NotFoundError(LedgerError):
    """Referenced entity does not exist."""

    status_code = 404


class InsufficientBalanceError(LedgerError):
    """The entry would drive a fund balance below zero."""

    status_code = 400


class ConsistencyError(LedgerError):
    """
    An internal invariant does not hold.

    Not recoverable by the caller; the enclosing transaction
    must be rolled back.
    """

    status_code = 500


def branch_not_found(branch_id: int) -> str:
    return f"Branch {branch_id} not found"


def fund_not_found(fund_id: int) -> str:
    return f"Fund {fund_id} not found"


def entry_not_found(entry_id: int) -> str:
    return f"Entry {entry_id} not found"


def archive_not_found(archive_id: int) -> str:
    return f"Archive {archive_id} not found"
