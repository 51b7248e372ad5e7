"""Shared domain error messages and error types."""

from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ImportValidationError(ValidationError):
    """An import payload was rejected.

    Attributes:
        collection: Name of the offending collection (e.g. ``expenseEntries``),
            or None when the payload structure itself is invalid
        index: Position of the first invalid record, if any
    """

    def __init__(self, message: str, collection: Optional[str] = None, index: Optional[int] = None):
        super().__init__(message)
        self.collection = collection
        self.index = index


class MigrationFailure(DomainError):
    """Account migration could not complete; defaults were used in memory."""


class StorageError(Exception):
    """The persistence provider failed to read or write a collection."""


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def entry_not_found(kind: str, entry_id: str) -> str:
    """Return message for a missing income/expense/transfer/debt entry."""
    return f"{kind.capitalize()} entry {entry_id} not found"


def invalid_structure() -> str:
    """Return message for an import payload without the required arrays."""
    return (
        "Invalid file structure. Expected 'incomeEntries', 'expenseEntries', "
        "and 'transferEntries' arrays."
    )


def invalid_collection(collection: str, index: int) -> str:
    """Return message for an import collection containing an invalid record."""
    return (
        f"Invalid data in '{collection}' (record {index}). "
        "Please check the file format and content."
    )


def settlement_exceeds_remaining(amount, remaining) -> str:
    """Return message for a partial settlement larger than the open balance."""
    return f"Amount {amount} cannot exceed remaining debt of {remaining}"
