"""Domain layer for pennywise application."""

from pennywise.domain.account import AccountService
from pennywise.domain.migration import MigrationService
from pennywise.domain.transaction import TransactionService
from pennywise.domain.debt import DebtService
from pennywise.domain.data_transfer import DataTransferService
from pennywise.domain.summary import SummaryService

__all__ = [
    "AccountService",
    "MigrationService",
    "TransactionService",
    "DebtService",
    "DataTransferService",
    "SummaryService",
]
