"""Shared pytest fixtures for pennywise tests."""

import tempfile
import os
from datetime import datetime, timedelta, UTC
from decimal import Decimal
import pytest

from pennywise.database.factories import create_sqlite_database
from pennywise.database.store import LedgerStore
from pennywise.domain.account import AccountService
from pennywise.domain.data_transfer import DataTransferService
from pennywise.domain.debt import DebtService
from pennywise.domain.entities import (
    DebtEntry,
    DebtType,
    ExpenseEntry,
    IncomeEntry,
    TransactionSource,
    TransferEntry,
)
from pennywise.domain.migration import MigrationService
from pennywise.domain.transaction import TransactionService

FIXED_NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class SequentialIds:
    """Deterministic id factory: id-1, id-2, ..."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self.count = 0

    def __call__(self) -> str:
        self.count += 1
        return f"{self.prefix}-{self.count}"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def store(temp_db):
    """An empty, loaded store with no accounts."""
    store = LedgerStore(temp_db)
    store.load()
    return store


@pytest.fixture
def migrated_store(temp_db, clock):
    """A store after the first-run migration: three default accounts."""
    store = LedgerStore(temp_db)
    MigrationService(store, clock=clock, id_factory=SequentialIds("acc")).load_accounts()
    return store


@pytest.fixture
def account_service(migrated_store, clock, ids):
    """Create an AccountService over the migrated store."""
    return AccountService(migrated_store, clock=clock, id_factory=ids)


@pytest.fixture
def transaction_service(migrated_store, clock, ids):
    """Create a TransactionService over the migrated store."""
    return TransactionService(migrated_store, clock=clock, id_factory=ids)


@pytest.fixture
def debt_service(migrated_store, clock, ids):
    """Create a DebtService over the migrated store."""
    return DebtService(migrated_store, clock=clock, id_factory=ids)


@pytest.fixture
def data_transfer_service(migrated_store, clock):
    """Create a DataTransferService over the migrated store."""
    return DataTransferService(migrated_store, clock=clock)


@pytest.fixture
def default_accounts(account_service):
    """The seeded default accounts keyed by type value."""
    return {acc.type.value: acc for acc in account_service.list_accounts()}


def make_income(id="inc-1", amount="100", source=TransactionSource.BANK, day=1, **kwargs):
    return IncomeEntry(
        id=id,
        amount=Decimal(amount),
        source=source,
        date=datetime(2024, 1, day, tzinfo=UTC),
        **kwargs,
    )


def make_expense(id="exp-1", amount="50", source=TransactionSource.BANK, day=1, category="Food", **kwargs):
    return ExpenseEntry(
        id=id,
        amount=Decimal(amount),
        category=category,
        source=source,
        date=datetime(2024, 1, day, tzinfo=UTC),
        **kwargs,
    )


def make_transfer(
    id="tr-1",
    amount="25",
    from_source=TransactionSource.BANK,
    to_source=TransactionSource.WALLET,
    day=1,
    **kwargs,
):
    return TransferEntry(
        id=id,
        amount=Decimal(amount),
        from_source=from_source,
        to_source=to_source,
        date=datetime(2024, 1, day, tzinfo=UTC),
        **kwargs,
    )


def make_debt(
    id="debt-1",
    amount="500",
    type=DebtType.LENT,
    source=TransactionSource.WALLET,
    day=1,
    person_name="Ravi",
    **kwargs,
):
    return DebtEntry(
        id=id,
        amount=Decimal(amount),
        type=type,
        person_name=person_name,
        source=source,
        date=datetime(2024, 1, day, tzinfo=UTC),
        **kwargs,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
