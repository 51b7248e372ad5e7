"""Domain model entities for pennywise.

These are pure data classes representing ledger concepts, independent of the
storage format. Records are immutable; updates produce new instances with
``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class AccountType(str, Enum):
    """Kind of money bucket an account represents."""

    WALLET = "wallet"
    BANK = "bank"
    NCMC = "ncmc"


class TransactionSource(str, Enum):
    """Legacy coarse account discriminator used before per-account ids."""

    WALLET = "wallet"
    BANK = "bank"
    NCMC = "NCMC"


class DebtType(str, Enum):
    LENT = "lent"
    BORROWED = "borrowed"


class DebtStatus(str, Enum):
    PENDING = "pending"
    SETTLED = "settled"


class EntryKind(str, Enum):
    """The four transaction collections."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    DEBT = "debt"


_SOURCE_TO_TYPE = {
    TransactionSource.WALLET: AccountType.WALLET,
    TransactionSource.BANK: AccountType.BANK,
    TransactionSource.NCMC: AccountType.NCMC,
}
_TYPE_TO_SOURCE = {value: key for key, value in _SOURCE_TO_TYPE.items()}


def account_type_for_source(source: TransactionSource) -> AccountType:
    """Map a legacy source to its account type (``NCMC`` -> ``ncmc``)."""
    return _SOURCE_TO_TYPE[TransactionSource(source)]


def source_for_account_type(account_type: AccountType) -> TransactionSource:
    """Map an account type back to its legacy source."""
    return _TYPE_TO_SOURCE[AccountType(account_type)]


@dataclass(frozen=True)
class Account:
    """Named bucket of money that transactions reference by id."""

    id: str
    name: str
    type: AccountType
    created_at: datetime
    updated_at: datetime
    is_default: bool = False
    is_active: bool = True


@dataclass(frozen=True)
class IncomeEntry:
    """Income entry domain entity."""

    id: str
    amount: Decimal
    source: TransactionSource
    date: datetime
    account_id: Optional[str] = None
    subcategory: str = ""
    descriptions: tuple[str, ...] = field(default_factory=tuple)
    description: Optional[str] = None


@dataclass(frozen=True)
class ExpenseEntry:
    """Expense entry domain entity."""

    id: str
    amount: Decimal
    category: str
    source: TransactionSource
    date: datetime
    account_id: Optional[str] = None
    subcategory: str = ""
    descriptions: tuple[str, ...] = field(default_factory=tuple)
    description: Optional[str] = None


@dataclass(frozen=True)
class TransferEntry:
    """Movement of money between two sources or accounts."""

    id: str
    amount: Decimal
    from_source: TransactionSource
    to_source: TransactionSource
    date: datetime
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    descriptions: tuple[str, ...] = field(default_factory=tuple)
    description: Optional[str] = None


@dataclass(frozen=True)
class DebtEntry:
    """Money lent to or borrowed from another person.

    ``amount`` is the original amount; ``settled_amount`` accumulates partial
    settlements and never decreases.
    """

    id: str
    amount: Decimal
    type: DebtType
    person_name: str
    source: TransactionSource
    date: datetime
    status: DebtStatus = DebtStatus.PENDING
    account_id: Optional[str] = None
    due_date: Optional[datetime] = None
    settled_date: Optional[datetime] = None
    settled_amount: Decimal = Decimal("0")
    descriptions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def remaining_amount(self) -> Decimal:
        return self.amount - self.settled_amount

    @property
    def is_settled(self) -> bool:
        return self.status == DebtStatus.SETTLED


Entry = Union[IncomeEntry, ExpenseEntry, TransferEntry, DebtEntry]


@dataclass(frozen=True)
class StoreMutation:
    """One step of a multi-collection change, applied in list order."""

    kind: EntryKind
    action: str  # "add" or "replace"
    entry: Entry


@dataclass(frozen=True)
class PendingDebtTotals:
    """Open debts split by direction, with the amounts still outstanding."""

    lent: tuple[DebtEntry, ...]
    borrowed: tuple[DebtEntry, ...]
    total_lent: Decimal
    total_borrowed: Decimal


@dataclass(frozen=True)
class PeriodSummary:
    """Income and expense totals for a date range."""

    start: Optional[datetime]
    end: Optional[datetime]
    total_income: Decimal
    total_expenses: Decimal
    expenses_by_category: dict[str, Decimal]
    income_by_subcategory: dict[str, Decimal]
    income_count: int
    expense_count: int

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expenses
