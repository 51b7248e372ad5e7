"""Balance computation over the four transaction collections.

Every function here is a pure fold: no side effects, no hidden state, and
the same inputs always give the same result.

For a target key (a source or an account id) the balance is::

    + income         with that key
    - expenses       with that key
    + transfers      whose destination is that key
    - transfers      whose origin is that key
    - debts (lent)     with that key
    + debts (borrowed) with that key

Debts count their original amount regardless of status. Repayments arrive
as separate income/expense records created on settlement, so a lent debt
and its repayment are two distinct cash events.
"""

from decimal import Decimal
from typing import Iterable, Optional

from pennywise.domain.entities import (
    Account,
    AccountType,
    DebtEntry,
    DebtStatus,
    DebtType,
    Entry,
    ExpenseEntry,
    IncomeEntry,
    PendingDebtTotals,
    TransactionSource,
    TransferEntry,
)

SOURCE = "source"
ACCOUNT = "account"

ZERO = Decimal("0")


def resolve_key(entry: Entry, mode: str, side: Optional[str] = None) -> Optional[str]:
    """Return the key an entry is booked against.

    Args:
        entry: Any transaction entry
        mode: ``"source"`` for the legacy source, ``"account"`` for the account id
        side: For transfers, ``"from"`` or ``"to"``

    Returns:
        The source value or account id, or None if the entry has none
    """
    if isinstance(entry, TransferEntry):
        if side == "from":
            value = entry.from_source if mode == SOURCE else entry.from_account_id
        elif side == "to":
            value = entry.to_source if mode == SOURCE else entry.to_account_id
        else:
            raise ValueError("Transfers need side='from' or side='to'")
    else:
        value = entry.source if mode == SOURCE else entry.account_id
    if isinstance(value, TransactionSource):
        return value.value
    return value


def _balance(
    key: str,
    mode: str,
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    transfers: Iterable[TransferEntry],
    debts: Iterable[DebtEntry],
) -> Decimal:
    balance = ZERO
    for entry in income:
        if resolve_key(entry, mode) == key:
            balance += entry.amount
    for entry in expenses:
        if resolve_key(entry, mode) == key:
            balance -= entry.amount
    for transfer in transfers:
        if resolve_key(transfer, mode, "from") == key:
            balance -= transfer.amount
        if resolve_key(transfer, mode, "to") == key:
            balance += transfer.amount
    for debt in debts:
        if resolve_key(debt, mode) != key:
            continue
        if debt.type == DebtType.LENT:
            balance -= debt.amount
        elif debt.type == DebtType.BORROWED:
            balance += debt.amount
    return balance


def source_balance(
    source: TransactionSource | str,
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    transfers: Iterable[TransferEntry],
    debts: Iterable[DebtEntry],
) -> Decimal:
    """Balance of a legacy source bucket (wallet, bank or NCMC)."""
    return _balance(TransactionSource(source).value, SOURCE, income, expenses, transfers, debts)


def account_balance(
    account_id: str,
    income: Iterable[IncomeEntry],
    expenses: Iterable[ExpenseEntry],
    transfers: Iterable[TransferEntry],
    debts: Iterable[DebtEntry],
) -> Decimal:
    """Balance of a single account, by account id."""
    return _balance(account_id, ACCOUNT, income, expenses, transfers, debts)


def balances_by_source(income, expenses, transfers, debts) -> dict[TransactionSource, Decimal]:
    """Balances of all three legacy sources."""
    income, expenses, transfers, debts = tuple(income), tuple(expenses), tuple(transfers), tuple(debts)
    return {
        source: source_balance(source, income, expenses, transfers, debts)
        for source in TransactionSource
    }


def net_balance(income, expenses, transfers, debts) -> Decimal:
    """Sum of the three source balances."""
    return sum(balances_by_source(income, expenses, transfers, debts).values(), ZERO)


def balances_by_account(
    accounts: Iterable[Account], income, expenses, transfers, debts
) -> dict[str, Decimal]:
    """Balance per account id; inactive accounts are included."""
    income, expenses, transfers, debts = tuple(income), tuple(expenses), tuple(transfers), tuple(debts)
    return {
        account.id: account_balance(account.id, income, expenses, transfers, debts)
        for account in accounts
    }


def balances_by_account_type(
    accounts: Iterable[Account], income, expenses, transfers, debts
) -> dict[AccountType, Decimal]:
    """Sum of account balances per account type."""
    accounts = tuple(accounts)
    per_account = balances_by_account(accounts, income, expenses, transfers, debts)
    totals = {account_type: ZERO for account_type in AccountType}
    for account in accounts:
        totals[account.type] += per_account[account.id]
    return totals


def pending_debt_totals(debts: Iterable[DebtEntry]) -> PendingDebtTotals:
    """Open debts per direction and the amounts still outstanding."""
    pending = [debt for debt in debts if debt.status == DebtStatus.PENDING]
    lent = tuple(debt for debt in pending if debt.type == DebtType.LENT)
    borrowed = tuple(debt for debt in pending if debt.type == DebtType.BORROWED)
    return PendingDebtTotals(
        lent=lent,
        borrowed=borrowed,
        total_lent=sum((debt.remaining_amount for debt in lent), ZERO),
        total_borrowed=sum((debt.remaining_amount for debt in borrowed), ZERO),
    )
