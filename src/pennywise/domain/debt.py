"""Debt lifecycle domain service.

States::

    pending --settle--------------------------------> settled
    pending --partial settle (cumulative < amount)--> pending
    pending --partial settle (cumulative >= amount)-> settled

``settled`` is terminal. Every settlement action produces exactly two store
mutations, applied in this order: the updated debt, then one synthetic
income (money lent coming back) or expense (money borrowed paid back).
If a write is interrupted, that order is the recovery order.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from pennywise.database.store import LedgerStore
from pennywise.domain.entities import (
    DebtEntry,
    DebtStatus,
    DebtType,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    StoreMutation,
)
from pennywise.domain.errors import ValidationError, settlement_exceeds_remaining
from pennywise.utils.amount_parser import to_decimal
from pennywise.utils.date_parser import utc_now
from pennywise.utils.ids import generate_id

SETTLEMENT_SUBCATEGORY = "Debt Settlement"
REPAYMENT_CATEGORY = "Debt Repayment"
REPAYMENT_SUBCATEGORY = "Loan Repayment"


def _money(amount: Decimal) -> str:
    # Whole amounts print without decimals: ₹200, ₹12.50
    if amount == amount.to_integral_value():
        return f"₹{amount.quantize(Decimal('1'))}"
    return f"₹{amount}"


def _synthetic_entry(
    debt: DebtEntry, amount: Decimal, descriptions: list[str], now: datetime, new_id: str
) -> StoreMutation:
    if debt.type == DebtType.LENT:
        entry = IncomeEntry(
            id=new_id,
            amount=amount,
            source=debt.source,
            account_id=debt.account_id,
            subcategory=SETTLEMENT_SUBCATEGORY,
            descriptions=tuple(descriptions),
            date=now,
        )
        return StoreMutation(kind=EntryKind.INCOME, action="add", entry=entry)
    entry = ExpenseEntry(
        id=new_id,
        amount=amount,
        category=REPAYMENT_CATEGORY,
        subcategory=REPAYMENT_SUBCATEGORY,
        source=debt.source,
        account_id=debt.account_id,
        descriptions=tuple(descriptions),
        date=now,
    )
    return StoreMutation(kind=EntryKind.EXPENSE, action="add", entry=entry)


def plan_settlement(debt: DebtEntry, now: datetime, new_id: str) -> tuple[StoreMutation, StoreMutation]:
    """Mutations for settling a debt in full.

    The synthetic record carries the full original amount and absorbs the
    debt's own descriptions after a line naming the counterparty.
    """
    settled = replace(
        debt,
        status=DebtStatus.SETTLED,
        settled_date=now,
        settled_amount=debt.amount,
    )
    if debt.type == DebtType.LENT:
        headline = f"Settlement of debt from {debt.person_name}"
    else:
        headline = f"Repayment of debt to {debt.person_name}"
    return (
        StoreMutation(kind=EntryKind.DEBT, action="replace", entry=settled),
        _synthetic_entry(debt, debt.amount, [headline, *debt.descriptions], now, new_id),
    )


def plan_partial_settlement(
    debt: DebtEntry,
    amount: Decimal,
    now: datetime,
    new_id: str,
    note: Optional[str] = None,
) -> tuple[StoreMutation, StoreMutation]:
    """Mutations for settling part of a debt.

    ``settled_amount`` grows by ``amount``; the debt becomes settled once the
    cumulative amount reaches the original. The synthetic record carries only
    ``amount``. Amounts above the remaining balance are not clamped.

    Raises:
        ValidationError: If amount is not positive
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValidationError("Amount must be positive.")

    new_settled = debt.settled_amount + amount
    fully_settled = new_settled >= debt.amount
    updated = replace(
        debt,
        settled_amount=new_settled,
        status=DebtStatus.SETTLED if fully_settled else DebtStatus.PENDING,
        settled_date=now if fully_settled else debt.settled_date,
    )

    if debt.type == DebtType.LENT:
        headline = f"Partial settlement ({_money(amount)}) from {debt.person_name}"
    else:
        headline = f"Partial repayment ({_money(amount)}) to {debt.person_name}"
    descriptions = [headline, f"Remaining: {_money(debt.amount - new_settled)}"]
    if note and note.strip():
        descriptions.append(note.strip())

    return (
        StoreMutation(kind=EntryKind.DEBT, action="replace", entry=updated),
        _synthetic_entry(debt, amount, descriptions, now, new_id),
    )


def validate_partial_amount(debt: DebtEntry, amount: Decimal) -> Decimal:
    """Caller-side check that a partial settlement fits the open balance.

    Raises:
        ValidationError: If amount is not positive or exceeds the remaining amount
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValidationError("Amount must be positive.")
    if amount > debt.remaining_amount:
        raise ValidationError(settlement_exceeds_remaining(amount, debt.remaining_amount))
    return amount


class DebtService:
    """Service for settling debts."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        """Initialize debt service.

        Args:
            store: Ledger store holding the debt and income/expense collections
            clock: Source of the settlement timestamps
            id_factory: Generator for synthetic entry ids
        """
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def get(self, debt_id: str) -> Optional[DebtEntry]:
        return self.store.find_entry(EntryKind.DEBT, debt_id)

    def settle(self, debt_id: str) -> Optional[DebtEntry]:
        """Settle a debt in full.

        Returns:
            The settled debt, or None if no debt has that id (nothing changes)
        """
        debt = self.get(debt_id)
        if debt is None:
            return None
        mutations = plan_settlement(debt, self.clock(), self.id_factory())
        self.store.apply(mutations)
        return mutations[0].entry

    def partial_settle(
        self, debt_id: str, amount: Decimal, note: Optional[str] = None
    ) -> Optional[DebtEntry]:
        """Record a partial settlement.

        Returns:
            The updated debt, or None if no debt has that id (nothing changes)

        Raises:
            ValidationError: If amount is not positive
        """
        debt = self.get(debt_id)
        if debt is None:
            return None
        mutations = plan_partial_settlement(debt, amount, self.clock(), self.id_factory(), note)
        self.store.apply(mutations)
        return mutations[0].entry

    def pending(self, type: Optional[DebtType | str] = None) -> list[DebtEntry]:
        """Pending debts, optionally only lent or only borrowed."""
        debt_type = DebtType(type) if type is not None else None
        return [
            debt
            for debt in self.store.debts
            if debt.status == DebtStatus.PENDING and (debt_type is None or debt.type == debt_type)
        ]
