"""Transaction domain service."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from pennywise.database.store import LedgerStore
from pennywise.domain.account import AccountService
from pennywise.domain.entities import (
    DebtEntry,
    DebtStatus,
    DebtType,
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    TransactionSource,
    TransferEntry,
    account_type_for_source,
    source_for_account_type,
)
from pennywise.domain.errors import ValidationError, account_not_found
from pennywise.utils.amount_parser import to_decimal
from pennywise.utils.date_parser import start_of_day, utc_now
from pennywise.utils.ids import generate_id


def to_timestamp(value: date | datetime) -> datetime:
    """Accept a calendar date or a datetime for an entry date."""
    if isinstance(value, datetime):
        return value
    return start_of_day(value)


def clean_descriptions(descriptions: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Strip descriptions and drop empty ones."""
    if descriptions is None:
        return ()
    if isinstance(descriptions, str):
        descriptions = [descriptions]
    return tuple(text.strip() for text in descriptions if text and text.strip())


def validate_entry(entry: Entry) -> None:
    """Check entry-time rules for a new or updated entry.

    Raises:
        ValidationError: If the entry breaks one of the rules
    """
    if entry.amount <= 0:
        raise ValidationError("Amount must be positive.")
    if isinstance(entry, ExpenseEntry) and not entry.category.strip():
        raise ValidationError("Category is required.")
    if isinstance(entry, TransferEntry):
        if entry.from_source == entry.to_source:
            raise ValidationError("From and To sources cannot be the same.")
        if (
            entry.from_account_id is not None
            and entry.from_account_id == entry.to_account_id
        ):
            raise ValidationError("From and To accounts cannot be the same.")
    if isinstance(entry, DebtEntry):
        if not entry.person_name.strip():
            raise ValidationError("Person name is required.")
        if entry.settled_amount < 0:
            raise ValidationError("Settled amount cannot be negative.")


def _coerce_changes(kind: EntryKind, changes: dict) -> None:
    """Convert raw update values to the field types of the entry, in place."""
    for field_name in ("amount", "settled_amount"):
        if field_name in changes:
            amount = to_decimal(changes[field_name])
            if not amount.is_finite():
                raise ValueError(f"{field_name} must be a finite number")
            changes[field_name] = amount
    if "descriptions" in changes:
        changes["descriptions"] = clean_descriptions(changes["descriptions"])
    for field_name in ("date", "due_date", "settled_date"):
        if field_name in changes:
            changes[field_name] = to_timestamp(changes[field_name])
    for field_name in ("category", "subcategory", "person_name"):
        if field_name in changes:
            changes[field_name] = changes[field_name].strip()
    if kind == EntryKind.DEBT:
        if "type" in changes:
            changes["type"] = DebtType(changes["type"])
        if "status" in changes:
            changes["status"] = DebtStatus(changes["status"])


class TransactionService:
    """Service for managing income, expense, transfer and debt entries."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        """Initialize transaction service.

        Args:
            store: Ledger store holding the collections
            clock: Source of the current time
            id_factory: Generator for new entry ids
        """
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.accounts = AccountService(store, clock=clock, id_factory=id_factory)

    def resolve_booking(
        self,
        source: Optional[TransactionSource | str] = None,
        account_id: Optional[str] = None,
    ) -> tuple[TransactionSource, Optional[str]]:
        """Resolve the (source, account id) pair an entry is booked against.

        An account determines the source through its type. A bare source is
        booked against the default account of that type, when one exists.

        Raises:
            ValidationError: If neither is given, the account is unknown or
                inactive, or the source does not match the account type
        """
        if account_id is not None:
            account = self.accounts.get(account_id)
            if account is None:
                raise ValidationError(account_not_found(account_id))
            if not account.is_active:
                raise ValidationError(f"Account '{account.name}' is inactive")
            account_source = source_for_account_type(account.type)
            if source is not None and TransactionSource(source) != account_source:
                raise ValidationError(
                    f"Source '{TransactionSource(source).value}' does not match account "
                    f"'{account.name}' of type '{account.type.value}'"
                )
            return account_source, account.id

        if source is None:
            raise ValidationError("Either an account or a source is required")
        try:
            source = TransactionSource(source)
        except ValueError:
            raise ValidationError(f"Invalid source '{source}'. Must be one of: wallet, bank, NCMC")
        default = self.accounts.get_default(account_type_for_source(source))
        return source, default.id if default is not None else None

    # Create
    def add_income(
        self,
        amount: Decimal,
        date: Optional[date | datetime] = None,
        source: Optional[TransactionSource | str] = None,
        account_id: Optional[str] = None,
        subcategory: str = "",
        descriptions: Optional[Iterable[str]] = None,
    ) -> IncomeEntry:
        """Record income.

        Raises:
            ValidationError: If the amount or booking is invalid
        """
        source, account_id = self.resolve_booking(source, account_id)
        entry = IncomeEntry(
            id=self.id_factory(),
            amount=to_decimal(amount),
            source=source,
            account_id=account_id,
            subcategory=(subcategory or "").strip(),
            descriptions=clean_descriptions(descriptions),
            date=to_timestamp(date) if date is not None else self.clock(),
        )
        return self._add(EntryKind.INCOME, entry)

    def add_expense(
        self,
        amount: Decimal,
        category: str,
        date: Optional[date | datetime] = None,
        source: Optional[TransactionSource | str] = None,
        account_id: Optional[str] = None,
        subcategory: str = "",
        descriptions: Optional[Iterable[str]] = None,
    ) -> ExpenseEntry:
        """Record an expense.

        Raises:
            ValidationError: If the amount, category or booking is invalid
        """
        source, account_id = self.resolve_booking(source, account_id)
        entry = ExpenseEntry(
            id=self.id_factory(),
            amount=to_decimal(amount),
            category=(category or "").strip(),
            source=source,
            account_id=account_id,
            subcategory=(subcategory or "").strip(),
            descriptions=clean_descriptions(descriptions),
            date=to_timestamp(date) if date is not None else self.clock(),
        )
        return self._add(EntryKind.EXPENSE, entry)

    def add_transfer(
        self,
        amount: Decimal,
        date: Optional[date | datetime] = None,
        from_source: Optional[TransactionSource | str] = None,
        to_source: Optional[TransactionSource | str] = None,
        from_account_id: Optional[str] = None,
        to_account_id: Optional[str] = None,
        descriptions: Optional[Iterable[str]] = None,
    ) -> TransferEntry:
        """Record a transfer between two sources or accounts.

        Raises:
            ValidationError: If the amount is not positive or both sides are the same
        """
        from_source, from_account_id = self.resolve_booking(from_source, from_account_id)
        to_source, to_account_id = self.resolve_booking(to_source, to_account_id)
        entry = TransferEntry(
            id=self.id_factory(),
            amount=to_decimal(amount),
            from_source=from_source,
            to_source=to_source,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            descriptions=clean_descriptions(descriptions),
            date=to_timestamp(date) if date is not None else self.clock(),
        )
        return self._add(EntryKind.TRANSFER, entry)

    def add_debt(
        self,
        amount: Decimal,
        type: DebtType | str,
        person_name: str,
        date: Optional[date | datetime] = None,
        source: Optional[TransactionSource | str] = None,
        account_id: Optional[str] = None,
        due_date: Optional[date | datetime] = None,
        descriptions: Optional[Iterable[str]] = None,
    ) -> DebtEntry:
        """Record money lent or borrowed. New debts start pending.

        Raises:
            ValidationError: If the amount, type, person or booking is invalid
        """
        try:
            debt_type = DebtType(type)
        except ValueError:
            raise ValidationError(f"Invalid debt type '{type}'. Must be 'lent' or 'borrowed'")
        source, account_id = self.resolve_booking(source, account_id)
        entry = DebtEntry(
            id=self.id_factory(),
            amount=to_decimal(amount),
            type=debt_type,
            person_name=(person_name or "").strip(),
            source=source,
            account_id=account_id,
            date=to_timestamp(date) if date is not None else self.clock(),
            due_date=to_timestamp(due_date) if due_date is not None else None,
            status=DebtStatus.PENDING,
            settled_amount=Decimal("0"),
            descriptions=clean_descriptions(descriptions),
        )
        return self._add(EntryKind.DEBT, entry)

    def _add(self, kind: EntryKind, entry: Entry) -> Entry:
        validate_entry(entry)
        self.store.add_entry(kind, entry)
        return entry

    # Read
    def get(self, kind: EntryKind | str, entry_id: str) -> Optional[Entry]:
        """Get an entry by kind and id."""
        return self.store.find_entry(EntryKind(kind), entry_id)

    def find(self, entry_id: str) -> Optional[tuple[EntryKind, Entry]]:
        """Look an id up across all four collections."""
        for kind in EntryKind:
            entry = self.store.find_entry(kind, entry_id)
            if entry is not None:
                return kind, entry
        return None

    def list_entries(
        self,
        kind: EntryKind | str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        account_id: Optional[str] = None,
    ) -> list[Entry]:
        """List entries of one kind, newest first, with optional filters.

        Args:
            kind: Collection to list
            start: Optional inclusive lower bound on the entry date
            end: Optional inclusive upper bound on the entry date
            account_id: Optional account filter (either side of a transfer)
        """
        result = []
        for entry in self.store.entries(EntryKind(kind)):
            if start is not None and entry.date < start:
                continue
            if end is not None and entry.date > end:
                continue
            if account_id is not None:
                if isinstance(entry, TransferEntry):
                    if account_id not in (entry.from_account_id, entry.to_account_id):
                        continue
                elif entry.account_id != account_id:
                    continue
            result.append(entry)
        return result

    # Update
    def update_entry(self, kind: EntryKind | str, entry_id: str, **changes) -> Optional[Entry]:
        """Replace scalar fields of an entry; the id never changes.

        Changing ``source`` or ``account_id`` (``from_``/``to_`` variants for
        transfers) re-resolves the booking.
        Amounts, dates and debt enums are converted and the result is
        validated before the store is touched.

        Returns:
            The updated entry, or None if no entry has that id

        Raises:
            ValidationError: If the updated entry breaks an entry-time rule
        """
        kind = EntryKind(kind)
        entry = self.store.find_entry(kind, entry_id)
        if entry is None:
            return None

        changes = {key: value for key, value in changes.items() if value is not None}
        changes.pop("id", None)
        if kind == EntryKind.TRANSFER:
            for side in ("from", "to"):
                self._rebook(changes, f"{side}_source", f"{side}_account_id")
        else:
            self._rebook(changes, "source", "account_id")
        try:
            _coerce_changes(kind, changes)
        except (AttributeError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid value for {kind.value} entry: {e}")

        try:
            updated = replace(entry, **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid field for {kind.value} entry: {e}")
        validate_entry(updated)
        self.store.replace_entry(kind, updated)
        return updated

    def _rebook(self, changes: dict, source_field: str, account_field: str) -> None:
        if source_field not in changes and account_field not in changes:
            return
        source, account_id = self.resolve_booking(
            changes.get(source_field), changes.get(account_field)
        )
        changes[source_field] = source
        changes[account_field] = account_id

    # Delete
    def delete_entry(self, kind: EntryKind | str, entry_id: str) -> bool:
        """Delete an entry by id. Returns False if there was no such entry."""
        return self.store.remove_entry(EntryKind(kind), entry_id)

    # Bulk replace
    def replace_all(
        self,
        income: Sequence[IncomeEntry],
        expenses: Sequence[ExpenseEntry],
        transfers: Sequence[TransferEntry],
        debts: Sequence[DebtEntry],
    ) -> bool:
        """Replace all four collections wholesale."""
        return self.store.replace_collections(income, expenses, transfers, debts)
