"""In-memory ledger state backed by a key-value Database.

The store owns the account collection and the four transaction collections.
Memory is the source of truth for a session: every mutation is applied in
memory first and then persisted. A failed write is logged and the affected
keys are retried on the next successful write.
"""

import json
import logging
from typing import Any, Iterable, Optional, Sequence

from pennywise.database.base import Database
from pennywise.database.mappers import (
    account_from_record,
    account_to_record,
    entry_from_record,
    entry_to_record,
)
from pennywise.domain.entities import (
    Account,
    DebtEntry,
    Entry,
    EntryKind,
    ExpenseEntry,
    IncomeEntry,
    StoreMutation,
    TransferEntry,
)
from pennywise.domain.errors import StorageError

logger = logging.getLogger(__name__)

ACCOUNTS_KEY = "pennywise-accounts"
INCOME_KEY = "pennywise-income"
EXPENSES_KEY = "pennywise-expenses"
TRANSFERS_KEY = "pennywise-transfers"
DEBTS_KEY = "pennywise-debts"

STORAGE_KEYS = {
    EntryKind.INCOME: INCOME_KEY,
    EntryKind.EXPENSE: EXPENSES_KEY,
    EntryKind.TRANSFER: TRANSFERS_KEY,
    EntryKind.DEBT: DEBTS_KEY,
}


def sort_by_date_desc(entries: Iterable[Entry]) -> list[Entry]:
    """Newest first; entries with equal dates keep their relative order."""
    return sorted(entries, key=lambda entry: entry.date, reverse=True)


class LedgerStore:
    """Explicit holder of the ledger collections, injected into services."""

    def __init__(self, db: Database):
        """Initialize an empty store.

        Args:
            db: Database instance used for persistence
        """
        self.db = db
        self._accounts: list[Account] = []
        self._entries: dict[EntryKind, list[Entry]] = {kind: [] for kind in EntryKind}
        self._dirty: set[str] = set()
        self.accounts_persisted = True

    # Read access
    @property
    def accounts(self) -> tuple[Account, ...]:
        return tuple(self._accounts)

    @property
    def income(self) -> tuple[IncomeEntry, ...]:
        return tuple(self._entries[EntryKind.INCOME])

    @property
    def expenses(self) -> tuple[ExpenseEntry, ...]:
        return tuple(self._entries[EntryKind.EXPENSE])

    @property
    def transfers(self) -> tuple[TransferEntry, ...]:
        return tuple(self._entries[EntryKind.TRANSFER])

    @property
    def debts(self) -> tuple[DebtEntry, ...]:
        return tuple(self._entries[EntryKind.DEBT])

    def entries(self, kind: EntryKind) -> tuple[Entry, ...]:
        return tuple(self._entries[EntryKind(kind)])

    def collections(self) -> tuple[tuple, tuple, tuple, tuple]:
        """Snapshot of (income, expenses, transfers, debts) for the balance engine."""
        return (self.income, self.expenses, self.transfers, self.debts)

    def find_entry(self, kind: EntryKind, entry_id: str) -> Optional[Entry]:
        for entry in self._entries[EntryKind(kind)]:
            if entry.id == entry_id:
                return entry
        return None

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._dirty)

    # Raw access used by the migration engine
    def has_key(self, key: str) -> bool:
        return self.db.has_key(key)

    def read_raw(self, key: str) -> Optional[list[Any]]:
        """Read a stored collection as parsed JSON.

        Returns:
            The stored list, or None if the key has never been written

        Raises:
            ValueError: If the stored text is not a JSON array
        """
        text = self.db.get_value(key)
        if text is None:
            return None
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError(f"Stored collection '{key}' is not a list")
        return data

    def write_raw(self, collections: dict[str, list[Any]]) -> None:
        """Write raw collections in one commit. Errors propagate to the caller."""
        self.db.set_values({key: json.dumps(value) for key, value in collections.items()})

    # Loading
    def load(self) -> None:
        """Load accounts and all transaction collections."""
        self.load_accounts()
        self.load_entries()

    def load_accounts(self) -> None:
        """Load the account collection.

        Raises:
            ValueError, KeyError, TypeError: If the stored accounts are malformed
        """
        records = self.read_raw(ACCOUNTS_KEY) or []
        self._accounts = [account_from_record(record) for record in records]
        self.accounts_persisted = True

    def load_entries(self) -> None:
        """Load the four transaction collections, skipping unreadable records."""
        for kind, key in STORAGE_KEYS.items():
            try:
                records = self.read_raw(key) or []
            except (ValueError, StorageError):
                logger.exception(
                    "Could not read collection %s; starting empty. "
                    "Its stored value will be overwritten on the next save",
                    key,
                )
                records = []
            entries = []
            for index, record in enumerate(records):
                try:
                    entries.append(entry_from_record(kind, record))
                except (KeyError, TypeError, ValueError) as e:
                    logger.warning(
                        "Skipping invalid %s record at index %s: %s. "
                        "It will be dropped from %s on the next save",
                        kind.value,
                        index,
                        e,
                        key,
                    )
            self._entries[kind] = sort_by_date_desc(entries)

    # Account mutations
    def set_accounts(self, accounts: Sequence[Account], persist: bool = True) -> bool:
        """Replace the full account set.

        Once a set has been installed with ``persist=False``, later changes
        stay in memory too until accounts are loaded from storage again, so
        the fallback never takes the place of a real migration.

        Args:
            accounts: New account set
            persist: When False the set lives in memory only (migration fallback)
        """
        self._accounts = list(accounts)
        if not persist:
            self.accounts_persisted = False
            return True
        if not self.accounts_persisted:
            logger.warning("Account change kept in memory only; accounts have not been migrated yet")
            return True
        return self._persist({ACCOUNTS_KEY})

    # Entry mutations
    def add_entry(self, kind: EntryKind, entry: Entry) -> bool:
        kind = EntryKind(kind)
        self._entries[kind] = sort_by_date_desc([*self._entries[kind], entry])
        return self._persist({STORAGE_KEYS[kind]})

    def replace_entry(self, kind: EntryKind, entry: Entry) -> bool:
        """Swap the entry with the same id. Returns False if no such entry."""
        kind = EntryKind(kind)
        if not self._replace_in_memory(kind, entry):
            return False
        self._persist({STORAGE_KEYS[kind]})
        return True

    def remove_entry(self, kind: EntryKind, entry_id: str) -> bool:
        """Delete an entry by id. Returns False if no such entry."""
        kind = EntryKind(kind)
        remaining = [entry for entry in self._entries[kind] if entry.id != entry_id]
        if len(remaining) == len(self._entries[kind]):
            return False
        self._entries[kind] = remaining
        self._persist({STORAGE_KEYS[kind]})
        return True

    def apply(self, mutations: Sequence[StoreMutation]) -> bool:
        """Apply mutations in order, then persist every touched key in one commit."""
        touched = set()
        for mutation in mutations:
            kind = EntryKind(mutation.kind)
            if mutation.action == "add":
                self._entries[kind] = sort_by_date_desc([*self._entries[kind], mutation.entry])
            elif mutation.action == "replace":
                if not self._replace_in_memory(kind, mutation.entry):
                    raise ValueError(f"No {kind.value} entry {mutation.entry.id} to replace")
            else:
                raise ValueError(f"Unknown mutation action '{mutation.action}'")
            touched.add(STORAGE_KEYS[kind])
        return self._persist(touched)

    def replace_collections(
        self,
        income: Sequence[IncomeEntry],
        expenses: Sequence[ExpenseEntry],
        transfers: Sequence[TransferEntry],
        debts: Sequence[DebtEntry],
    ) -> bool:
        """Swap all four transaction collections at once."""
        self._entries = {
            EntryKind.INCOME: sort_by_date_desc(income),
            EntryKind.EXPENSE: sort_by_date_desc(expenses),
            EntryKind.TRANSFER: sort_by_date_desc(transfers),
            EntryKind.DEBT: sort_by_date_desc(debts),
        }
        return self._persist(set(STORAGE_KEYS.values()))

    def flush(self) -> bool:
        """Retry persisting any collections whose last write failed."""
        return self._persist(set())

    def _replace_in_memory(self, kind: EntryKind, entry: Entry) -> bool:
        entries = self._entries[kind]
        for index, existing in enumerate(entries):
            if existing.id == entry.id:
                updated = list(entries)
                updated[index] = entry
                self._entries[kind] = sort_by_date_desc(updated)
                return True
        return False

    def _serialize(self, key: str) -> str:
        if key == ACCOUNTS_KEY:
            return json.dumps([account_to_record(account) for account in self._accounts])
        for kind, storage_key in STORAGE_KEYS.items():
            if storage_key == key:
                return json.dumps([entry_to_record(kind, entry) for entry in self._entries[kind]])
        raise KeyError(key)

    def _persist(self, keys: set[str]) -> bool:
        keys = keys | self._dirty
        if not self.accounts_persisted:
            keys.discard(ACCOUNTS_KEY)
        if not keys:
            return True
        try:
            self.db.set_values({key: self._serialize(key) for key in sorted(keys)})
        except StorageError as e:
            self._dirty |= keys
            logger.warning(
                "Failed to persist %s; changes are kept in memory until the next successful write: %s",
                ", ".join(sorted(keys)),
                e,
            )
            return False
        self._dirty.clear()
        return True
