"""Account migration domain service.

Bridges the legacy three-bucket model, where transactions only carry a
coarse ``source`` (wallet/bank/NCMC), to per-account ids. The migration runs
once per store: its only guard is the absence of a persisted account
collection.

Steps:
    1. Detect necessity (no stored account collection).
    2. Seed one default, active account per account type.
    3. Build a source -> account id map from the seeded accounts.
    4. Backfill ``accountId`` (``fromAccountId``/``toAccountId`` for transfers)
       on every stored record that lacks it.
    5. Persist the four collections and the accounts in one commit.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from pennywise.database.mappers import account_to_record
from pennywise.database.store import ACCOUNTS_KEY, STORAGE_KEYS, LedgerStore
from pennywise.domain.entities import (
    Account,
    AccountType,
    EntryKind,
    TransactionSource,
    account_type_for_source,
)
from pennywise.domain.errors import MigrationFailure
from pennywise.utils.date_parser import utc_now
from pennywise.utils.ids import generate_id

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNTS = (
    ("Cash Wallet", AccountType.WALLET),
    ("Bank Account", AccountType.BANK),
    ("NCMC Card", AccountType.NCMC),
)


def build_source_map(accounts: list[Account]) -> dict[TransactionSource, str]:
    """Map each legacy source to the active default account of its type."""
    source_map = {}
    for source in TransactionSource:
        account_type = account_type_for_source(source)
        for account in accounts:
            if account.type == account_type and account.is_default and account.is_active:
                source_map[source] = account.id
                break
    return source_map


def _account_for(source: Any, source_map: dict[TransactionSource, str]) -> Optional[str]:
    try:
        return source_map.get(TransactionSource(source))
    except ValueError:
        return None


def backfill_record(
    kind: EntryKind, record: Any, source_map: dict[TransactionSource, str]
) -> Any:
    """Return a copy of a stored record with its account ids filled in.

    Ids already present are kept. Records that are not objects, or whose
    source is unknown, are returned unchanged.
    """
    if not isinstance(record, dict):
        return record
    if kind == EntryKind.TRANSFER:
        fields = (("fromAccountId", "fromSource"), ("toAccountId", "toSource"))
    else:
        fields = (("accountId", "source"),)

    updates = {}
    for id_field, source_field in fields:
        if record.get(id_field):
            continue
        account_id = _account_for(record.get(source_field), source_map)
        if account_id is not None:
            updates[id_field] = account_id
    if not updates:
        return record
    return {**record, **updates}


class MigrationService:
    """Service that seeds default accounts and backfills account ids."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        """Initialize migration service.

        Args:
            store: Ledger store to migrate
            clock: Source of the current time
            id_factory: Generator for new account ids
        """
        self.store = store
        self.clock = clock
        self.id_factory = id_factory
        self.last_failure: Optional[MigrationFailure] = None

    def is_migration_needed(self) -> bool:
        """Migration is needed iff no account collection has been persisted."""
        return not self.store.has_key(ACCOUNTS_KEY)

    def seed_default_accounts(self, now: Optional[datetime] = None) -> list[Account]:
        """Build the three default accounts (not persisted)."""
        now = now or self.clock()
        return [
            Account(
                id=self.id_factory(),
                name=name,
                type=account_type,
                created_at=now,
                updated_at=now,
                is_default=True,
                is_active=True,
            )
            for name, account_type in DEFAULT_ACCOUNTS
        ]

    def migrate(self) -> bool:
        """Run the migration if needed.

        Returns:
            True if the migration ran, False if accounts already existed

        Raises:
            StorageError, ValueError: If stored data cannot be read or written
        """
        if not self.is_migration_needed():
            return False

        logger.info("Performing account migration")
        accounts = self.seed_default_accounts()
        source_map = build_source_map(accounts)

        collections: dict[str, list[Any]] = {}
        migrated_count = 0
        for kind, key in STORAGE_KEYS.items():
            records = self.store.read_raw(key) or []
            migrated = [backfill_record(kind, record, source_map) for record in records]
            migrated_count += sum(1 for old, new in zip(records, migrated) if old is not new)
            collections[key] = migrated
        collections[ACCOUNTS_KEY] = [account_to_record(account) for account in accounts]

        self.store.write_raw(collections)
        logger.info("Account migration completed; %s records mapped to accounts", migrated_count)
        return True

    def load_accounts(self) -> list[Account]:
        """Migrate if needed, then load the store.

        Migration or account loading failures never propagate: the error is
        logged, and a freshly seeded default account set is used in memory
        only, so the migration is retried on the next load.

        Returns:
            The accounts now held by the store
        """
        self.last_failure = None
        try:
            self.migrate()
            self.store.load_accounts()
        except Exception as e:
            logger.exception("Account migration failed; using in-memory default accounts")
            self.last_failure = MigrationFailure(f"Account migration failed: {e}")
            self.store.set_accounts(self.seed_default_accounts(), persist=False)
        self.store.load_entries()
        return list(self.store.accounts)
