"""Account domain service."""

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from pennywise.database.store import LedgerStore
from pennywise.domain.entities import Account, AccountType
from pennywise.domain.errors import ValidationError
from pennywise.utils.date_parser import utc_now
from pennywise.utils.ids import generate_id

MAX_ACCOUNT_NAME_LENGTH = 50


def validate_account_name(name: str) -> str:
    """Return the stripped account name.

    Raises:
        ValidationError: If the name is empty or longer than 50 characters
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Account name is required")
    if len(name) > MAX_ACCOUNT_NAME_LENGTH:
        raise ValidationError(f"Account name must be at most {MAX_ACCOUNT_NAME_LENGTH} characters")
    return name


def parse_account_type(value) -> AccountType:
    try:
        return AccountType(value)
    except ValueError:
        valid = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}'. Must be one of: {valid}")


def promote_default(accounts: list[Account], promoted: Account, now: datetime) -> list[Account]:
    """Return the account list with ``promoted`` as the only default of its type.

    Siblings of the same type that were default are demoted and their
    ``updated_at`` refreshed. ``promoted`` replaces any account with its id,
    or is appended when new.
    """
    result = []
    found = False
    for account in accounts:
        if account.id == promoted.id:
            result.append(promoted)
            found = True
        elif promoted.is_default and account.type == promoted.type and account.is_default:
            result.append(replace(account, is_default=False, updated_at=now))
        else:
            result.append(account)
    if not found:
        result.append(promoted)
    return result


class AccountService:
    """Service for managing accounts."""

    def __init__(
        self,
        store: LedgerStore,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = generate_id,
    ):
        """Initialize account service.

        Args:
            store: Ledger store holding the account collection
            clock: Source of the current time
            id_factory: Generator for new account ids
        """
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def add(
        self,
        name: str,
        type: AccountType | str,
        is_default: bool = False,
        is_active: bool = True,
    ) -> Account:
        """Create a new account.

        If the account is marked default, every other account of the same
        type loses its default flag in the same state change.

        Raises:
            ValidationError: If the name or type is invalid
        """
        now = self.clock()
        account = Account(
            id=self.id_factory(),
            name=validate_account_name(name),
            type=parse_account_type(type),
            created_at=now,
            updated_at=now,
            is_default=bool(is_default),
            is_active=bool(is_active),
        )
        self.store.set_accounts(promote_default(list(self.store.accounts), account, now))
        return account

    def update(
        self,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[AccountType | str] = None,
        is_default: Optional[bool] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[Account]:
        """Update an account in place.

        Returns:
            The updated account, or None if the account does not exist

        Raises:
            ValidationError: If a new name or type is invalid
        """
        account = self.get(account_id)
        if account is None:
            return None

        changes = {"updated_at": self.clock()}
        if name is not None:
            changes["name"] = validate_account_name(name)
        if type is not None:
            changes["type"] = parse_account_type(type)
        if is_default is not None:
            changes["is_default"] = bool(is_default)
        if is_active is not None:
            changes["is_active"] = bool(is_active)

        updated = replace(account, **changes)
        self.store.set_accounts(promote_default(list(self.store.accounts), updated, changes["updated_at"]))
        return updated

    def remove(self, account_id: str) -> bool:
        """Soft-delete an account.

        The record is kept (inactive, no longer default) so that transactions
        referencing it still resolve a balance.

        Returns:
            False if the account does not exist
        """
        account = self.get(account_id)
        if account is None:
            return False
        self.update(account_id, is_active=False, is_default=False)
        return True

    def get(self, account_id: str) -> Optional[Account]:
        """Get account by ID, active or not."""
        for account in self.store.accounts:
            if account.id == account_id:
                return account
        return None

    def list_accounts(self, include_inactive: bool = False) -> list[Account]:
        """List accounts, active ones only unless include_inactive is set."""
        return [acc for acc in self.store.accounts if include_inactive or acc.is_active]

    def list_by_type(self, type: AccountType | str) -> list[Account]:
        """List active accounts of one type."""
        account_type = AccountType(type)
        return [acc for acc in self.store.accounts if acc.type == account_type and acc.is_active]

    def get_default(self, type: AccountType | str) -> Optional[Account]:
        """Get the active default account of a type, if any."""
        for account in self.list_by_type(type):
            if account.is_default:
                return account
        return None

    def transaction_count(self, account_id: str) -> int:
        """Count transactions that reference the account."""
        count = 0
        for entry in (*self.store.income, *self.store.expenses, *self.store.debts):
            if entry.account_id == account_id:
                count += 1
        for transfer in self.store.transfers:
            if account_id in (transfer.from_account_id, transfer.to_account_id):
                count += 1
        return count
