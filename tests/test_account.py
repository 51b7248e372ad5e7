"""Tests for the account service."""

import pytest

from pennywise.domain.account import AccountService, promote_default
from pennywise.database.store import LedgerStore
from pennywise.domain.entities import Account, AccountType, EntryKind
from pennywise.domain.errors import ValidationError
from conftest import make_income


def defaults_per_type(service):
    counts = {}
    for acc in service.list_accounts(include_inactive=True):
        if acc.is_default:
            counts[acc.type] = counts.get(acc.type, 0) + 1
    return counts


def test_add_account(account_service, clock):
    acc = account_service.add("HDFC Savings", "bank")

    assert acc.name == "HDFC Savings"
    assert acc.type == AccountType.BANK
    assert acc.is_active
    assert not acc.is_default
    assert acc.created_at == clock.now
    assert account_service.get(acc.id) == acc


def test_add_strips_name(account_service):
    assert account_service.add("  Spare  ", "wallet").name == "Spare"


@pytest.mark.parametrize("name", ["", "   ", "x" * 51])
def test_add_rejects_invalid_names(account_service, name):
    with pytest.raises(ValidationError):
        account_service.add(name, "bank")


def test_add_rejects_invalid_type(account_service):
    with pytest.raises(ValidationError, match="Invalid account type"):
        account_service.add("Card", "credit")


def test_new_default_demotes_previous(account_service, clock):
    """At most one default account per type."""
    old_default = account_service.get_default("bank")
    clock.advance(minutes=5)

    new = account_service.add("HDFC Savings", "bank", is_default=True)

    assert account_service.get_default("bank") == new
    demoted = account_service.get(old_default.id)
    assert not demoted.is_default
    assert demoted.updated_at == clock.now
    # Other types are untouched
    assert account_service.get_default("wallet").is_default


def test_default_uniqueness_over_many_calls(account_service):
    created = []
    for i, account_type in enumerate(["bank", "wallet", "bank", "ncmc", "bank", "wallet"]):
        created.append(account_service.add(f"Account {i}", account_type, is_default=True))
        assert all(count == 1 for count in defaults_per_type(account_service).values())

    account_service.update(created[0].id, is_default=True)
    assert all(count == 1 for count in defaults_per_type(account_service).values())
    assert account_service.get_default("bank").id == created[0].id


def test_update_account(account_service, clock):
    acc = account_service.add("Spare", "wallet")
    clock.advance(hours=1)

    updated = account_service.update(acc.id, name="Spare Cash")

    assert updated.name == "Spare Cash"
    assert updated.created_at == acc.created_at
    assert updated.updated_at == clock.now


def test_update_unknown_account_is_noop(account_service):
    before = account_service.list_accounts(include_inactive=True)
    assert account_service.update("missing", name="X") is None
    assert account_service.list_accounts(include_inactive=True) == before


def test_remove_is_soft_delete(account_service):
    bank = account_service.get_default("bank")

    assert account_service.remove(bank.id) is True

    removed = account_service.get(bank.id)
    assert removed is not None
    assert not removed.is_active
    assert not removed.is_default
    assert bank.id not in [a.id for a in account_service.list_accounts()]
    assert bank.id in [a.id for a in account_service.list_accounts(include_inactive=True)]
    assert account_service.get_default("bank") is None


def test_remove_unknown_account(account_service):
    assert account_service.remove("missing") is False


def test_list_by_type(account_service):
    account_service.add("Second Wallet", "wallet")
    wallets = account_service.list_by_type(AccountType.WALLET)
    assert sorted(a.name for a in wallets) == ["Cash Wallet", "Second Wallet"]


def test_accounts_persist(account_service, temp_db):
    acc = account_service.add("HDFC Savings", "bank")

    other = AccountService(LedgerStore(temp_db))
    other.store.load()
    assert other.get(acc.id) == acc


def test_transaction_count(account_service, migrated_store):
    bank = account_service.get_default("bank")
    migrated_store.add_entry(EntryKind.INCOME, make_income(account_id=bank.id))
    migrated_store.add_entry(EntryKind.INCOME, make_income(id="inc-2"))

    assert account_service.transaction_count(bank.id) == 1


def test_promote_default_appends_new_accounts(account_service, clock):
    accounts = list(account_service.store.accounts)
    new = Account(
        id="new",
        name="New Card",
        type=AccountType.NCMC,
        created_at=clock.now,
        updated_at=clock.now,
        is_default=True,
    )

    result = promote_default(accounts, new, clock.now)

    assert result[-1] == new
    assert [a.id for a in result if a.type == AccountType.NCMC and a.is_default] == ["new"]
