"""Tests for database mappers."""

import pytest
from datetime import datetime, UTC
from decimal import Decimal

from pennywise.database.mappers import (
    account_from_record,
    account_to_record,
    debt_from_record,
    debt_to_record,
    entry_from_record,
    expense_from_record,
    income_from_record,
    income_to_record,
    transfer_to_record,
)
from pennywise.domain.entities import (
    Account,
    AccountType,
    DebtStatus,
    DebtType,
    EntryKind,
    TransactionSource,
)
from conftest import make_debt, make_income, make_transfer


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_record(self):
        created = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)
        account = Account(
            id="acc-1",
            name="Cash Wallet",
            type=AccountType.WALLET,
            created_at=created,
            updated_at=created,
            is_default=True,
        )

        record = account_to_record(account)

        assert record == {
            "id": "acc-1",
            "name": "Cash Wallet",
            "type": "wallet",
            "isDefault": True,
            "isActive": True,
            "createdAt": "2024-01-15T10:30:00.000Z",
            "updatedAt": "2024-01-15T10:30:00.000Z",
        }

    def test_missing_is_active_means_active(self):
        """Records written before soft delete existed load as active."""
        account = account_from_record(
            {"id": "a", "name": "Bank", "type": "bank", "createdAt": "2024-01-15T10:30:00.000Z"}
        )

        assert account.is_active
        assert not account.is_default
        assert account.updated_at == account.created_at

    def test_explicit_inactive(self):
        account = account_from_record(
            {
                "id": "a",
                "name": "Old",
                "type": "ncmc",
                "isActive": False,
                "createdAt": "2024-01-15T10:30:00.000Z",
            }
        )
        assert not account.is_active


class TestIncomeMapper:
    """Tests for income mapper."""

    def test_income_to_record_omits_unset_optionals(self):
        record = income_to_record(make_income(amount="100"))

        assert record["amount"] == 100
        assert isinstance(record["amount"], int)
        assert record["source"] == "bank"
        assert record["date"] == "2024-01-01T00:00:00.000Z"
        assert "accountId" not in record
        assert "description" not in record

    def test_fractional_amount_is_float(self):
        record = income_to_record(make_income(amount="12.5"))
        assert record["amount"] == 12.5

    def test_income_from_record_defaults(self):
        entry = income_from_record(
            {"id": "i1", "amount": 0.1, "source": "wallet", "date": "2024-01-15"}
        )

        assert entry.amount == Decimal("0.1")
        assert entry.subcategory == ""
        assert entry.descriptions == ()
        assert entry.account_id is None
        assert entry.date == datetime(2024, 1, 15, tzinfo=UTC)

    def test_legacy_description_is_kept(self):
        entry = income_from_record(
            {
                "id": "i1",
                "amount": 5,
                "source": "bank",
                "date": "2024-01-15T10:30:00.000Z",
                "description": "old note",
            }
        )
        assert entry.description == "old note"
        assert income_to_record(entry)["description"] == "old note"


class TestExpenseMapper:
    def test_expense_requires_category(self):
        with pytest.raises(KeyError):
            expense_from_record(
                {"id": "e1", "amount": 5, "source": "bank", "date": "2024-01-15T10:30:00.000Z"}
            )


class TestTransferMapper:
    def test_transfer_to_record(self):
        record = transfer_to_record(make_transfer(from_account_id="acc-2", to_account_id="acc-1"))

        assert record["fromSource"] == "bank"
        assert record["toSource"] == "wallet"
        assert record["fromAccountId"] == "acc-2"
        assert record["toAccountId"] == "acc-1"


class TestDebtMapper:
    def test_debt_round_trip_keeps_settlement(self):
        settled_at = datetime(2024, 2, 1, tzinfo=UTC)
        debt = make_debt(
            status=DebtStatus.SETTLED,
            settled_amount=Decimal("500"),
            settled_date=settled_at,
            account_id="acc-1",
        )

        restored = debt_from_record(debt_to_record(debt))

        assert restored == debt

    def test_missing_settled_amount_defaults_to_zero(self):
        debt = debt_from_record(
            {
                "id": "d1",
                "amount": 500,
                "type": "borrowed",
                "personName": "Asha",
                "source": "bank",
                "date": "2024-01-15T10:30:00.000Z",
            }
        )

        assert debt.type == DebtType.BORROWED
        assert debt.status == DebtStatus.PENDING
        assert debt.settled_amount == Decimal("0")
        assert debt.due_date is None


def test_entry_from_record_rejects_non_objects():
    with pytest.raises(TypeError):
        entry_from_record(EntryKind.INCOME, ["not", "a", "record"])


def test_entry_from_record_rejects_unknown_source():
    with pytest.raises(ValueError):
        entry_from_record(
            EntryKind.INCOME,
            {"id": "i1", "amount": 5, "source": "piggybank", "date": "2024-01-15"},
        )
