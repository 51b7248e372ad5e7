"""Tests for the CLI commands."""

import json
from datetime import date
from decimal import Decimal

import pytest
from pennywise.cli.main import cli
from pennywise.database.store import LedgerStore


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def invoke(*args, input=None):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args], input=input)

    return invoke


def _created_id(result) -> str:
    """Id from the first output line, e.g. 'Recorded debt <id>'."""
    return result.output.splitlines()[0].split()[-1]


def test_help_does_not_open_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "Personal finance ledger" in result.output


class TestAccountCommands:
    def test_first_run_seeds_default_accounts(self, run):
        result = run("account", "list")

        assert result.exit_code == 0
        for name in ("Cash Wallet", "Bank Account", "NCMC Card"):
            assert name in result.output
        assert result.output.count("[default]") == 3

    def test_create_account(self, run):
        result = run("account", "create", "HDFC Savings", "--type", "bank")

        assert result.exit_code == 0
        assert "Created account 'HDFC Savings' (ID: " in result.output
        assert "HDFC Savings" in run("account", "list").output

    def test_create_default_account_demotes_previous(self, run):
        result = run("account", "create", "Metro Card", "--type", "ncmc", "--default")
        assert "'Metro Card' is now the default ncmc account" in result.output

        listing = run("account", "list").output
        card_line = next(line for line in listing.splitlines() if "NCMC Card" in line)
        metro_line = next(line for line in listing.splitlines() if "Metro Card" in line)
        assert "[default]" not in card_line
        assert "[default]" in metro_line

    def test_create_rejects_blank_name(self, run):
        result = run("account", "create", "   ", "--type", "wallet")

        assert result.exit_code == 1
        assert "Account name is required" in result.output

    def test_update_account(self, run):
        result = run("account", "update", "bank account", "--name", "HDFC Savings")

        assert result.exit_code == 0
        assert "Updated account 'HDFC Savings'" in result.output

    def test_update_unknown_account(self, run):
        result = run("account", "update", "Nope", "--name", "Other")

        assert result.exit_code == 1
        assert "Account 'Nope' not found" in result.output

    def test_delete_keeps_history(self, run):
        run("account", "create", "Old Wallet", "--type", "wallet")
        run("add", "income", "--amount", "40", "--account", "Old Wallet")

        result = run("account", "delete", "Old Wallet", "--yes")

        assert result.exit_code == 0
        assert "has 1 transaction;" in result.output
        assert "Deleted account 'Old Wallet'" in result.output
        assert "Old Wallet" not in run("account", "list").output
        full = run("account", "list", "--all").output
        assert "[inactive]" in full
        assert "₹40.00" in full

    def test_delete_cancelled(self, run):
        result = run("account", "delete", "Cash Wallet", input="n\n")

        assert "Deletion cancelled." in result.output
        assert "Cash Wallet" in run("account", "list").output


class TestAddCommands:
    def test_add_income(self, run):
        result = run(
            "add", "income", "--amount", "₹1,500", "--source", "bank",
            "--subcategory", "Salary", "--date", "2024-01-31",
        )

        assert result.exit_code == 0
        assert result.output.startswith("Recorded income ")
        assert "Amount: ₹1,500.00" in result.output
        assert "Date: 2024-01-31" in result.output
        assert "Account: Bank Account (bank)" in result.output

    def test_add_expense_requires_category(self, run):
        result = run("add", "expense", "--amount", "5", "--source", "wallet")
        assert result.exit_code == 2

    def test_add_expense_with_descriptions(self, run):
        result = run(
            "add", "expense", "--amount", "350", "--category", "Food",
            "--subcategory", "Groceries", "--source", "wallet",
            "--description", "market", "--description", "  ",
        )

        assert result.exit_code == 0
        assert "Category: Food > Groceries" in result.output
        assert "Description: market" in result.output

    def test_add_rejects_bad_amount(self, run):
        result = run("add", "income", "--amount", "lots", "--source", "bank")

        assert result.exit_code == 1
        assert "Invalid amount format" in result.output

    def test_add_rejects_non_positive_amount(self, run):
        result = run("add", "income", "--amount", "0", "--source", "bank")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_add_transfer(self, run):
        result = run("add", "transfer", "--amount", "1000", "--from-source", "bank", "--to-source", "wallet")

        assert result.exit_code == 0
        assert "From: Bank Account (bank) -> To: Cash Wallet (wallet)" in result.output

    def test_transfer_to_same_source_rejected(self, run):
        result = run("add", "transfer", "--amount", "10", "--from-source", "bank", "--to-source", "bank")

        assert result.exit_code == 1
        assert "cannot be the same" in result.output

    def test_add_debt(self, run):
        result = run(
            "add", "debt", "--amount", "500", "--type", "lent", "--person", "Ravi",
            "--source", "wallet", "--due-date", "2024-04-01",
        )

        assert result.exit_code == 0
        assert "Lent to: Ravi" in result.output


class TestViewAndDelete:
    def test_view_empty(self, run):
        result = run("view")

        assert result.exit_code == 0
        assert "No entries found." in result.output

    def test_view_filters_by_kind_and_date(self, run):
        run("add", "expense", "--amount", "20", "--category", "Food", "--source", "wallet", "--date", "2024-01-05")
        run("add", "expense", "--amount", "30", "--category", "Rent", "--source", "bank", "--date", "2024-02-05")
        run("add", "income", "--amount", "99", "--source", "bank", "--date", "2024-01-06")

        result = run("view", "--type", "expense", "--start-date", "2024-01-01", "--end-date", "2024-01-31")

        assert result.exit_code == 0
        assert "Expense (1):" in result.output
        assert "Food" in result.output
        assert "Rent" not in result.output
        assert "Income" not in result.output

    def test_view_by_account(self, run):
        run("add", "expense", "--amount", "20", "--category", "Food", "--source", "wallet")
        run("add", "expense", "--amount", "30", "--category", "Rent", "--source", "bank")

        result = run("view", "--account", "Cash Wallet")

        assert "Food" in result.output
        assert "Rent" not in result.output

    def test_view_rejects_conflicting_periods(self, run):
        result = run("view", "--this-month", "--last-month")

        assert result.exit_code == 1
        assert "Only one period option" in result.output

    def test_delete_entry(self, run):
        entry_id = _created_id(run("add", "income", "--amount", "5", "--source", "wallet"))

        result = run("delete", "income", entry_id, "--yes")

        assert result.exit_code == 0
        assert f"Deleted income {entry_id}" in result.output
        assert "No entries found." in run("view").output

    def test_delete_unknown_entry(self, run):
        result = run("delete", "expense", "missing", "--yes")

        assert result.exit_code == 1
        assert "Expense entry missing not found" in result.output


class TestUpdateCommand:
    def test_update_expense(self, run, temp_db):
        entry_id = _created_id(run("add", "expense", "--amount", "5", "--category", "Food", "--source", "wallet"))

        result = run(
            "update", "expense", entry_id, "--amount", "7.50", "--category", "Travel",
            "--subcategory", "Taxi", "--date", "2024-02-01", "--description", "airport",
        )

        assert result.exit_code == 0, result.output
        assert f"Updated expense {entry_id}" in result.output
        store = LedgerStore(temp_db)
        store.load()
        entry = store.expenses[0]
        assert entry.amount == Decimal("7.50")
        assert (entry.category, entry.subcategory) == ("Travel", "Taxi")
        assert entry.date.date() == date(2024, 2, 1)
        assert entry.descriptions == ("airport",)

    def test_update_rebooks_account(self, run):
        run("account", "create", "HDFC Savings", "--type", "bank")
        entry_id = _created_id(run("add", "income", "--amount", "100", "--source", "wallet"))

        result = run("update", "income", entry_id, "--account", "HDFC Savings")

        assert result.exit_code == 0, result.output
        balance = run("balance", "--by-account").output
        line = next(line for line in balance.splitlines() if line.startswith("HDFC Savings"))
        assert "₹100.00" in line

    def test_update_transfer_destination(self, run, temp_db):
        entry_id = _created_id(
            run("add", "transfer", "--amount", "50", "--from-source", "bank", "--to-source", "wallet")
        )

        result = run("update", "transfer", entry_id, "--to-source", "ncmc")

        assert result.exit_code == 0, result.output
        store = LedgerStore(temp_db)
        store.load()
        assert store.transfers[0].to_source.value == "ncmc"

    def test_update_debt_person_and_due_date(self, run, temp_db):
        entry_id = _created_id(
            run("add", "debt", "--amount", "500", "--type", "lent", "--person", "Ravi", "--source", "wallet")
        )

        result = run("update", "debt", entry_id, "--person", "Asha", "--due-date", "2024-06-30")

        assert result.exit_code == 0, result.output
        store = LedgerStore(temp_db)
        store.load()
        assert store.debts[0].person_name == "Asha"
        assert store.debts[0].due_date.date() == date(2024, 6, 30)

    def test_update_unknown_entry(self, run):
        result = run("update", "income", "missing", "--amount", "5")

        assert result.exit_code == 1
        assert "Income entry missing not found" in result.output

    def test_update_invalid_amount(self, run):
        entry_id = _created_id(run("add", "income", "--amount", "5", "--source", "wallet"))

        result = run("update", "income", entry_id, "--amount", "abc")

        assert result.exit_code == 1
        assert "Invalid amount format" in result.output

    def test_update_rejects_option_for_other_kind(self, run):
        entry_id = _created_id(run("add", "income", "--amount", "5", "--source", "wallet"))

        result = run("update", "income", entry_id, "--category", "Food")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_update_without_changes(self, run):
        entry_id = _created_id(run("add", "income", "--amount", "5", "--source", "wallet"))

        result = run("update", "income", entry_id)

        assert result.exit_code == 1
        assert "No changes given" in result.output


class TestDebtCommands:
    @pytest.fixture
    def debt_id(self, run):
        result = run("add", "debt", "--amount", "500", "--type", "lent", "--person", "Ravi", "--source", "wallet")
        return _created_id(result)

    def test_partial_then_settle(self, run, debt_id):
        result = run("debt", "partial", debt_id, "200", "--note", "first instalment")
        assert result.exit_code == 0
        assert "Recorded ₹200.00 from Ravi" in result.output
        assert "Remaining: ₹300.00" in result.output

        result = run("debt", "partial", debt_id[:8], "300")
        assert "Debt is now fully settled" in result.output

        result = run("debt", "settle", debt_id)
        assert result.exit_code == 1
        assert "already settled" in result.output

    def test_partial_cannot_exceed_remaining(self, run, debt_id):
        run("debt", "partial", debt_id, "200")

        result = run("debt", "partial", debt_id, "400")

        assert result.exit_code == 1
        assert "cannot exceed remaining debt" in result.output
        assert "₹300.00" in run("debt", "list").output

    def test_settle_records_income(self, run, debt_id):
        result = run("debt", "settle", debt_id)

        assert result.exit_code == 0
        assert "Settled debt with Ravi (₹500.00)" in result.output
        assert "Recorded ₹500.00 as income" in result.output
        assert "Debt Settlement" in run("view", "--type", "income").output
        assert "No debts found." in run("debt", "list").output
        assert "settled" in run("debt", "list", "--all").output

    def test_settle_borrowed_records_expense(self, run):
        debt_id = _created_id(
            run("add", "debt", "--amount", "800", "--type", "borrowed", "--person", "Asha", "--source", "bank")
        )

        result = run("debt", "settle", debt_id)

        assert "Recorded ₹800.00 as expense" in result.output
        assert "Debt Repayment" in run("view", "--type", "expense").output

    def test_settle_unknown_debt(self, run):
        result = run("debt", "settle", "missing")

        assert result.exit_code == 1
        assert "Debt entry missing not found" in result.output

    def test_list_by_type(self, run, debt_id):
        run("add", "debt", "--amount", "80", "--type", "borrowed", "--person", "Asha", "--source", "bank")

        result = run("debt", "list", "--type", "borrowed")

        assert "Asha" in result.output
        assert "Ravi" not in result.output


class TestBalanceAndSummary:
    def test_balance_by_source(self, run):
        run("add", "income", "--amount", "1000", "--source", "bank")
        run("add", "expense", "--amount", "300", "--category", "Food", "--source", "bank")
        run("add", "debt", "--amount", "500", "--type", "lent", "--person", "Ravi", "--source", "wallet")

        result = run("balance")

        assert result.exit_code == 0
        bank_line = next(line for line in result.output.splitlines() if line.startswith("bank"))
        wallet_line = next(line for line in result.output.splitlines() if line.startswith("wallet"))
        assert "₹700.00" in bank_line
        assert "-₹500.00" in wallet_line
        assert "Owed to you" in result.output

    def test_balance_by_account(self, run):
        run("account", "create", "HDFC Savings", "--type", "bank")
        run("add", "income", "--amount", "250", "--account", "HDFC Savings")

        result = run("balance", "--by-account")

        line = next(line for line in result.output.splitlines() if line.startswith("HDFC Savings"))
        assert "₹250.00" in line

    def test_summary_all_time(self, run):
        run("add", "income", "--amount", "1000", "--source", "bank", "--subcategory", "Salary")
        run("add", "expense", "--amount", "300", "--category", "Rent", "--source", "bank")
        run("add", "transfer", "--amount", "100", "--from-source", "bank", "--to-source", "wallet")

        result = run("summary", "--period", "all-time")

        assert result.exit_code == 0
        assert "All time" in result.output
        net_line = next(line for line in result.output.splitlines() if line.startswith("Net"))
        assert "₹700.00" in net_line
        assert "Salary" in result.output
        assert "Rent" in result.output

    def test_summary_custom_range(self, run):
        run("add", "expense", "--amount", "10", "--category", "Food", "--source", "wallet", "--date", "2024-01-10")
        run("add", "expense", "--amount", "99", "--category", "Food", "--source", "wallet", "--date", "2024-03-10")

        result = run("summary", "--start-date", "2024-01-01", "--end-date", "2024-01-31")

        assert "2024-01-01 to 2024-01-31" in result.output
        expenses_line = next(line for line in result.output.splitlines() if line.startswith("Expenses"))
        assert "₹10.00" in expenses_line

    def test_summary_period_containing_date(self, run):
        run("add", "expense", "--amount", "10", "--category", "Food", "--source", "wallet", "--date", "2024-02-05")
        run("add", "expense", "--amount", "99", "--category", "Food", "--source", "wallet", "--date", "2024-03-10")

        result = run("summary", "--period", "weekly", "--date", "2024-02-07")

        assert result.exit_code == 0, result.output
        assert "2024-02-05 to 2024-02-11" in result.output
        expenses_line = next(line for line in result.output.splitlines() if line.startswith("Expenses"))
        assert "₹10.00" in expenses_line

    def test_summary_rejects_reversed_range(self, run):
        result = run("summary", "--start-date", "2024-02-01", "--end-date", "2024-01-01")
        assert result.exit_code == 1


class TestDataCommands:
    def test_export_clear_import(self, run, tmp_path):
        run("add", "income", "--amount", "1000", "--source", "bank")
        run("add", "debt", "--amount", "500", "--type", "lent", "--person", "Ravi", "--source", "wallet")
        path = tmp_path / "backup.json"

        result = run("export", str(path))
        assert result.exit_code == 0
        assert "Exported 1 income, 0 expense, 0 transfer and 1 debt entries" in result.output
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["incomeEntries"][0]["amount"] == 1000

        result = run("clear", "--yes")
        assert "All entries cleared." in result.output
        assert "No entries found." in run("view").output
        assert "Cash Wallet" in run("account", "list").output

        result = run("import", str(path), "--yes")
        assert result.exit_code == 0
        assert "Imported 1 income, 0 expense, 0 transfer and 1 debt entries" in result.output
        assert "Ravi" in run("debt", "list").output

    def test_import_rejects_invalid_transfer(self, run, tmp_path):
        run("add", "income", "--amount", "5", "--source", "bank")
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "incomeEntries": [],
                    "expenseEntries": [],
                    "transferEntries": [
                        {"id": "t1", "amount": 10, "fromSource": "bank", "toSource": "bank", "date": "2024-01-01"}
                    ],
                }
            ),
            encoding="utf-8",
        )

        result = run("import", str(path), "--yes")

        assert result.exit_code == 1
        assert "transferEntries" in result.output
        assert "Income (1):" in run("view").output

    def test_import_rejects_non_json(self, run, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        result = run("import", str(path), "--yes")

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_import_cancelled(self, run, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text(
            json.dumps({"incomeEntries": [], "expenseEntries": [], "transferEntries": []}),
            encoding="utf-8",
        )
        run("add", "income", "--amount", "5", "--source", "bank")

        result = run("import", str(path), input="n\n")

        assert "Import cancelled." in result.output
        assert "Income (1):" in run("view").output

    def test_clear_cancelled(self, run):
        run("add", "income", "--amount", "5", "--source", "bank")

        result = run("clear", input="n\n")

        assert "Clear cancelled." in result.output
