"""Add entry commands."""

import click
from pennywise.cli.account_resolution import resolve_account_or_exit
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.entities import DebtType, TransactionSource
from pennywise.domain.transaction import TransactionService
from pennywise.utils.amount_parser import format_amount, parse_amount
from pennywise.utils.date_parser import parse_date

SOURCES = [s.value for s in TransactionSource]
DEBT_TYPES = [t.value for t in DebtType]

DATE_HELP = "Entry date (YYYY-MM-DD or relative like 'today', 'yesterday'); defaults to now"


def _parse_amount_or_exit(ctx, amount: str):
    try:
        return parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


def _parse_date_or_exit(ctx, value: str | None, label: str = "date"):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} format: {e}", err=True)
        ctx.exit(1)


def _account_id_or_none(ctx, service: TransactionService, account: str | None) -> str | None:
    if account is None:
        return None
    return resolve_account_or_exit(ctx, service.accounts, account)


def _echo_created(label: str, entry) -> None:
    click.echo(f"Recorded {label} {entry.id}")
    click.echo(f"  Amount: {format_amount(entry.amount)}")
    click.echo(f"  Date: {entry.date.date()}")
    for description in entry.descriptions:
        click.echo(f"  Description: {description}")


def _account_name(service: TransactionService, account_id: str | None) -> str:
    if account_id is None:
        return "-"
    acc = service.accounts.get(account_id)
    return acc.name if acc is not None else account_id


@click.group("add")
def add_group():
    """Record income, expenses, transfers and debts.

    Each entry is booked against an account (--account, by name or ID) or a
    source (--source); a bare source uses the default account of its type.
    """
    pass


@add_group.command("income")
@click.option("--amount", required=True, help="Amount received (e.g., 1500 or ₹1,500.00)")
@click.option("--date", help=DATE_HELP)
@click.option("--account", help="Account name or ID")
@click.option("--source", type=click.Choice(SOURCES), help="Source when no account is given")
@click.option("--subcategory", default="", help="Income subcategory (e.g., Salary)")
@click.option("--description", "descriptions", multiple=True, help="Description (repeatable)")
@click.pass_context
def add_income(ctx, amount, date, account, source, subcategory, descriptions):
    """Record income.

    Examples:
        pennywise add income --amount 50000 --source bank --subcategory Salary
        pennywise add income --amount 200 --account "Cash Wallet" --date yesterday
    """
    service = TransactionService(ctx.obj["store"])
    amount = _parse_amount_or_exit(ctx, amount)
    entry_date = _parse_date_or_exit(ctx, date)
    account_id = _account_id_or_none(ctx, service, account)

    try:
        entry = service.add_income(
            amount=amount,
            date=entry_date,
            source=source,
            account_id=account_id,
            subcategory=subcategory,
            descriptions=descriptions,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    _echo_created("income", entry)
    click.echo(f"  Account: {_account_name(service, entry.account_id)} ({entry.source.value})")


@add_group.command("expense")
@click.option("--amount", required=True, help="Amount spent")
@click.option("--category", required=True, help="Expense category (e.g., Food)")
@click.option("--subcategory", default="", help="Expense subcategory (e.g., Groceries)")
@click.option("--date", help=DATE_HELP)
@click.option("--account", help="Account name or ID")
@click.option("--source", type=click.Choice(SOURCES), help="Source when no account is given")
@click.option("--description", "descriptions", multiple=True, help="Description (repeatable)")
@click.pass_context
def add_expense(ctx, amount, category, subcategory, date, account, source, descriptions):
    """Record an expense.

    Examples:
        pennywise add expense --amount 350 --category Food --subcategory Groceries --source wallet
    """
    service = TransactionService(ctx.obj["store"])
    amount = _parse_amount_or_exit(ctx, amount)
    entry_date = _parse_date_or_exit(ctx, date)
    account_id = _account_id_or_none(ctx, service, account)

    try:
        entry = service.add_expense(
            amount=amount,
            category=category,
            subcategory=subcategory,
            date=entry_date,
            source=source,
            account_id=account_id,
            descriptions=descriptions,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    _echo_created("expense", entry)
    click.echo(f"  Category: {entry.category}" + (f" > {entry.subcategory}" if entry.subcategory else ""))
    click.echo(f"  Account: {_account_name(service, entry.account_id)} ({entry.source.value})")


@add_group.command("transfer")
@click.option("--amount", required=True, help="Amount moved")
@click.option("--date", help=DATE_HELP)
@click.option("--from-account", help="Origin account name or ID")
@click.option("--to-account", help="Destination account name or ID")
@click.option("--from-source", type=click.Choice(SOURCES), help="Origin source when no account is given")
@click.option("--to-source", type=click.Choice(SOURCES), help="Destination source when no account is given")
@click.option("--description", "descriptions", multiple=True, help="Description (repeatable)")
@click.pass_context
def add_transfer(ctx, amount, date, from_account, to_account, from_source, to_source, descriptions):
    """Record a transfer between two accounts of different types.

    Examples:
        pennywise add transfer --amount 1000 --from-source bank --to-source wallet
        pennywise add transfer --amount 500 --from-account "HDFC Savings" --to-account "Metro Card"
    """
    service = TransactionService(ctx.obj["store"])
    amount = _parse_amount_or_exit(ctx, amount)
    entry_date = _parse_date_or_exit(ctx, date)
    from_account_id = _account_id_or_none(ctx, service, from_account)
    to_account_id = _account_id_or_none(ctx, service, to_account)

    try:
        entry = service.add_transfer(
            amount=amount,
            date=entry_date,
            from_source=from_source,
            to_source=to_source,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            descriptions=descriptions,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    _echo_created("transfer", entry)
    click.echo(
        f"  From: {_account_name(service, entry.from_account_id)} ({entry.from_source.value})"
        f" -> To: {_account_name(service, entry.to_account_id)} ({entry.to_source.value})"
    )


@add_group.command("debt")
@click.option("--amount", required=True, help="Amount lent or borrowed")
@click.option("--type", "debt_type", required=True, type=click.Choice(DEBT_TYPES), help="lent or borrowed")
@click.option("--person", required=True, help="Who the money was lent to or borrowed from")
@click.option("--date", help=DATE_HELP)
@click.option("--due-date", help="When the debt should be settled")
@click.option("--account", help="Account name or ID")
@click.option("--source", type=click.Choice(SOURCES), help="Source when no account is given")
@click.option("--description", "descriptions", multiple=True, help="Description (repeatable)")
@click.pass_context
def add_debt(ctx, amount, debt_type, person, date, due_date, account, source, descriptions):
    """Record money lent or borrowed.

    Lending reduces the account balance right away; borrowing increases it.

    Examples:
        pennywise add debt --amount 500 --type lent --person Ravi --source wallet
    """
    service = TransactionService(ctx.obj["store"])
    amount = _parse_amount_or_exit(ctx, amount)
    entry_date = _parse_date_or_exit(ctx, date)
    due = _parse_date_or_exit(ctx, due_date, "due date")
    account_id = _account_id_or_none(ctx, service, account)

    try:
        entry = service.add_debt(
            amount=amount,
            type=debt_type,
            person_name=person,
            date=entry_date,
            due_date=due,
            source=source,
            account_id=account_id,
            descriptions=descriptions,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    _echo_created("debt", entry)
    direction = "Lent to" if entry.type == DebtType.LENT else "Borrowed from"
    click.echo(f"  {direction}: {entry.person_name}")
    click.echo(f"  Account: {_account_name(service, entry.account_id)} ({entry.source.value})")


def register_commands(cli):
    """Register add commands with main CLI."""
    cli.add_command(add_group)
