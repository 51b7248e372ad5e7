"""Balance command."""

import click
from pennywise.domain.account import AccountService
from pennywise.domain.balance import (
    balances_by_account,
    balances_by_source,
    net_balance,
    pending_debt_totals,
)
from pennywise.utils.amount_parser import format_amount


@click.command("balance")
@click.option("--by-account", is_flag=True, help="Show one line per account instead of per source")
@click.option("--all", "show_all", is_flag=True, help="With --by-account, include deleted accounts")
@click.pass_context
def show_balance(ctx, by_account: bool, show_all: bool):
    """Show current balances.

    Lent money is deducted and borrowed money added as soon as the debt is
    recorded; settlements then show up as income or expenses.

    Examples:
        pennywise balance
        pennywise balance --by-account
    """
    store = ctx.obj["store"]
    collections = store.collections()

    click.echo("\nBalances:")
    click.echo("-" * 50)
    if by_account:
        accounts = AccountService(store).list_accounts(include_inactive=show_all)
        balances = balances_by_account(accounts, *collections)
        for acc in accounts:
            name = acc.name if acc.is_active else f"{acc.name} (inactive)"
            click.echo(f"{name:<25} {acc.type.value:<7} {format_amount(balances[acc.id]):>15}")
    else:
        for source, amount in balances_by_source(*collections).items():
            click.echo(f"{source.value:<33} {format_amount(amount):>15}")
    click.echo("-" * 50)
    click.echo(f"{'Net':<33} {format_amount(net_balance(*collections)):>15}")

    totals = pending_debt_totals(store.debts)
    if totals.lent or totals.borrowed:
        click.echo("\nPending debts:")
        click.echo(f"{'Owed to you':<33} {format_amount(totals.total_lent):>15}  ({len(totals.lent)})")
        click.echo(f"{'You owe':<33} {format_amount(totals.total_borrowed):>15}  ({len(totals.borrowed)})")


def register_commands(cli):
    """Register balance command with main CLI."""
    cli.add_command(show_balance)
