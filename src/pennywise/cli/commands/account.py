"""Account management commands."""

import click
from pennywise.cli.account_resolution import resolve_account_or_exit
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.account import AccountService
from pennywise.domain.balance import balances_by_account
from pennywise.domain.entities import AccountType
from pennywise.utils.amount_parser import format_amount

ACCOUNT_TYPES = [t.value for t in AccountType]


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--type", "account_type", required=True, type=click.Choice(ACCOUNT_TYPES), help="Account type")
@click.option("--default", "is_default", is_flag=True, help="Make this the default account of its type")
@click.pass_context
def create_account(ctx, name: str, account_type: str, is_default: bool):
    """Create a new account.

    Marking an account as default removes the default flag from the other
    accounts of the same type.

    Examples:
        pennywise account create "HDFC Savings" --type bank
        pennywise account create "Metro Card" --type ncmc --default
    """
    service = AccountService(ctx.obj["store"])

    try:
        acc = service.add(name=name, type=account_type, is_default=is_default)
        click.echo(f"Created account '{acc.name}' (ID: {acc.id})")
        if acc.is_default:
            click.echo(f"'{acc.name}' is now the default {acc.type.value} account")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include deleted (inactive) accounts")
@click.pass_context
def list_accounts(ctx, show_all: bool):
    """List accounts with their balances."""
    store = ctx.obj["store"]
    service = AccountService(store)

    accounts = service.list_accounts(include_inactive=show_all)
    if not accounts:
        click.echo("No accounts found.")
        return

    balances = balances_by_account(accounts, *store.collections())

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        flags = []
        if acc.is_default:
            flags.append("default")
        if not acc.is_active:
            flags.append("inactive")
        flag_str = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"ID: {acc.id[:8]} | {acc.name:25s} | {acc.type.value:6s} | "
            f"{format_amount(balances[acc.id]):>14s}{flag_str}"
        )


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--default", "is_default", is_flag=True, help="Make this the default account of its type")
@click.pass_context
def update_account(ctx, account: str, name: str | None, account_type: str | None, is_default: bool) -> None:
    """Update an account.

    ACCOUNT can be an account name or ID.

    Examples:
        pennywise account update "Bank Account" --name "HDFC Savings"
        pennywise account update "Metro Card" --default
    """
    service = AccountService(ctx.obj["store"])
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        acc = service.update(account_id, name=name, type=account_type, is_default=True if is_default else None)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account '{acc.name}'")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID.

    The account is deactivated rather than erased, so transactions that
    reference it keep their history and balance.

    Examples:
        pennywise account delete "Old Wallet"
    """
    service = AccountService(ctx.obj["store"])
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get(account_id)

    transaction_count = service.transaction_count(account_id)
    if transaction_count > 0:
        click.echo(
            f"'{account_obj.name}' has {transaction_count} "
            f"transaction{'s' if transaction_count != 1 else ''}; they will keep referring to it."
        )

    # Confirm deletion
    if not yes and not click.confirm(f"Are you sure you want to delete account '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    service.remove(account_id)
    click.echo(f"Deleted account '{account_obj.name}'")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
