"""Debt settlement commands."""

import click
from pennywise.cli.account_resolution import account_labels
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.account import AccountService
from pennywise.domain.debt import DebtService, validate_partial_amount
from pennywise.domain.entities import DebtStatus, DebtType
from pennywise.domain.errors import entry_not_found
from pennywise.utils.amount_parser import format_amount, parse_amount


@click.group()
def debt_group():
    """List and settle debts."""
    pass


@debt_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include settled debts")
@click.option("--type", "debt_type", type=click.Choice([t.value for t in DebtType]), help="Only lent or only borrowed")
@click.pass_context
def list_debts(ctx, show_all: bool, debt_type: str | None):
    """List pending debts."""
    store = ctx.obj["store"]
    service = DebtService(store)
    labels = account_labels(AccountService(store))

    if show_all:
        debts = [d for d in store.debts if debt_type is None or d.type.value == debt_type]
    else:
        debts = service.pending(debt_type)

    if not debts:
        click.echo("No debts found.")
        return

    click.echo(f"\n{'ID':<10} {'Type':<9} {'Person':<20} {'Amount':>12} {'Settled':>12} {'Remaining':>12}  {'Status':<8} {'Account'}")
    click.echo("-" * 110)
    for debt in debts:
        click.echo(
            f"{debt.id[:8]:<10} {debt.type.value:<9} {debt.person_name[:20]:<20} "
            f"{format_amount(debt.amount):>12} {format_amount(debt.settled_amount):>12} "
            f"{format_amount(debt.remaining_amount):>12}  {debt.status.value:<8} "
            f"{labels.get(debt.account_id, debt.source.value)}"
        )
        if debt.due_date is not None and debt.status == DebtStatus.PENDING:
            click.echo(f"{'':<10} due {debt.due_date.date()}")


def _find_debt_or_exit(ctx, service: DebtService, debt_id: str):
    debt = service.get(debt_id)
    if debt is None:
        # Allow unambiguous id prefixes, as shown by 'debt list'
        matches = [d for d in service.store.debts if d.id.startswith(debt_id)]
        if len(matches) == 1:
            debt = matches[0]
    if debt is None:
        click.echo(f"Error: {entry_not_found('debt', debt_id)}", err=True)
        ctx.exit(1)
    if debt.is_settled:
        click.echo(f"Error: Debt {debt.id} is already settled", err=True)
        ctx.exit(1)
    return debt


@debt_group.command("settle")
@click.argument("debt_id")
@click.pass_context
def settle_debt(ctx, debt_id: str):
    """Settle a debt in full.

    A lent debt coming back is recorded as income; a borrowed debt paid back
    is recorded as an expense.

    Examples:
        pennywise debt settle 3f2a9c1e
    """
    service = DebtService(ctx.obj["store"])
    debt = _find_debt_or_exit(ctx, service, debt_id)

    settled = service.settle(debt.id)
    kind = "income" if settled.type == DebtType.LENT else "expense"
    click.echo(f"Settled debt with {settled.person_name} ({format_amount(settled.amount)})")
    click.echo(f"Recorded {format_amount(settled.amount)} as {kind}")


@debt_group.command("partial")
@click.argument("debt_id")
@click.argument("amount")
@click.option("--note", help="Note added to the settlement record")
@click.pass_context
def partial_settle_debt(ctx, debt_id: str, amount: str, note: str | None):
    """Settle part of a debt.

    AMOUNT cannot exceed what is still owed.

    Examples:
        pennywise debt partial 3f2a9c1e 200 --note "First instalment"
    """
    service = DebtService(ctx.obj["store"])
    debt = _find_debt_or_exit(ctx, service, debt_id)

    try:
        settlement = validate_partial_amount(debt, parse_amount(amount))
        updated = service.partial_settle(debt.id, settlement, note=note)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Recorded {format_amount(settlement)} from {updated.person_name}")
    if updated.is_settled:
        click.echo("Debt is now fully settled")
    else:
        click.echo(f"Remaining: {format_amount(updated.remaining_amount)}")


def register_commands(cli):
    """Register debt commands with main CLI."""
    cli.add_command(debt_group, name="debt")
