"""Entry viewing, update and deletion commands."""

import click
from pennywise.cli.account_resolution import account_labels, resolve_account_or_exit
from pennywise.cli.date_filters import (
    date_range_options,
    pop_period_flags,
    resolve_cli_date_range,
    to_timestamp_bounds,
)
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.entities import EntryKind, TransactionSource, TransferEntry
from pennywise.domain.errors import entry_not_found
from pennywise.domain.transaction import TransactionService
from pennywise.utils.amount_parser import format_amount, parse_amount
from pennywise.utils.date_parser import parse_date

KINDS = [k.value for k in EntryKind]
SOURCES = [s.value for s in TransactionSource]


def _detail(entry) -> str:
    """Kind-specific middle column for the compact listing."""
    if isinstance(entry, TransferEntry):
        return f"{entry.from_source.value} -> {entry.to_source.value}"
    if hasattr(entry, "person_name"):
        return f"{entry.type.value} {entry.person_name} ({entry.status.value})"
    if hasattr(entry, "category"):
        return entry.category + (f" > {entry.subcategory}" if entry.subcategory else "")
    return entry.subcategory


def _account_column(entry, labels: dict[str, str]) -> str:
    if isinstance(entry, TransferEntry):
        return (
            f"{labels.get(entry.from_account_id, entry.from_source.value)} -> "
            f"{labels.get(entry.to_account_id, entry.to_source.value)}"
        )
    return labels.get(entry.account_id, entry.source.value)


@click.command("view")
@click.option("--type", "kinds", multiple=True, type=click.Choice(KINDS), help="Entry kind to show (repeatable; default all)")
@date_range_options
@click.option("--account", help="Account name or ID")
@click.pass_context
def view_entries(
    ctx,
    kinds: tuple[str, ...],
    account: str | None,
    start_date: str | None,
    end_date: str | None,
    **period_flags,
):
    """View entries with optional filters, newest first.

    Examples:
        pennywise view --this-month
        pennywise view --type expense --start-date 2024-01-01 --end-date 2024-01-31
        pennywise view --type transfer --account "Cash Wallet"
    """
    service = TransactionService(ctx.obj["store"])

    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(period_flags),
    )

    account_id = None
    if account:
        account_id = resolve_account_or_exit(ctx, service.accounts, account)

    lower, upper = to_timestamp_bounds(start, end)
    labels = account_labels(service.accounts)
    found = False
    for kind in kinds or KINDS:
        entries = service.list_entries(kind, start=lower, end=upper, account_id=account_id)
        if not entries:
            continue
        found = True

        click.echo(f"\n{kind.capitalize()} ({len(entries)}):")
        click.echo("-" * 110)
        click.echo(f"{'ID':<10} {'Date':<12} {'Amount':>14}  {'Details':<32} {'Account':<36}")
        click.echo("-" * 110)
        for entry in entries:
            click.echo(
                f"{entry.id[:8]:<10} {str(entry.date.date()):<12} {format_amount(entry.amount):>14}  "
                f"{_detail(entry)[:32]:<32} {_account_column(entry, labels)[:36]:<36}"
            )
            for description in entry.descriptions:
                click.echo(f"{'':<10} {description}")
        click.echo("-" * 110)
        click.echo(f"{'TOTAL':<10} {'':<12} {format_amount(sum(e.amount for e in entries)):>14}")

    if not found:
        click.echo("No entries found.")


@click.command("update")
@click.argument("kind", type=click.Choice(KINDS))
@click.argument("entry_id")
@click.option("--amount", help="New amount (e.g., 123.45)")
@click.option("--date", "entry_date", help="New entry date (YYYY-MM-DD or relative like 'yesterday')")
@click.option("--account", help="Account name or ID (income, expense, debt)")
@click.option("--source", type=click.Choice(SOURCES), help="Source type (income, expense, debt)")
@click.option("--from-account", help="Transfer origin account name or ID")
@click.option("--to-account", help="Transfer destination account name or ID")
@click.option("--from-source", type=click.Choice(SOURCES), help="Transfer origin source type")
@click.option("--to-source", type=click.Choice(SOURCES), help="Transfer destination source type")
@click.option("--category", help="Expense category")
@click.option("--subcategory", help="Income or expense subcategory")
@click.option("--description", "descriptions", multiple=True, help="Replaces all descriptions (repeatable)")
@click.option("--person", help="Debt counterparty")
@click.option("--due-date", help="Debt due date (YYYY-MM-DD or relative)")
@click.pass_context
def update_entry(
    ctx,
    kind: str,
    entry_id: str,
    amount: str | None,
    entry_date: str | None,
    account: str | None,
    source: str | None,
    from_account: str | None,
    to_account: str | None,
    from_source: str | None,
    to_source: str | None,
    category: str | None,
    subcategory: str | None,
    descriptions: tuple[str, ...],
    person: str | None,
    due_date: str | None,
) -> None:
    """Update an entry.

    Updates only the fields that are provided. Changing the account or
    source re-books the entry; options that do not apply to KIND are
    rejected.

    Examples:
        pennywise update expense 3f2a9c1e-... --amount 75 --category Travel
        pennywise update transfer 9b1d... --to-account "HDFC Savings"
        pennywise update debt 51c0... --person Asha --due-date 2024-06-30
    """
    service = TransactionService(ctx.obj["store"])

    changes = {
        "source": source,
        "from_source": from_source,
        "to_source": to_source,
        "category": category,
        "subcategory": subcategory,
        "person_name": person,
    }
    for field_name, value in (
        ("account_id", account),
        ("from_account_id", from_account),
        ("to_account_id", to_account),
    ):
        if value is not None:
            changes[field_name] = resolve_account_or_exit(ctx, service.accounts, value)
    if amount is not None:
        try:
            changes["amount"] = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)
    for field_name, value in (("date", entry_date), ("due_date", due_date)):
        if value is not None:
            try:
                changes[field_name] = parse_date(value)
            except ValueError as e:
                click.echo(f"Error: Invalid {field_name.replace('_', ' ')} format: {e}", err=True)
                ctx.exit(1)
    if descriptions:
        changes["descriptions"] = list(descriptions)

    if all(value is None for value in changes.values()):
        click.echo("Error: No changes given.", err=True)
        ctx.exit(1)

    try:
        updated = service.update_entry(kind, entry_id, **changes)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if updated is None:
        click.echo(f"Error: {entry_not_found(kind, entry_id)}", err=True)
        ctx.exit(1)
    click.echo(f"Updated {kind} {entry_id}")
    click.echo(f"  Amount: {format_amount(updated.amount)}")
    click.echo(f"  Date: {updated.date.date()}")


@click.command("delete")
@click.argument("kind", type=click.Choice(KINDS))
@click.argument("entry_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, kind: str, entry_id: str, yes: bool) -> None:
    """Delete an entry.

    Settlement records created from a debt are separate entries; deleting a
    debt leaves them in place.

    Examples:
        pennywise delete expense 3f2a9c1e-...
    """
    service = TransactionService(ctx.obj["store"])

    entry = service.get(kind, entry_id)
    if entry is None:
        click.echo(f"Error: {entry_not_found(kind, entry_id)}", err=True)
        ctx.exit(1)

    # Confirm deletion
    if not yes and not click.confirm(
        f"Are you sure you want to delete {kind} {entry_id} ({format_amount(entry.amount)})?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_entry(kind, entry_id)
    click.echo(f"Deleted {kind} {entry_id}")


def register_commands(cli: click.Group) -> None:
    """Register entry commands with main CLI."""
    cli.add_command(view_entries)
    cli.add_command(update_entry)
    cli.add_command(delete_entry)
