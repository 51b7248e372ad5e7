"""Export, import and clear commands."""

import click
from pennywise.cli.error_handling import handle_domain_error
from pennywise.domain.data_transfer import DataTransferService
from pennywise.domain.errors import ImportValidationError


@click.command("export")
@click.argument("file", type=click.Path(dir_okay=False, writable=True))
@click.pass_context
def export_data(ctx, file: str):
    """Export all entries to a JSON file.

    Examples:
        pennywise export backup.json
    """
    service = DataTransferService(ctx.obj["store"])
    try:
        document = service.export_to_file(file)
    except OSError as e:
        click.echo(f"Error: Could not write '{file}': {e}", err=True)
        ctx.exit(1)

    click.echo(
        f"Exported {len(document['incomeEntries'])} income, "
        f"{len(document['expenseEntries'])} expense, "
        f"{len(document['transferEntries'])} transfer and "
        f"{len(document['debtEntries'])} debt entries to {file}"
    )


@click.command("import")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Replace existing data without asking")
@click.pass_context
def import_data(ctx, file: str, yes: bool):
    """Import entries from a JSON export, replacing all current entries.

    The whole file is checked first; if any record is invalid nothing is
    imported. Accounts are not part of the file and are left unchanged.

    Examples:
        pennywise import backup.json
    """
    service = DataTransferService(ctx.obj["store"])

    def confirm() -> bool:
        return yes or click.confirm(
            "This will replace ALL income, expense, transfer and debt entries. Continue?"
        )

    try:
        payload = service.load_payload(file)
        imported = service.import_data(payload, confirm)
    except ImportValidationError as e:
        handle_domain_error(ctx, e)

    if not imported:
        click.echo("Import cancelled.")
        return
    store = ctx.obj["store"]
    click.echo(
        f"Imported {len(store.income)} income, {len(store.expenses)} expense, "
        f"{len(store.transfers)} transfer and {len(store.debts)} debt entries"
    )


@click.command("clear")
@click.option("--yes", is_flag=True, help="Clear without asking")
@click.pass_context
def clear_data(ctx, yes: bool):
    """Delete all income, expense, transfer and debt entries.

    Accounts are kept.
    """
    service = DataTransferService(ctx.obj["store"])

    def confirm() -> bool:
        return yes or click.confirm("This will delete ALL entries and cannot be undone. Continue?")

    if not service.clear_all(confirm):
        click.echo("Clear cancelled.")
        return
    click.echo("All entries cleared.")


def register_commands(cli):
    """Register data commands with main CLI."""
    cli.add_command(export_data)
    cli.add_command(import_data)
    cli.add_command(clear_data)
