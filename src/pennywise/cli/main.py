"""Main CLI entry point."""

import logging

import click
from pennywise.database.factories import create_sqlite_database
from pennywise.database.store import LedgerStore
from pennywise.domain.migration import MigrationService

# Import and register all commands at module level
from pennywise.cli.commands import (
    account,
    add,
    transaction,
    debt,
    balance,
    summary,
    data,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PENNYWISE_DB_PATH environment variable)",
    envvar="PENNYWISE_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Pennywise - Personal finance ledger.

    Record income, expenses, transfers and debts across your wallet, bank
    and NCMC card accounts, and see where your money stands.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)

    # Open the ledger only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)

        store = LedgerStore(db)
        migration = MigrationService(store)
        migration.load_accounts()
        if migration.last_failure is not None:
            click.echo(f"Warning: {migration.last_failure}. Using default accounts for this session.", err=True)

        ctx.obj["db"] = db
        ctx.obj["store"] = store


# Register all commands
account.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
debt.register_commands(cli)
balance.register_commands(cli)
summary.register_commands(cli)
data.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
