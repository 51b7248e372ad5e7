"""Summary command."""

from datetime import date

import click
from pennywise.domain.summary import PERIODS, SummaryService
from pennywise.utils.amount_parser import format_amount
from pennywise.utils.date_parser import parse_date


def _display_breakdown(title: str, totals: dict) -> None:
    if not totals:
        return
    click.echo(f"\n{title}:")
    for name, amount in totals.items():
        click.echo(f"    {name:<46} {format_amount(amount):>15}")


@click.command("summary")
@click.option(
    "--period",
    type=click.Choice(PERIODS),
    default="monthly",
    show_default=True,
    help="Period to summarize",
)
@click.option("--date", "reference", help="Any day inside the period (defaults to today)")
@click.option("--start-date", help="Custom range start (YYYY-MM-DD or relative)")
@click.option("--end-date", help="Custom range end (YYYY-MM-DD or relative)")
@click.pass_context
def summary(ctx, period: str, reference: str | None, start_date: str | None, end_date: str | None):
    """Summarize income and expenses for a period.

    Use --start-date/--end-date for a custom range; otherwise the period
    containing --date (today by default) is used. Weeks start on Monday.

    Examples:
        pennywise summary
        pennywise summary --period weekly --date "last week"
        pennywise summary --start-date 2024-01-01 --end-date 2024-03-31
    """
    service = SummaryService(ctx.obj["store"])

    try:
        if start_date or end_date:
            start = parse_date(start_date) if start_date else None
            end = parse_date(end_date) if end_date else None
            if start is not None and end is not None and start > end:
                click.echo("Error: Start date must not be after end date.", err=True)
                ctx.exit(1)
            report = service.summarize(start, end)
        else:
            day = parse_date(reference) if reference else date.today()
            report = service.summarize_period(period, day)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    if report.start is None and report.end is None:
        click.echo("\nAll time")
    else:
        start = report.start.date() if report.start else "..."
        end = report.end.date() if report.end else "..."
        click.echo(f"\n{start} to {end}")
    click.echo("=" * 64)
    click.echo(f"{'Income':<50} {format_amount(report.total_income):>13}  ({report.income_count})")
    click.echo(f"{'Expenses':<50} {format_amount(report.total_expenses):>13}  ({report.expense_count})")
    click.echo("-" * 64)
    click.echo(f"{'Net':<50} {format_amount(report.net):>13}")

    _display_breakdown("Income by subcategory", report.income_by_subcategory)
    _display_breakdown("Expenses by category", report.expenses_by_category)


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
