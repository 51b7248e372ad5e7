"""Date range options shared by the listing commands."""

from datetime import date, datetime
from typing import Any, Optional

import click

from pennywise.utils.date_parser import end_of_day, get_date_range, parse_date, start_of_day

PERIOD_FLAGS = {
    "this-month": "Filter to current month",
    "this-year": "Filter to current year",
    "this-week": "Filter to current week (from Monday)",
    "last-month": "Filter to previous month",
    "last-year": "Filter to previous year",
    "last-week": "Filter to previous week",
}


def date_range_options(command):
    """Attach --start-date, --end-date and one flag per named period."""
    for period in reversed(list(PERIOD_FLAGS)):
        command = click.option(f"--{period}", is_flag=True, help=PERIOD_FLAGS[period])(command)
    command = click.option(
        "--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')"
    )(command)
    command = click.option(
        "--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')"
    )(command)
    return command


def pop_period_flags(params: dict[str, Any]) -> dict[str, bool]:
    """Remove the period flags from a command's keyword arguments."""
    return {period: params.pop(period.replace("-", "_"), False) for period in PERIOD_FLAGS}


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
) -> tuple[date | None, date | None]:
    """Turn the date options of a command into an inclusive day range.

    Exits with status 1 on conflicting options, unparseable dates or a
    start after the end.
    """
    chosen = [period for period, is_set in period_flags.items() if is_set]
    names = ", ".join(f"--{period}" for period in PERIOD_FLAGS)

    if len(chosen) > 1:
        click.echo(f"Error: Only one period option ({names}) can be specified at a time.", err=True)
        ctx.exit(1)
    if chosen and (start_date or end_date):
        click.echo(
            "Error: Period options cannot be combined with --start-date or --end-date.", err=True
        )
        ctx.exit(1)

    if chosen:
        start, end = get_date_range(chosen[0])
    else:
        start = _parse_or_exit(ctx, start_date, "start")
        end = _parse_or_exit(ctx, end_date, "end")

    if start is not None and end is not None and start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)

    return start, end


def _parse_or_exit(ctx, value: Optional[str], label: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} date: {e}", err=True)
        ctx.exit(1)


def to_timestamp_bounds(
    start: Optional[date], end: Optional[date]
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Widen a day range to the first and last instants it covers (UTC)."""
    return (
        start_of_day(start) if start is not None else None,
        end_of_day(end) if end is not None else None,
    )
