"""Period summary domain service."""

from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import MO, relativedelta

from pennywise.database.store import LedgerStore
from pennywise.domain.entities import ExpenseEntry, IncomeEntry, PeriodSummary
from pennywise.utils.date_parser import end_of_day, start_of_day

PERIODS = ("daily", "weekly", "monthly", "yearly", "all-time")

UNCATEGORIZED = "Uncategorized"


def period_range(period: str, reference: date) -> tuple[Optional[date], Optional[date]]:
    """Get the calendar days covered by a summary period.

    Weeks start on Monday. ``all-time`` has no bounds.

    Args:
        period: One of daily, weekly, monthly, yearly, all-time
        reference: Any day inside the period

    Returns:
        Tuple of (first_day, last_day), both None for all-time

    Raises:
        ValueError: If the period is not recognized
    """
    period = period.strip().lower()
    if period == "daily":
        return reference, reference
    elif period == "weekly":
        start = reference + relativedelta(weekday=MO(-1))
        return start, start + relativedelta(days=6)
    elif period == "monthly":
        start = reference.replace(day=1)
        return start, start + relativedelta(months=1, days=-1)
    elif period == "yearly":
        return reference.replace(month=1, day=1), reference.replace(month=12, day=31)
    elif period == "all-time":
        return None, None
    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")


def filter_by_range(
    entries: Iterable, start: Optional[date] = None, end: Optional[date] = None
) -> list:
    """Keep entries whose date falls within [start, end], whole days inclusive."""
    lower = start_of_day(start) if start is not None else None
    upper = end_of_day(end) if end is not None else None
    return [
        entry
        for entry in entries
        if (lower is None or entry.date >= lower) and (upper is None or entry.date <= upper)
    ]


def build_period_summary(
    income: Sequence[IncomeEntry],
    expenses: Sequence[ExpenseEntry],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PeriodSummary:
    """Total income and expenses within a date range.

    Transfers and debts are not income or expense and are left out; debt
    settlements count through the records they create.
    """
    income = filter_by_range(income, start, end)
    expenses = filter_by_range(expenses, start, end)

    by_category: dict[str, Decimal] = defaultdict(Decimal)
    for entry in expenses:
        by_category[entry.category or UNCATEGORIZED] += entry.amount
    by_subcategory: dict[str, Decimal] = defaultdict(Decimal)
    for entry in income:
        by_subcategory[entry.subcategory or UNCATEGORIZED] += entry.amount

    return PeriodSummary(
        start=start_of_day(start) if start is not None else None,
        end=end_of_day(end) if end is not None else None,
        total_income=sum((entry.amount for entry in income), Decimal("0")),
        total_expenses=sum((entry.amount for entry in expenses), Decimal("0")),
        expenses_by_category=dict(sorted(by_category.items(), key=lambda item: item[1], reverse=True)),
        income_by_subcategory=dict(sorted(by_subcategory.items(), key=lambda item: item[1], reverse=True)),
        income_count=len(income),
        expense_count=len(expenses),
    )


class SummaryService:
    """Service for building period summaries from the store."""

    def __init__(self, store: LedgerStore):
        self.store = store

    def summarize(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> PeriodSummary:
        return build_period_summary(self.store.income, self.store.expenses, start, end)

    def summarize_period(self, period: str, reference: date | datetime) -> PeriodSummary:
        """Summary for the daily/weekly/monthly/yearly period containing reference."""
        if isinstance(reference, datetime):
            reference = reference.date()
        start, end = period_range(period, reference)
        return self.summarize(start, end)
