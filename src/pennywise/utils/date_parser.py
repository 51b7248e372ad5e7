"""Date and timestamp utilities.

Calendar days are what users type; stored records carry canonical UTC
timestamps (``2024-01-15T10:30:00.000Z``).
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import MO, relativedelta

RELATIVE_PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    ones: "today", "yesterday", "tomorrow", and "this"/"last" followed by
    week, month or year, which resolve to the first day of that period.

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    offsets = {"today": 0, "yesterday": -1, "tomorrow": 1}
    if date_str in offsets:
        return today + timedelta(days=offsets[date_str])

    period = "-".join(date_str.split())
    if period in RELATIVE_PERIODS:
        return get_date_range(period, today)[0]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    Date-only strings resolve to midnight UTC; naive timestamps are taken to
    be UTC already.

    Raises:
        ValueError: If the value is not a string or not a valid ISO timestamp
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid timestamp: {value!r}")
    try:
        parsed = date_parser.isoparse(value.strip())
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid timestamp '{value}': {e}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def is_valid_timestamp(value: Any) -> bool:
    """Return True if value parses with parse_timestamp."""
    try:
        parse_timestamp(value)
    except ValueError:
        return False
    return True


def format_timestamp(value: datetime) -> str:
    """Render a datetime in the canonical stored form (``...T10:30:00.000Z``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def canonical_timestamp(value: str) -> str:
    """Re-serialize an ISO timestamp string into its canonical form."""
    return format_timestamp(parse_timestamp(value))


def start_of_day(day: date) -> datetime:
    """Midnight UTC of the given calendar day."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(day: date) -> datetime:
    """Last representable instant of the given calendar day (UTC)."""
    return datetime.combine(day, time.max, tzinfo=UTC)


def get_date_range(period: str, reference: Optional[date] = None) -> tuple[date, date]:
    """Get the first and last day of a named period.

    "this-*" periods end on the reference day; "last-*" periods cover the
    whole previous week (Monday to Sunday), month or year.

    Args:
        period: One of this-month, this-year, this-week, last-month, last-year, last-week
        reference: Day the period is relative to (defaults to today)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = reference or date.today()
    week_start = today + relativedelta(weekday=MO(-1))
    month_start = today.replace(day=1)
    year_start = today.replace(month=1, day=1)

    ranges = {
        "this-week": (week_start, today),
        "this-month": (month_start, today),
        "this-year": (year_start, today),
        "last-week": (week_start - timedelta(days=7), week_start - timedelta(days=1)),
        "last-month": (month_start - relativedelta(months=1), month_start - timedelta(days=1)),
        "last-year": (year_start - relativedelta(years=1), year_start - timedelta(days=1)),
    }
    if period not in ranges:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(RELATIVE_PERIODS)}")
    return ranges[period]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)
