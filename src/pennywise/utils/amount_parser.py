"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re
from typing import Union


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₹123.45"
    - "1,234.56"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Remove currency symbols and thousands separators
    amount_str = re.sub(r"[₹$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert a stored JSON number into a Decimal without float noise."""
    if isinstance(value, bool):
        raise TypeError("Boolean is not an amount")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def amount_to_json(amount: Decimal) -> Union[int, float]:
    """Render a Decimal as a JSON number (integral values stay integers)."""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def format_amount(amount: Decimal) -> str:
    """Format an amount for display, e.g. ``₹1,234.50``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}₹{abs(amount):,.2f}"
