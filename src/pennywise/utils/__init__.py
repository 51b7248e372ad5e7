"""Utility functions for pennywise."""

from pennywise.utils.date_parser import parse_date, parse_timestamp, format_timestamp
from pennywise.utils.amount_parser import parse_amount, format_amount

__all__ = ["parse_date", "parse_timestamp", "format_timestamp", "parse_amount", "format_amount"]
