"""Utility functions for debtbook."""

from debtbook.utils.date_parser import parse_date, period_range
from debtbook.utils.amount_parser import parse_amount

__all__ = ["parse_date", "period_range", "parse_amount"]
