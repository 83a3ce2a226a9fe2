"""Utility functions for budgetline."""

from budgetline.utils.date_parser import normalize_date, parse_date
from budgetline.utils.amount_parser import parse_amount, to_decimal

__all__ = ["normalize_date", "parse_date", "parse_amount", "to_decimal"]
