"""Utility functions for hisab."""

from hisab.utils.date_parser import normalize_date, parse_date
from hisab.utils.amount_parser import parse_amount

__all__ = ["normalize_date", "parse_date", "parse_amount"]
