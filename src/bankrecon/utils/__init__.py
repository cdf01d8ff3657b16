"""Utility functions for bankrecon."""

from bankrecon.utils.date_parser import get_date_range, parse_date, parse_statement_date
from bankrecon.utils.amount_parser import parse_amount, parse_magnitude
from bankrecon.utils.text import normalize_pattern, significant_words, tokenize

__all__ = [
    "get_date_range",
    "parse_date",
    "parse_statement_date",
    "parse_amount",
    "parse_magnitude",
    "normalize_pattern",
    "significant_words",
    "tokenize",
]
