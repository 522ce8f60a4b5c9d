"""Utility functions for equitrack."""

from equitrack.utils.date_parser import parse_date
from equitrack.utils.amount_parser import parse_amount, require_positive_amount
from equitrack.utils.resolvers import resolve_account, resolve_project

__all__ = [
    "parse_date",
    "parse_amount",
    "require_positive_amount",
    "resolve_account",
    "resolve_project",
]
