"""
utils/validators.py — Input validation helpers.

Validates:
- Garden IDs (API shape: string, length >= 10)
- Garden payloads (must be a JSON object)
- Month numbers (1-12)
- Simulation numbers (non-negative, finite)
- Portfolio allocations (sum to 100%)
"""

import math

from utils.garden_id import is_acceptable_garden_id
from garden_config import PORTFOLIO_CATEGORIES


def validate_garden_id(garden_id):
    """Returns an error message, or None if the ID is usable."""
    if not is_acceptable_garden_id(garden_id):
        return 'Invalid garden ID'
    return None


def validate_garden_payload(payload):
    """Returns an error message, or None if the payload is a JSON object."""
    if not isinstance(payload, dict):
        return 'Invalid garden data'
    return None


def parse_month(value, default=None):
    """
    Parse a month number from a query-string value.

    Returns `default` for missing input. Raises ValueError for anything
    outside 1-12.
    """
    if value is None or value == '':
        return default
    month = int(value)
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month


def validate_portfolio_allocations(allocations):
    """True if the four category allocations sum to 100 (±1 for rounding)."""
    try:
        total = sum(float(allocations.get(cat, 0) or 0) for cat in PORTFOLIO_CATEGORIES)
    except (TypeError, ValueError, AttributeError):
        return False
    return abs(total - 100) < 1


def parse_non_negative(value, default=None, integer=False):
    """
    Parse a non-negative number from a JSON body or query-string value.

    Returns `default` for missing input. Raises ValueError for booleans,
    non-numeric text, negatives, NaN and infinity, and for fractions when
    `integer` is set.
    """
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Expected a number, got {value!r}")
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"Expected a non-negative number, got {value!r}")
    if integer:
        if not number.is_integer():
            raise ValueError(f"Expected a whole number, got {value!r}")
        return int(number)
    return number
