"""Amount parsing and validation utilities."""

from decimal import Decimal, InvalidOperation
import re

from equitrack.domain.errors import ValidationError, invalid_amount


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "1500"
    - "$1,500.00"
    - "Rs 1,500"
    - "(1500)" (negative in parentheses)

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

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥₨]|\b(?:Rs|PKR|USD)\b\.?", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
    return -amount if is_negative else amount


def require_positive_amount(amount: Decimal | int | str | None) -> Decimal:
    """Return amount as a Decimal, rejecting missing, NaN, infinite or non-positive values.

    Raises:
        ValidationError: If the amount is not a positive finite number
    """
    if amount is None:
        raise ValidationError(invalid_amount(amount))
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError(invalid_amount(amount))
    if not value.is_finite() or value <= 0:
        raise ValidationError(invalid_amount(amount))
    return value
