"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "₹1,23,456.00"
    - "-123.45"
    - "(123.45)" (negative in parentheses)
    - "500.00 Cr" / "500.00 Dr" (suffix is dropped; direction is a separate column)

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

    amount_str = re.sub(r"\s*(?:cr|dr)\.?$", "", amount_str, flags=re.IGNORECASE)
    amount_str = re.sub(r"[$€£¥₹]|\bINR\b|\bRs\.?", "", amount_str, flags=re.IGNORECASE)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if is_negative:
        amount = -amount
    return amount


def parse_magnitude(amount_str: str) -> Decimal:
    """Parse an amount and return its positive magnitude.

    Raises:
        ValueError: If the amount cannot be parsed or is zero
    """
    amount = abs(parse_amount(amount_str))
    if amount == 0:
        raise ValueError("Amount must be non-zero")
    return amount
