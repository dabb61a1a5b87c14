"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a positive amount string into a Decimal.

    Handles "123.45", "1,234.56" and amounts prefixed with a currency symbol
    ("$123.45", "Rs 500", "৳250"). Transaction types carry the direction, so
    negative amounts are rejected.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount, rounded to two places

    Raises:
        ValueError: If amount string cannot be parsed or is not positive
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    cleaned = re.sub(r"^(rs\.?|[$€£¥₹৳])\s*", "", amount_str.strip(), flags=re.IGNORECASE)
    cleaned = cleaned.replace(",", "").strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Amount must be a positive number, got '{amount_str}'")
    return amount.quantize(Decimal("0.01"))
