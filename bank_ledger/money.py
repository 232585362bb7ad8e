"""
Money Helpers Module

Normalises monetary values to Decimal with cent precision. The ledger is
single-currency, so amounts are plain Decimals rounded with ROUND_HALF_UP.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

# Set global decimal context for financial precision
getcontext().prec = 28

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

AmountLike = Union[Decimal, int, float, str]


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert a raw value to Decimal without rounding

    Strings must be plain decimal literals ("12.50", "1e3"); nothing is
    stripped or reinterpreted. Floats go through str() so 0.1 becomes
    Decimal('0.1'), not its binary expansion.

    Raises:
        ValueError: If the value is not numeric or not finite
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal")
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Cannot convert {value!r} to Decimal")
    else:
        raise ValueError(f"Cannot convert {value!r} to Decimal")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def to_money(value: AmountLike) -> Decimal:
    """Convert to Decimal rounded to cents"""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_exact_money(value: AmountLike) -> Decimal:
    """
    Convert to Decimal cents without rounding

    Raises:
        ValueError: If the value is not numeric or has sub-cent digits
    """
    amount = to_decimal(value)
    cents = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    if cents != amount:
        raise ValueError(f"{value!r} has more than two decimal places")
    return cents


def format_money(amount: Decimal) -> str:
    """Format for display, e.g. '25,000.00'"""
    return f"{to_money(amount):,.2f}"
