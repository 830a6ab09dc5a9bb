"""
Unified money and percentage helpers for the whole project.

Amounts are integer lovelace, percentages are integers scaled by 10000.

Usage:
    from treasury.utils.money import format_ada, scaled_percentage

    format_ada(35_000_000_000_000)     -> "35,000,000 ₳"
    scaled_percentage(9270, 10000)     -> 9270   (92.70%)
    format_percentage(9270)            -> "92.70%"
"""
from decimal import Decimal

LOVELACE_PER_ADA = 1_000_000
PERCENT_SCALE = 10000
ADA_SYMBOL = "₳"


def round_half_up_div(numerator: int, denominator: int) -> int:
    """
    Integer division rounded half away from zero (no floats involved).

    >>> round_half_up_div(5, 2)
    3
    >>> round_half_up_div(-5, 2)
    -3
    """
    if denominator == 0:
        raise ZeroDivisionError("denominator must be non-zero")
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    sign = -1 if numerator < 0 else 1
    return sign * ((2 * abs(numerator) + denominator) // (2 * denominator))


def scaled_percentage(part: int, whole: int, scale: int = PERCENT_SCALE) -> int:
    """
    part / whole expressed in 1/scale units, rounded half-up. 0 when whole <= 0.

    >>> scaled_percentage(20, 20)
    10000
    >>> scaled_percentage(1, 3)
    3333
    """
    if whole <= 0:
        return 0
    return round_half_up_div(part * scale, whole)


def format_ada(amount: int | None, include_symbol: bool = True) -> str:
    """
    Format lovelace as whole ADA with thousands separators.

    Args:
        amount: lovelace (None is treated as 0)
        include_symbol: append the ₳ symbol

    Returns:
        "35,000,000 ₳" / "35,000,000"
    """
    ada = Decimal(amount or 0) / LOVELACE_PER_ADA
    formatted = f"{ada:,.0f}"
    return f"{formatted} {ADA_SYMBOL}" if include_symbol else formatted


def format_percentage(scaled: int, decimals: int = 2) -> str:
    """Format a ×10000 percentage: 9270 -> "92.70%"."""
    value = Decimal(scaled) / (PERCENT_SCALE // 100)
    return f"{value:.{decimals}f}%"
