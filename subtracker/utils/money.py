"""
Money rounding and formatting shared across the project.

Usage:
    from subtracker.utils.money import round_money, format_money

    round_money(Decimal("10.005"))   -> Decimal("10.01")
    format_money(15.5, "USD")        -> "USD 15.50"
"""
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_money(amount) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount, currency: str) -> str:
    """
    Currency code followed by the amount with two decimals.

    Args:
        amount: int / Decimal / str
        currency: ISO currency code (USD, EUR …)
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    return f"{currency} {round_money(amount):,.2f}"
