"""
Money helpers.

All commission arithmetic goes through Decimal with half-up rounding
to pence.
"""

from decimal import ROUND_HALF_UP, Decimal


PENNY = Decimal("0.01")
HUNDRED = Decimal("100")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return value.quantize(PENNY, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """
    Calculate percentage share of an amount.

    Args:
        amount: Gross amount
        percentage: Percentage expressed as 0-100 (e.g. Decimal("60"))

    Returns:
        Share rounded half-up to pence
    """
    return quantize_money(amount * percentage / HUNDRED)
