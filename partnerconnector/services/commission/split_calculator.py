"""
Commission split calculator.

Turns a gross commission and a resolved partner chain into per-level
shares using the fixed tier table. Pure functions, no database access.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from partnerconnector.services.commission.config import COMMISSION_TIER_RATES
from partnerconnector.services.commission.hierarchy_resolver import ChainLink
from partnerconnector.utils.exceptions import ValidationError
from partnerconnector.utils.money import percentage_of


@dataclass(frozen=True)
class CommissionSplit:
    """One beneficiary's share of a gross commission."""

    user_id: int
    level: int
    percentage: Decimal
    amount: Decimal


def tier_percentage(level: int) -> Decimal:
    """
    Get tier percentage for a hierarchy level.

    Args:
        level: Hierarchy level (0 = direct referrer)

    Returns:
        Percentage as 0-100 Decimal, 0 for levels outside the scheme
    """
    return COMMISSION_TIER_RATES.get(level, Decimal("0"))


def compute_splits(
    gross_amount: Decimal, chain: Iterable[ChainLink]
) -> list[CommissionSplit]:
    """
    Compute commission splits for a partner chain.

    Only levels present in the chain get an entry; percentages of missing
    ancestors are not redistributed.

    Args:
        gross_amount: Gross commission (Decimal, > 0)
        chain: Resolved chain links

    Returns:
        Splits ordered by level ascending

    Raises:
        ValidationError: Non-Decimal or non-positive gross, duplicate levels
    """
    if not isinstance(gross_amount, Decimal):
        raise ValidationError(
            "Gross amount must be a Decimal",
            gross_amount=repr(gross_amount),
        )
    if gross_amount <= 0:
        raise ValidationError(
            "Gross amount must be greater than zero",
            gross_amount=str(gross_amount),
        )

    links = sorted(chain, key=lambda link: link.level)
    levels = [link.level for link in links]
    if len(levels) != len(set(levels)):
        raise ValidationError("Partner chain has duplicate levels", levels=levels)

    splits = []
    for link in links:
        percentage = tier_percentage(link.level)
        if percentage == 0:
            continue
        splits.append(CommissionSplit(
            user_id=link.user_id,
            level=link.level,
            percentage=percentage,
            amount=percentage_of(gross_amount, percentage),
        ))

    return splits


def total_allocated(splits: Iterable[CommissionSplit]) -> Decimal:
    """Sum of split amounts."""
    return sum((split.amount for split in splits), Decimal("0.00"))


def retained_amount(
    gross_amount: Decimal, splits: Iterable[CommissionSplit]
) -> Decimal:
    """Part of the gross commission not allocated to any partner."""
    return gross_amount - total_allocated(splits)
