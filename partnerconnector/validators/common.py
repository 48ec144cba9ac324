"""
Common validators for admin input.

Each validator returns a tuple of (is_valid, parsed_value, error_message).
"""

from decimal import Decimal, InvalidOperation

from partnerconnector.utils.money import quantize_money


# Upper bound matching DECIMAL(12, 2)
MAX_COMMISSION_AMOUNT = Decimal("9999999999.99")


def validate_gross_amount(
    value: object,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Validate gross commission amount.

    Accepts Decimal, int or numeric strings. Floats are rejected because
    they cannot represent pence exactly.

    Args:
        value: Raw amount

    Returns:
        Tuple of (is_valid, amount_rounded_to_pence, error_message)

    Examples:
        >>> validate_gross_amount("1000")
        (True, Decimal('1000.00'), None)
        >>> validate_gross_amount("-5")
        (False, None, 'Gross amount must be greater than zero')
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, None, "Gross amount is required"

    if isinstance(value, bool) or isinstance(value, float):
        return False, None, "Gross amount must be a decimal string or Decimal"

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return False, None, "Gross amount must be a number"

    if not amount.is_finite():
        return False, None, "Gross amount must be a number"

    if amount <= 0:
        return False, None, "Gross amount must be greater than zero"

    amount = quantize_money(amount)

    if amount > MAX_COMMISSION_AMOUNT:
        return False, None, "Gross amount is too large"

    if amount <= 0:
        return False, None, "Gross amount must be at least 0.01"

    return True, amount, None


def validate_query_notes(value: str | None) -> tuple[bool, str | None, str | None]:
    """
    Validate notes attached to a payment query.

    Args:
        value: Raw notes text

    Returns:
        Tuple of (is_valid, stripped_notes, error_message)
    """
    if not value or not value.strip():
        return False, None, "Query notes are required"

    notes = value.strip()
    if len(notes) > 2000:
        return False, None, "Query notes must be at most 2000 characters"

    return True, notes, None
