"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def transfer_reference(prefix: str, moment: datetime | None = None) -> str:
    """
    Build a fallback bank transfer reference.

    Args:
        prefix: Reference prefix (e.g. "PAY")
        moment: Timestamp to encode, defaults to now

    Returns:
        Reference like "PAY_20260119T104512123"
    """
    moment = moment or utc_now()
    return f"{prefix}_{moment.strftime('%Y%m%dT%H%M%S')}{moment.microsecond // 1000:03d}"
