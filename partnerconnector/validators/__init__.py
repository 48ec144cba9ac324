"""
Validators package.

Provides common validation functions for admin input.
"""

from partnerconnector.validators.common import (
    validate_gross_amount,
    validate_query_notes,
)


__all__ = [
    "validate_gross_amount",
    "validate_query_notes",
]
