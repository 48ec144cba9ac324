"""Unit tests for admin input validators."""

from decimal import Decimal

import pytest

from partnerconnector.validators import (
    validate_gross_amount,
    validate_query_notes,
)


class TestGrossAmountValidation:
    """Test gross commission amount validation."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1000", Decimal("1000.00")),
            (" 250.5 ", Decimal("250.50")),
            (Decimal("99.999"), Decimal("100.00")),
            (500, Decimal("500.00")),
        ],
    )
    def test_valid_amounts(self, value, expected):
        is_valid, amount, error = validate_gross_amount(value)

        assert is_valid is True
        assert amount == expected
        assert error is None

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "abc", "0", "-1", "NaN", "Infinity", 10.5, True, "0.001"],
    )
    def test_invalid_amounts(self, value):
        is_valid, amount, error = validate_gross_amount(value)

        assert is_valid is False
        assert amount is None
        assert error

    def test_too_large(self):
        is_valid, _, error = validate_gross_amount("10000000000")

        assert is_valid is False
        assert "too large" in error


class TestQueryNotesValidation:
    """Test query notes validation."""

    def test_strips_notes(self):
        assert validate_query_notes("  wrong amount ") == (True, "wrong amount", None)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required(self, value):
        is_valid, notes, error = validate_query_notes(value)

        assert is_valid is False
        assert notes is None
        assert error == "Query notes are required"

    def test_too_long(self):
        is_valid, _, _ = validate_query_notes("x" * 2001)

        assert is_valid is False
