"""Unit tests for money, datetime and exception helpers."""

from datetime import UTC, datetime
from decimal import Decimal

from partnerconnector.utils.datetime_utils import transfer_reference
from partnerconnector.utils.exceptions import (
    AlreadyDistributedError,
    CommissionError,
    HierarchyIntegrityError,
    ValidationError,
)
from partnerconnector.utils.money import percentage_of, quantize_money


class TestMoney:
    """Test money helpers."""

    def test_quantize_half_up(self):
        assert quantize_money(Decimal("2.675")) == Decimal("2.68")
        assert quantize_money(Decimal("2.665")) == Decimal("2.67")

    def test_percentage_of(self):
        assert percentage_of(Decimal("333.33"), Decimal("60")) == Decimal("200.00")


class TestTransferReference:
    """Test generated transfer references."""

    def test_format(self):
        moment = datetime(2026, 1, 19, 10, 45, 12, 123456, tzinfo=UTC)

        assert transfer_reference("PAY", moment) == "PAY_20260119T104512123"

    def test_defaults_to_now(self):
        assert transfer_reference("PAY").startswith("PAY_")


class TestExceptions:
    """Test error codes and serialization."""

    def test_to_dict(self):
        error = AlreadyDistributedError("Commission already exists", deal_id=5)

        assert error.to_dict() == {
            "code": "already_distributed",
            "message": "Commission already exists",
            "deal_id": 5,
        }

    def test_hierarchy_error_is_validation_error(self):
        error = HierarchyIntegrityError("loop")

        assert isinstance(error, ValidationError)
        assert isinstance(error, CommissionError)
        assert error.code == "hierarchy_integrity"
