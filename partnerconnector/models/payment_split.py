"""
Payment split model.

Fixed ledger entry holding one beneficiary's share of an anchor payment.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partnerconnector.models.base import Base
from partnerconnector.models.enums import SplitStatus
from partnerconnector.models.types import MoneyType, PercentType


if TYPE_CHECKING:
    from partnerconnector.models.commission_payment import CommissionPayment


class PaymentSplit(Base):
    """Payment split - one row per beneficiary per anchor payment."""

    __tablename__ = "payment_splits"
    __table_args__ = (
        # One split per level: a payment never holds two split-sets
        UniqueConstraint("payment_id", "level", name="uq_payment_splits_payment_level"),
        CheckConstraint("amount >= 0", name="check_split_amount_non_negative"),
        CheckConstraint("level BETWEEN 0 AND 2", name="check_split_level_range"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    payment_id: Mapped[int] = mapped_column(
        ForeignKey("commission_payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    beneficiary_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SplitStatus.PENDING, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    payment: Mapped["CommissionPayment"] = relationship(
        "CommissionPayment", back_populates="splits", lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PaymentSplit(id={self.id}, payment_id={self.payment_id}, "
            f"level={self.level}, amount={self.amount}, status={self.status})>"
        )
