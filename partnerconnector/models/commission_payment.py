"""
Commission payment model.

Deal-level commission record. Historically one row held the level 0 (60%)
payment and doubled as the approval/payment status holder for the whole
deal. In the ledger flow it is the anchor record that owns PaymentSplit rows.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partnerconnector.models.base import Base
from partnerconnector.models.enums import ApprovalStatus, PaymentStatus
from partnerconnector.models.types import MoneyType, PercentType


if TYPE_CHECKING:
    from partnerconnector.models.payment_split import PaymentSplit


class CommissionPayment(Base):
    """
    Commission payment record.

    Attributes:
        deal_id: Deal the commission belongs to
        recipient_id: Partner receiving this row's amount
        level: Hierarchy level of the recipient (0, 1 or 2)
        amount: Amount for this row
        percentage: Tier percentage used for amount
        total_commission: Gross basis for the split
        gross_amount: Gross commission for the deal
        approval_status: pending/needs_approval/approved/queried/rejected
        payment_status: pending/needs_approval/approved/distributed/paid
    """

    __tablename__ = "commission_payments"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="check_commission_amount_non_negative"),
        CheckConstraint("level BETWEEN 0 AND 2", name="check_commission_level_range"),
        Index(
            "ix_commission_payments_status",
            "approval_status",
            "payment_status",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    deal_id: Mapped[int] = mapped_column(
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Amounts
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    total_commission: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    gross_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="GBP"
    )

    # Snapshot of deal data at creation time
    business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    deal_stage: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Status
    approval_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING
    )
    query_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Evidence and notes
    evidence_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Actors
    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    paid_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Timestamps
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    paid_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    transfer_reference: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=func.now()
    )

    splits: Mapped[list["PaymentSplit"]] = relationship(
        "PaymentSplit",
        back_populates="payment",
        lazy="raise",
        order_by="PaymentSplit.level",
    )

    @property
    def gross_basis(self) -> Decimal | None:
        """Gross amount the split percentages apply to."""
        return self.total_commission or self.gross_amount

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CommissionPayment(id={self.id}, deal_id={self.deal_id}, "
            f"level={self.level}, amount={self.amount}, "
            f"payment_status={self.payment_status})>"
        )
