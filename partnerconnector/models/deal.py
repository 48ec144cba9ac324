"""
Deal model.

A referred business opportunity tracked through the sales pipeline.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partnerconnector.models.base import Base
from partnerconnector.models.enums import DealStage
from partnerconnector.models.types import MoneyType


if TYPE_CHECKING:
    from partnerconnector.models.user import User


class Deal(Base):
    """
    Deal entity.

    Attributes:
        id: Primary key
        referrer_id: Partner who submitted the deal (level 0 beneficiary)
        business_name: Referred business
        deal_stage: Pipeline stage (see DealStage)
        actual_commission: Finalized gross commission, set once by an admin
    """

    __tablename__ = "deals"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    referrer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    business_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    deal_stage: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DealStage.QUOTE_REQUEST_RECEIVED,
        index=True,
    )
    actual_commission: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=func.now()
    )

    referrer: Mapped["User"] = relationship(
        "User", back_populates="deals", lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Deal(id={self.id}, referrer_id={self.referrer_id}, "
            f"stage={self.deal_stage})>"
        )
