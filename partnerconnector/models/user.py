"""
User model.

Represents a partner (or admin) registered on the platform.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partnerconnector.models.base import Base


if TYPE_CHECKING:
    from partnerconnector.models.deal import Deal


class User(Base):
    """User model - partners and admins."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "partner_level BETWEEN 1 AND 3",
            name="check_user_partner_level_range",
        ),
        CheckConstraint(
            "parent_partner_id IS NULL OR parent_partner_id <> id",
            name="check_user_not_own_parent",
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Contact data
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    first_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    last_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )

    # Referral hierarchy
    parent_partner_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    partner_level: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
        comment="Depth in hierarchy: 1 = root partner, capped at 3",
    )

    # Flags
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    parent_partner: Mapped[Optional["User"]] = relationship(
        "User", remote_side=[id], lazy="raise"
    )
    deals: Mapped[list["Deal"]] = relationship(
        "Deal", back_populates="referrer", lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email!r}, "
            f"parent_partner_id={self.parent_partner_id})>"
        )
