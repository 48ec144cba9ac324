"""
Commission query management module.

Read-only views over commission payments: the admin approval queue,
a partner's payments and a partner's earnings summary.
"""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from partnerconnector.models.commission_payment import CommissionPayment
from partnerconnector.models.enums import PaymentStatus, SplitStatus
from partnerconnector.repositories.commission_payment_repository import (
    CommissionPaymentRepository,
)
from partnerconnector.repositories.payment_split_repository import (
    PaymentSplitRepository,
)
from partnerconnector.utils.money import quantize_money


# Payment statuses still waiting on an admin decision
OPEN_PAYMENT_STATUSES = (
    PaymentStatus.PENDING,
    PaymentStatus.NEEDS_APPROVAL,
    PaymentStatus.QUERIED,
)


@dataclass
class EarningsSummary:
    """Partner commission totals by status."""

    user_id: int
    pending: Decimal
    approved: Decimal
    paid: Decimal

    @property
    def total(self) -> Decimal:
        return self.pending + self.approved + self.paid


class CommissionQueryManager:
    """Manages commission query operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize query manager."""
        self.session = session
        self.payment_repo = CommissionPaymentRepository(session)
        self.split_repo = PaymentSplitRepository(session)

    async def get_payments_needing_approval(self) -> list[CommissionPayment]:
        """
        Get the admin approval queue.

        Splits are eager loaded so callers can read payment.splits.

        Returns:
            Payments in needs_approval, oldest first
        """
        stmt = (
            select(CommissionPayment)
            .options(selectinload(CommissionPayment.splits))
            .where(
                CommissionPayment.payment_status
                == PaymentStatus.NEEDS_APPROVAL.value
            )
            .order_by(CommissionPayment.created_at, CommissionPayment.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_payments_for_recipient(
        self, recipient_id: int
    ) -> list[CommissionPayment]:
        """
        Get payments addressed to a partner, newest first.

        Args:
            recipient_id: Partner user ID

        Returns:
            Payments with splits loaded
        """
        stmt = (
            select(CommissionPayment)
            .options(selectinload(CommissionPayment.splits))
            .where(CommissionPayment.recipient_id == recipient_id)
            .order_by(desc(CommissionPayment.created_at), desc(CommissionPayment.id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_earnings_summary(self, user_id: int) -> EarningsSummary:
        """
        Sum a partner's commission by status.

        Ledger-flow shares come from splits; legacy per-level records and
        split-less anchors come from payment records.

        Args:
            user_id: Partner user ID

        Returns:
            EarningsSummary
        """
        record_totals = await self.payment_repo.get_recipient_totals(user_id)
        split_totals = await self.split_repo.get_beneficiary_totals(user_id)

        zero = Decimal("0")
        pending = sum(
            (record_totals.get(status.value, zero) for status in OPEN_PAYMENT_STATUSES),
            zero,
        ) + split_totals.get(SplitStatus.PENDING.value, zero)
        approved = record_totals.get(
            PaymentStatus.APPROVED.value, zero
        ) + split_totals.get(SplitStatus.APPROVED.value, zero)
        paid = record_totals.get(
            PaymentStatus.PAID.value, zero
        ) + split_totals.get(SplitStatus.PAID.value, zero)

        return EarningsSummary(
            user_id=user_id,
            pending=quantize_money(pending),
            approved=quantize_money(approved),
            paid=quantize_money(paid),
        )
