"""
Commission payment repository.

Data access layer for CommissionPayment model.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import desc, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.commission_payment import CommissionPayment
from partnerconnector.models.enums import ApprovalStatus, PaymentStatus
from partnerconnector.models.payment_split import PaymentSplit
from partnerconnector.repositories.base import BaseRepository


class CommissionPaymentRepository(BaseRepository[CommissionPayment]):
    """Commission payment repository with status-guarded updates."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission payment repository."""
        super().__init__(CommissionPayment, session)

    async def get_by_deal(self, deal_id: int) -> list[CommissionPayment]:
        """
        Get all payment records for a deal, newest first.

        Args:
            deal_id: Deal ID

        Returns:
            List of payment records
        """
        stmt = (
            select(CommissionPayment)
            .where(CommissionPayment.deal_id == deal_id)
            .order_by(desc(CommissionPayment.created_at), desc(CommissionPayment.id))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_by_deal(self, deal_id: int) -> list[CommissionPayment]:
        """
        Get payment records for a deal that still count as a distribution.

        Everything except rejected records is active.

        Args:
            deal_id: Deal ID

        Returns:
            List of active payment records
        """
        stmt = (
            select(CommissionPayment)
            .where(
                CommissionPayment.deal_id == deal_id,
                CommissionPayment.approval_status != ApprovalStatus.REJECTED.value,
                CommissionPayment.payment_status != PaymentStatus.REJECTED.value,
            )
            .order_by(CommissionPayment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(
        self,
        payment_id: int,
        expected: Iterable[PaymentStatus],
        **values: Any,
    ) -> bool:
        """
        Update a payment only if its payment status is still expected.

        Compare-and-swap on payment_status: of two concurrent callers
        holding the same snapshot, exactly one sees rowcount == 1.
        Loaded instances are not synchronized; callers refresh them
        after a successful transition.

        Args:
            payment_id: Payment ID
            expected: Payment statuses the row must currently have
            **values: Column values to set

        Returns:
            True if the row was updated
        """
        expected_values = [status.value for status in expected]
        stmt = (
            update(CommissionPayment)
            .where(
                CommissionPayment.id == payment_id,
                CommissionPayment.payment_status.in_(expected_values),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_recipient_totals(self, recipient_id: int) -> dict[str, Decimal]:
        """
        Sum standalone payment amounts for a recipient grouped by status.

        Anchor records that own splits are skipped (their splits are
        counted instead), as are distributed legacy anchors whose amount
        was re-issued as per-level records.

        Args:
            recipient_id: Partner user ID

        Returns:
            Dict mapping payment status to total amount
        """
        has_splits = exists().where(PaymentSplit.payment_id == CommissionPayment.id)
        stmt = (
            select(
                CommissionPayment.payment_status,
                func.coalesce(func.sum(CommissionPayment.amount), 0).label("total"),
            )
            .where(
                CommissionPayment.recipient_id == recipient_id,
                CommissionPayment.payment_status.not_in([
                    PaymentStatus.DISTRIBUTED.value,
                    PaymentStatus.REJECTED.value,
                ]),
                ~has_splits,
            )
            .group_by(CommissionPayment.payment_status)
        )
        result = await self.session.execute(stmt)
        return {row.payment_status: Decimal(str(row.total)) for row in result.all()}
