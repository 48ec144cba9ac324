"""
Payment split repository.

Data access layer for PaymentSplit model.
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.enums import SplitStatus
from partnerconnector.models.payment_split import PaymentSplit
from partnerconnector.repositories.base import BaseRepository


class PaymentSplitRepository(BaseRepository[PaymentSplit]):
    """Payment split repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payment split repository."""
        super().__init__(PaymentSplit, session)

    async def get_by_payment(self, payment_id: int) -> list[PaymentSplit]:
        """
        Get splits of an anchor payment ordered by level.

        Args:
            payment_id: Anchor payment ID

        Returns:
            List of splits (level 0 first)
        """
        stmt = (
            select(PaymentSplit)
            .where(PaymentSplit.payment_id == payment_id)
            .order_by(PaymentSplit.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_splits(self, payment_id: int) -> bool:
        """Check whether an anchor payment has ledger rows."""
        return await self.exists(payment_id=payment_id)

    async def get_by_deal(
        self, deal_id: int, statuses: Iterable[SplitStatus] | None = None
    ) -> list[PaymentSplit]:
        """
        Get splits for a deal, optionally filtered by status.

        Args:
            deal_id: Deal ID
            statuses: Optional status filter

        Returns:
            List of splits
        """
        stmt = select(PaymentSplit).where(PaymentSplit.deal_id == deal_id)
        if statuses is not None:
            stmt = stmt.where(PaymentSplit.status.in_([s.value for s in statuses]))
        result = await self.session.execute(stmt.order_by(PaymentSplit.id))
        return list(result.scalars().all())

    async def create_batch(self, rows: list[dict[str, Any]]) -> list[PaymentSplit]:
        """
        Insert several splits in one flush.

        Args:
            rows: Split column data

        Returns:
            Created splits in input order
        """
        splits = [PaymentSplit(**row) for row in rows]
        self.session.add_all(splits)
        await self.session.flush()
        return splits

    async def get_beneficiary_totals(self, user_id: int) -> dict[str, Decimal]:
        """
        Sum split amounts for a beneficiary grouped by status.

        Args:
            user_id: Beneficiary user ID

        Returns:
            Dict mapping split status to total amount
        """
        stmt = (
            select(
                PaymentSplit.status,
                func.coalesce(func.sum(PaymentSplit.amount), 0).label("total"),
            )
            .where(
                PaymentSplit.beneficiary_user_id == user_id,
                PaymentSplit.status != SplitStatus.REJECTED.value,
            )
            .group_by(PaymentSplit.status)
        )
        result = await self.session.execute(stmt)
        return {row.status: Decimal(str(row.total)) for row in result.all()}
