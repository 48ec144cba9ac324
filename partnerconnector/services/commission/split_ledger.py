"""
Split ledger.

Stores one PaymentSplit per beneficiary of an anchor payment and
advances them through the split state machine. Participates in the
caller's transaction and never commits.
"""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.models.enums import SplitStatus
from partnerconnector.models.payment_split import PaymentSplit
from partnerconnector.repositories.payment_split_repository import (
    PaymentSplitRepository,
)
from partnerconnector.services.commission.split_calculator import (
    CommissionSplit,
)
from partnerconnector.services.commission.state_machine import (
    ensure_split_transition,
)
from partnerconnector.utils.exceptions import (
    AlreadyDistributedError,
    NotFoundError,
    ValidationError,
)


class SplitLedger:
    """Ledger of per-beneficiary commission splits."""

    def __init__(
        self,
        session: AsyncSession,
        split_repo: PaymentSplitRepository | None = None,
    ) -> None:
        """Initialize split ledger."""
        self.session = session
        self.split_repo = split_repo or PaymentSplitRepository(session)

    async def create_splits(
        self,
        payment_id: int,
        deal_id: int,
        splits: list[CommissionSplit],
    ) -> list[PaymentSplit]:
        """
        Insert the split-set for an anchor payment.

        All rows are flushed together; a failure leaves nothing behind once
        the surrounding transaction rolls back.

        Args:
            payment_id: Anchor payment ID
            deal_id: Deal ID
            splits: Computed splits

        Returns:
            Created ledger rows ordered by level

        Raises:
            AlreadyDistributedError: Payment already has splits
            ValidationError: Empty split list
        """
        if not splits:
            raise ValidationError(
                "At least one split is required", payment_id=payment_id
            )

        if await self.split_repo.has_splits(payment_id):
            raise AlreadyDistributedError(
                "Splits already exist for this payment", payment_id=payment_id
            )

        try:
            rows = await self.split_repo.create_batch([
                {
                    "payment_id": payment_id,
                    "deal_id": deal_id,
                    "beneficiary_user_id": split.user_id,
                    "level": split.level,
                    "percentage": split.percentage,
                    "amount": split.amount,
                    "status": SplitStatus.PENDING.value,
                }
                for split in sorted(splits, key=lambda s: s.level)
            ])
        except IntegrityError as e:
            # Concurrent writer inserted the same (payment_id, level)
            raise AlreadyDistributedError(
                "Splits already exist for this payment", payment_id=payment_id
            ) from e

        logger.info(
            "Payment splits created",
            extra={
                "payment_id": payment_id,
                "deal_id": deal_id,
                "levels": [row.level for row in rows],
                "amounts": [str(row.amount) for row in rows],
            },
        )

        return rows

    async def get_splits(self, payment_id: int) -> list[PaymentSplit]:
        """Get splits of an anchor payment ordered by level."""
        return await self.split_repo.get_by_payment(payment_id)

    async def advance_status(
        self, split_id: int, new_status: SplitStatus
    ) -> PaymentSplit:
        """
        Move a single split to a new status.

        Raises:
            NotFoundError: Split does not exist
            InvalidStateError: Transition not allowed
        """
        split = await self.split_repo.get_by_id(split_id, for_update=True)
        if split is None:
            raise NotFoundError("Payment split not found", split_id=split_id)

        ensure_split_transition(split.status, new_status)
        split.status = new_status.value
        await self.session.flush()

        logger.debug(
            "Payment split advanced",
            extra={"split_id": split_id, "status": new_status.value},
        )

        return split

    async def advance_all(
        self, payment_id: int, new_status: SplitStatus
    ) -> list[PaymentSplit]:
        """
        Move every split of a payment to a new status.

        Each split is validated first, so either all rows move or none do.

        Raises:
            InvalidStateError: Any split cannot make the transition
        """
        splits = await self.split_repo.get_by_payment(payment_id)
        for split in splits:
            ensure_split_transition(split.status, new_status)

        for split in splits:
            split.status = new_status.value
        await self.session.flush()

        logger.debug(
            "Payment splits advanced",
            extra={
                "payment_id": payment_id,
                "status": new_status.value,
                "count": len(splits),
            },
        )

        return splits
