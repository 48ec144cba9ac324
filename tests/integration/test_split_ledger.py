"""Tests for the split ledger against SQLite."""

from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from partnerconnector.models import ApprovalStatus, PaymentStatus, SplitStatus
from partnerconnector.repositories.commission_payment_repository import (
    CommissionPaymentRepository,
)
from partnerconnector.services.commission.split_calculator import CommissionSplit
from partnerconnector.services.commission.split_ledger import SplitLedger
from partnerconnector.utils.exceptions import (
    AlreadyDistributedError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def ledger(session):
    """Split ledger bound to the test session."""
    return SplitLedger(session)


@pytest.fixture
def setup_payment(session, partner_chain, make_deal):
    """Factory creating an anchor payment and the splits to store for it."""

    async def _setup():
        u0, u1, u2 = partner_chain
        deal = await make_deal(u0)
        payment = await CommissionPaymentRepository(session).create(
            deal_id=deal.id,
            recipient_id=u0.id,
            level=0,
            amount=Decimal("60.00"),
            percentage=Decimal("60.00"),
            total_commission=Decimal("100.00"),
            approval_status=ApprovalStatus.NEEDS_APPROVAL.value,
            payment_status=PaymentStatus.NEEDS_APPROVAL.value,
        )
        await session.commit()
        splits = [
            CommissionSplit(u0.id, 0, Decimal("60.00"), Decimal("60.00")),
            CommissionSplit(u1.id, 1, Decimal("20.00"), Decimal("20.00")),
            CommissionSplit(u2.id, 2, Decimal("10.00"), Decimal("10.00")),
        ]
        return payment, splits

    return _setup


class TestCreateSplits:
    """Test split-set creation."""

    @pytest.mark.asyncio
    async def test_creates_one_row_per_level(self, ledger, session, setup_payment):
        payment, splits = await setup_payment()

        rows = await ledger.create_splits(payment.id, payment.deal_id, splits)
        await session.commit()

        assert [(r.level, r.amount, r.status) for r in rows] == [
            (0, Decimal("60.00"), SplitStatus.PENDING),
            (1, Decimal("20.00"), SplitStatus.PENDING),
            (2, Decimal("10.00"), SplitStatus.PENDING),
        ]
        stored = await ledger.get_splits(payment.id)
        assert [r.id for r in stored] == [r.id for r in rows]

    @pytest.mark.asyncio
    async def test_second_split_set_rejected(self, ledger, session, setup_payment):
        payment, splits = await setup_payment()
        await ledger.create_splits(payment.id, payment.deal_id, splits)
        await session.commit()

        with pytest.raises(AlreadyDistributedError):
            await ledger.create_splits(payment.id, payment.deal_id, splits)

        assert len(await ledger.get_splits(payment.id)) == 3

    @pytest.mark.asyncio
    async def test_unique_constraint_maps_to_already_distributed(
        self, ledger, session, setup_payment
    ):
        """A racing insert that passes the existence check still fails."""
        payment, splits = await setup_payment()
        payment_id, deal_id = payment.id, payment.deal_id
        await ledger.create_splits(payment_id, deal_id, splits)
        await session.commit()

        with patch.object(
            ledger.split_repo, "has_splits", AsyncMock(return_value=False)
        ):
            with pytest.raises(AlreadyDistributedError):
                await ledger.create_splits(payment_id, deal_id, splits)

        await session.rollback()
        assert len(await ledger.get_splits(payment_id)) == 3

    @pytest.mark.asyncio
    async def test_empty_split_list(self, ledger, setup_payment):
        payment, _ = await setup_payment()

        with pytest.raises(ValidationError):
            await ledger.create_splits(payment.id, payment.deal_id, [])


class TestAdvanceStatus:
    """Test split status changes."""

    @pytest.mark.asyncio
    async def test_single_split_lifecycle(self, ledger, session, setup_payment):
        payment, splits = await setup_payment()
        rows = await ledger.create_splits(payment.id, payment.deal_id, splits)

        split = await ledger.advance_status(rows[1].id, SplitStatus.APPROVED)
        assert split.status == SplitStatus.APPROVED

        split = await ledger.advance_status(rows[1].id, SplitStatus.PAID)
        assert split.status == SplitStatus.PAID

        with pytest.raises(InvalidStateError):
            await ledger.advance_status(rows[1].id, SplitStatus.APPROVED)

    @pytest.mark.asyncio
    async def test_unknown_split(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.advance_status(999, SplitStatus.APPROVED)

    @pytest.mark.asyncio
    async def test_advance_all_is_all_or_nothing(self, ledger, session, setup_payment):
        """One split that cannot move stops every split from moving."""
        payment, splits = await setup_payment()
        rows = await ledger.create_splits(payment.id, payment.deal_id, splits)
        await ledger.advance_status(rows[0].id, SplitStatus.APPROVED)
        await ledger.advance_status(rows[0].id, SplitStatus.PAID)

        with pytest.raises(InvalidStateError):
            await ledger.advance_all(payment.id, SplitStatus.APPROVED)

        assert [r.status for r in await ledger.get_splits(payment.id)] == [
            SplitStatus.PAID,
            SplitStatus.PENDING,
            SplitStatus.PENDING,
        ]

    @pytest.mark.asyncio
    async def test_advance_all(self, ledger, setup_payment):
        payment, splits = await setup_payment()
        await ledger.create_splits(payment.id, payment.deal_id, splits)

        rows = await ledger.advance_all(payment.id, SplitStatus.APPROVED)

        assert [r.status for r in rows] == [SplitStatus.APPROVED] * 3
