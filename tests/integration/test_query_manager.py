"""Tests for commission queries and earnings summaries."""

from decimal import Decimal

import pytest

from partnerconnector.models import (
    ApprovalStatus,
    DealStage,
    PaymentStatus,
)
from partnerconnector.repositories.commission_payment_repository import (
    CommissionPaymentRepository,
)


class TestApprovalQueue:
    """Test the admin approval queue."""

    @pytest.mark.asyncio
    async def test_lists_payments_with_splits(
        self, service, queries, partner_chain, make_deal, admin
    ):
        u0, _, _ = partner_chain
        first = await make_deal(u0, business_name="First Ltd")
        second = await make_deal(u0, business_name="Second Ltd")
        p1 = await service.create_commission(first.id, Decimal("100.00"))
        p2 = await service.create_commission(second.id, Decimal("200.00"))
        await service.approve_payment(p2.id, admin.id)

        queue = await queries.get_payments_needing_approval()

        assert [p.id for p in queue] == [p1.id]
        assert [s.amount for s in queue[0].splits] == [
            Decimal("60.00"), Decimal("20.00"), Decimal("10.00"),
        ]

    @pytest.mark.asyncio
    async def test_payments_for_recipient(
        self, service, queries, partner_chain, make_deal
    ):
        u0, u1, _ = partner_chain
        deal = await make_deal(u0)
        payment = await service.create_commission(deal.id, Decimal("100.00"))

        assert [p.id for p in await queries.get_payments_for_recipient(u0.id)] == [
            payment.id
        ]
        assert await queries.get_payments_for_recipient(u1.id) == []


class TestEarningsSummary:
    """Test partner earnings totals."""

    @pytest.mark.asyncio
    async def test_split_flow_totals_follow_status(
        self, service, queries, partner_chain, make_deal, admin
    ):
        u0, u1, _ = partner_chain
        deal = await make_deal(u0)
        payment = await service.create_commission(deal.id, Decimal("1000.00"))

        summary = await queries.get_earnings_summary(u0.id)
        # The anchor's own amount is not counted on top of the level 0 split
        assert (summary.pending, summary.approved, summary.paid) == (
            Decimal("600.00"), Decimal("0.00"), Decimal("0.00"),
        )

        await service.approve_payment(payment.id, admin.id)
        summary = await queries.get_earnings_summary(u1.id)
        assert summary.approved == Decimal("200.00")
        assert summary.pending == Decimal("0.00")

        await service.mark_paid(payment.id, admin.id, "REF")
        summary = await queries.get_earnings_summary(u1.id)
        assert summary.paid == Decimal("200.00")
        assert summary.total == Decimal("200.00")

    @pytest.mark.asyncio
    async def test_legacy_flow_totals(
        self, service, queries, session, partner_chain, make_deal, admin
    ):
        u0, u1, u2 = partner_chain
        deal = await make_deal(
            u0, stage=DealStage.INVOICE_RECEIVED, actual_commission=Decimal("1000.00")
        )
        anchor = await CommissionPaymentRepository(session).create(
            deal_id=deal.id,
            recipient_id=u0.id,
            level=0,
            amount=Decimal("600.00"),
            percentage=Decimal("60.00"),
            total_commission=Decimal("1000.00"),
            approval_status=ApprovalStatus.PENDING.value,
            payment_status=PaymentStatus.NEEDS_APPROVAL.value,
        )
        await session.commit()

        summary = await queries.get_earnings_summary(u0.id)
        assert summary.pending == Decimal("600.00")

        await service.approve_payment(anchor.id, admin.id)

        # Distributed anchor is replaced by the per-level records
        summary = await queries.get_earnings_summary(u0.id)
        assert (summary.pending, summary.approved) == (
            Decimal("0.00"), Decimal("600.00"),
        )
        assert (await queries.get_earnings_summary(u2.id)).approved == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_rejected_payment_not_counted(
        self, service, queries, partner_chain, make_deal, admin
    ):
        u0, u1, _ = partner_chain
        deal = await make_deal(u0)
        payment = await service.create_commission(deal.id, Decimal("1000.00"))
        await service.reject_payment(payment.id, admin.id, "duplicate invoice")

        summary = await queries.get_earnings_summary(u1.id)

        assert summary.total == Decimal("0.00")
