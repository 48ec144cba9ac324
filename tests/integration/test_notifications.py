"""Tests for post-commit commission notifications."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from partnerconnector.models import (
    NotificationType,
    PaymentStatus,
    SplitStatus,
)
from partnerconnector.repositories.notification_repository import NotificationRepository
from partnerconnector.services.commission import CommissionDistributionService
from partnerconnector.services.commission.notifications import (
    CommissionPaidEvent,
    StatusUpdateEvent,
    emit_safely,
    event_payload,
)


async def notifications_for(session, user_id):
    """Load notifications for a user."""
    return await NotificationRepository(session).get_for_user(user_id)


class TestNotificationEvents:
    """Test event payloads."""

    def test_payload_serializes_decimals(self):
        event = CommissionPaidEvent(
            user_id=1,
            deal_id=2,
            business_name="Acme",
            amount=Decimal("600.00"),
            currency="GBP",
            transfer_reference="REF-1",
        )

        payload = event_payload(event)

        assert payload["amount"] == "600.00"
        assert "type" not in payload
        assert event.type == NotificationType.COMMISSION_PAID
        assert "REF-1" in event.message

    def test_status_update_message(self):
        event = StatusUpdateEvent(
            user_id=1, deal_id=None, entity="payment", status="needs_approval"
        )

        assert event.title == "Payment status updated"
        assert event.message == "The payment status is now needs approval."


class TestEmitSafely:
    """Test best-effort delivery."""

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self):
        dispatcher = AsyncMock()
        dispatcher.dispatch = AsyncMock(side_effect=[RuntimeError("smtp down"), None])
        events = [
            StatusUpdateEvent(user_id=1, deal_id=1, entity="deal", status="declined"),
            StatusUpdateEvent(user_id=2, deal_id=1, entity="deal", status="declined"),
        ]

        delivered = await emit_safely(dispatcher, events)

        assert delivered is False
        assert dispatcher.dispatch.await_count == 2

    @pytest.mark.asyncio
    async def test_no_dispatcher(self):
        assert await emit_safely(None, []) is True


class TestWorkflowNotifications:
    """Notifications written by the distribution service."""

    @pytest.mark.asyncio
    async def test_each_beneficiary_notified(
        self, service, session, partner_chain, make_deal, admin
    ):
        u0, u1, u2 = partner_chain
        deal = await make_deal(u0)

        payment = await service.create_commission(deal.id, Decimal("1000.00"))
        await service.approve_payment(payment.id, admin.id)
        await service.mark_paid(payment.id, admin.id, "REF-9")

        for user, amount in ((u0, "600.00"), (u1, "200.00"), (u2, "100.00")):
            notes = await notifications_for(session, user.id)
            assert [n.type for n in notes] == [
                NotificationType.COMMISSION_APPROVAL,
                NotificationType.COMMISSION_APPROVED,
                NotificationType.COMMISSION_PAID,
            ]
            assert all(n.deal_id == deal.id for n in notes)
            assert notes[-1].payload["amount"] == amount
            assert notes[-1].payload["transfer_reference"] == "REF-9"

    @pytest.mark.asyncio
    async def test_recipient_query_notifies_admins(
        self, service, session, partner_chain, make_deal, admin
    ):
        u0, _, _ = partner_chain
        deal = await make_deal(u0)
        payment = await service.create_commission(deal.id, Decimal("1000.00"))

        await service.query_payment(payment.id, u0.id, "Level 2 partner missing")

        notes = await notifications_for(session, admin.id)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.STATUS_UPDATE
        assert "Level 2 partner missing" in notes[0].message

    @pytest.mark.asyncio
    async def test_failing_dispatcher_does_not_fail_payment(
        self, session, partner_chain, make_deal, admin
    ):
        """Payment state is committed even when every notification fails."""
        notifier = AsyncMock()
        notifier.dispatch = AsyncMock(side_effect=RuntimeError("queue down"))
        service = CommissionDistributionService(session, notifier=notifier)
        u0, _, _ = partner_chain
        deal = await make_deal(u0)

        payment = await service.create_commission(deal.id, Decimal("1000.00"))
        await service.approve_payment(payment.id, admin.id)
        result = await service.mark_paid(payment.id, admin.id, "REF-1")

        assert result.deal_completed is True
        await session.refresh(payment)
        assert payment.payment_status == PaymentStatus.PAID
        view = await service.get_payment_status(payment.deal_id)
        assert [s.status for s in view.splits] == [SplitStatus.PAID] * 3
        assert notifier.dispatch.await_count == 9
