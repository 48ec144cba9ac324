"""
Unit tests for payment, split and deal stage transitions.

Statuses only move forward; every illegal move raises InvalidStateError.
"""

import pytest

from partnerconnector.models.enums import (
    ApprovalStatus,
    DealStage,
    PaymentStatus,
    SplitStatus,
)
from partnerconnector.services.commission.state_machine import (
    PAYMENT_TRANSITIONS,
    SPLIT_TRANSITIONS,
    can_advance_deal,
    coerce_deal_stage,
    ensure_approval_transition,
    ensure_deal_transition,
    ensure_payment_transition,
    ensure_split_transition,
)
from partnerconnector.utils.exceptions import InvalidStateError


class TestPaymentTransitions:
    """Test payment status transitions."""

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (PaymentStatus.PENDING, PaymentStatus.NEEDS_APPROVAL),
            (PaymentStatus.NEEDS_APPROVAL, PaymentStatus.APPROVED),
            (PaymentStatus.NEEDS_APPROVAL, PaymentStatus.DISTRIBUTED),
            (PaymentStatus.APPROVED, PaymentStatus.PAID),
            (PaymentStatus.NEEDS_APPROVAL, PaymentStatus.QUERIED),
            (PaymentStatus.QUERIED, PaymentStatus.REJECTED),
        ],
    )
    def test_allowed(self, current, new):
        ensure_payment_transition(current.value, new)

    @pytest.mark.parametrize(
        ("current", "new"),
        [
            (PaymentStatus.PAID, PaymentStatus.APPROVED),
            (PaymentStatus.APPROVED, PaymentStatus.NEEDS_APPROVAL),
            (PaymentStatus.DISTRIBUTED, PaymentStatus.APPROVED),
            (PaymentStatus.PENDING, PaymentStatus.PAID),
            (PaymentStatus.NEEDS_APPROVAL, PaymentStatus.PAID),
            (PaymentStatus.REJECTED, PaymentStatus.PENDING),
            (PaymentStatus.QUERIED, PaymentStatus.APPROVED),
        ],
    )
    def test_rejected(self, current, new):
        with pytest.raises(InvalidStateError):
            ensure_payment_transition(current.value, new)

    def test_terminal_states_have_no_exits(self):
        for status in (
            PaymentStatus.PAID,
            PaymentStatus.DISTRIBUTED,
            PaymentStatus.REJECTED,
        ):
            assert PAYMENT_TRANSITIONS[status] == frozenset()

    def test_no_status_moves_backward(self):
        """No edge points back to a state that can reach the source."""
        for source, targets in PAYMENT_TRANSITIONS.items():
            for target in targets:
                assert source not in PAYMENT_TRANSITIONS[target]

    def test_unknown_status(self):
        with pytest.raises(InvalidStateError):
            ensure_payment_transition("archived", PaymentStatus.PAID)


class TestApprovalTransitions:
    """Test approval status transitions."""

    def test_pending_can_be_approved(self):
        ensure_approval_transition(ApprovalStatus.PENDING.value, ApprovalStatus.APPROVED)

    def test_approved_is_final(self):
        with pytest.raises(InvalidStateError):
            ensure_approval_transition(
                ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED
            )


class TestSplitTransitions:
    """Test split status transitions."""

    def test_happy_path(self):
        ensure_split_transition(SplitStatus.PENDING.value, SplitStatus.APPROVED)
        ensure_split_transition(SplitStatus.APPROVED.value, SplitStatus.PAID)

    def test_paid_cannot_return_to_approved(self):
        with pytest.raises(InvalidStateError):
            ensure_split_transition(SplitStatus.PAID.value, SplitStatus.APPROVED)

    def test_pending_cannot_skip_to_paid(self):
        with pytest.raises(InvalidStateError):
            ensure_split_transition(SplitStatus.PENDING.value, SplitStatus.PAID)

    def test_no_status_moves_backward(self):
        for source, targets in SPLIT_TRANSITIONS.items():
            for target in targets:
                assert source not in SPLIT_TRANSITIONS[target]


class TestDealStageTransitions:
    """Test deal pipeline transitions."""

    def test_forward_move(self):
        ensure_deal_transition(
            DealStage.QUOTE_SENT.value, DealStage.QUOTE_APPROVED
        )

    def test_skipping_forward_is_allowed(self):
        assert can_advance_deal(DealStage.QUOTE_SENT, DealStage.APPROVED)

    def test_backward_move_rejected(self):
        with pytest.raises(InvalidStateError):
            ensure_deal_transition(DealStage.APPROVED.value, DealStage.QUOTE_SENT)

    def test_declined_from_any_open_stage(self):
        for stage in DealStage:
            if stage in (DealStage.COMPLETED, DealStage.DECLINED):
                continue
            assert can_advance_deal(stage, DealStage.DECLINED)

    def test_terminal_stages_are_final(self):
        assert not can_advance_deal(DealStage.DECLINED, DealStage.QUOTE_SENT)
        assert not can_advance_deal(DealStage.COMPLETED, DealStage.DECLINED)

    def test_completion_requires_mark_paid(self):
        with pytest.raises(InvalidStateError):
            ensure_deal_transition(
                DealStage.INVOICE_RECEIVED.value, DealStage.COMPLETED
            )

        ensure_deal_transition(
            DealStage.INVOICE_RECEIVED.value,
            DealStage.COMPLETED,
            allow_completion=True,
        )

    def test_unknown_stage(self):
        with pytest.raises(InvalidStateError):
            ensure_deal_transition("live", DealStage.COMPLETED, allow_completion=True)

    def test_coerce_deal_stage(self):
        assert coerce_deal_stage("approved") == DealStage.APPROVED

        with pytest.raises(InvalidStateError, match="Unknown deal stage: live"):
            coerce_deal_stage("live")
