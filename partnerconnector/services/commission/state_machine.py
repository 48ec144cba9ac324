"""
Approval and payment state machine.

Transition tables for payment records, splits and deal stages. Every
transition is one-directional; terminal states have no outgoing edges.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import TypeVar

from partnerconnector.models.enums import (
    ApprovalStatus,
    DealStage,
    PaymentStatus,
    SplitStatus,
)
from partnerconnector.utils.exceptions import InvalidStateError


S = TypeVar("S", bound=StrEnum)


PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({
        PaymentStatus.NEEDS_APPROVAL,
        PaymentStatus.QUERIED,
        PaymentStatus.REJECTED,
    }),
    PaymentStatus.NEEDS_APPROVAL: frozenset({
        PaymentStatus.APPROVED,
        PaymentStatus.DISTRIBUTED,
        PaymentStatus.QUERIED,
        PaymentStatus.REJECTED,
    }),
    PaymentStatus.APPROVED: frozenset({
        PaymentStatus.PAID,
        PaymentStatus.DISTRIBUTED,
    }),
    PaymentStatus.QUERIED: frozenset({PaymentStatus.REJECTED}),
    PaymentStatus.DISTRIBUTED: frozenset(),
    PaymentStatus.PAID: frozenset(),
    PaymentStatus.REJECTED: frozenset(),
}

APPROVAL_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({
        ApprovalStatus.NEEDS_APPROVAL,
        ApprovalStatus.APPROVED,
        ApprovalStatus.QUERIED,
        ApprovalStatus.REJECTED,
    }),
    ApprovalStatus.NEEDS_APPROVAL: frozenset({
        ApprovalStatus.APPROVED,
        ApprovalStatus.QUERIED,
        ApprovalStatus.REJECTED,
    }),
    ApprovalStatus.QUERIED: frozenset({ApprovalStatus.REJECTED}),
    ApprovalStatus.APPROVED: frozenset(),
    ApprovalStatus.REJECTED: frozenset(),
}

SPLIT_TRANSITIONS: dict[SplitStatus, frozenset[SplitStatus]] = {
    SplitStatus.PENDING: frozenset({SplitStatus.APPROVED, SplitStatus.REJECTED}),
    SplitStatus.APPROVED: frozenset({SplitStatus.PAID}),
    SplitStatus.PAID: frozenset(),
    SplitStatus.REJECTED: frozenset(),
}

DEAL_STAGE_ORDER: tuple[DealStage, ...] = (
    DealStage.QUOTE_REQUEST_RECEIVED,
    DealStage.QUOTE_SENT,
    DealStage.QUOTE_APPROVED,
    DealStage.AGREEMENT_SENT,
    DealStage.SIGNED_AWAITING_DOCS,
    DealStage.APPROVED,
    DealStage.LIVE_CONFIRM_LTR,
    DealStage.INVOICE_RECEIVED,
    DealStage.COMPLETED,
)

TERMINAL_DEAL_STAGES = frozenset({DealStage.COMPLETED, DealStage.DECLINED})


def _coerce(enum_cls: type[S], value: str, kind: str) -> S:
    """Convert stored string to enum, rejecting unknown values."""
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidStateError(
            f"Unknown {kind} status: {value}", status=value
        ) from None


def can_transition(
    table: Mapping[S, frozenset[S]], current: S, new: S
) -> bool:
    """Check whether table allows current -> new."""
    return new in table.get(current, frozenset())


def ensure_payment_transition(current: str, new: PaymentStatus) -> None:
    """
    Validate a payment status transition.

    Raises:
        InvalidStateError: Transition not allowed
    """
    state = _coerce(PaymentStatus, current, "payment")
    if not can_transition(PAYMENT_TRANSITIONS, state, new):
        raise InvalidStateError(
            f"Payment cannot move from {state.value} to {new.value}",
            current=state.value,
            requested=new.value,
        )


def ensure_approval_transition(current: str, new: ApprovalStatus) -> None:
    """
    Validate an approval status transition.

    Raises:
        InvalidStateError: Transition not allowed
    """
    state = _coerce(ApprovalStatus, current, "approval")
    if not can_transition(APPROVAL_TRANSITIONS, state, new):
        raise InvalidStateError(
            f"Approval cannot move from {state.value} to {new.value}",
            current=state.value,
            requested=new.value,
        )


def ensure_split_transition(current: str, new: SplitStatus) -> None:
    """
    Validate a split status transition.

    Raises:
        InvalidStateError: Transition not allowed
    """
    state = _coerce(SplitStatus, current, "split")
    if not can_transition(SPLIT_TRANSITIONS, state, new):
        raise InvalidStateError(
            f"Split cannot move from {state.value} to {new.value}",
            current=state.value,
            requested=new.value,
        )


def can_advance_deal(current: DealStage, new: DealStage) -> bool:
    """
    Check a deal stage transition.

    Stages move forward along DEAL_STAGE_ORDER (skipping is allowed);
    declined is reachable from any non-terminal stage.
    """
    if current in TERMINAL_DEAL_STAGES:
        return False
    if new == DealStage.DECLINED:
        return True
    return DEAL_STAGE_ORDER.index(new) > DEAL_STAGE_ORDER.index(current)


def coerce_deal_stage(value: str) -> DealStage:
    """Convert a stored deal stage, rejecting values outside the pipeline."""
    try:
        return DealStage(value)
    except ValueError:
        raise InvalidStateError(
            f"Unknown deal stage: {value}", stage=value
        ) from None


def ensure_deal_transition(
    current: str, new: DealStage, allow_completion: bool = False
) -> None:
    """
    Validate a deal stage transition.

    Args:
        current: Stored stage
        new: Requested stage
        allow_completion: Only the mark-paid step may complete a deal

    Raises:
        InvalidStateError: Transition not allowed
    """
    stage = coerce_deal_stage(current)

    if new == DealStage.COMPLETED and not allow_completion:
        raise InvalidStateError(
            "A deal is completed only when its commission is marked paid",
            current=stage.value,
        )

    if not can_advance_deal(stage, new):
        raise InvalidStateError(
            f"Deal cannot move from {stage.value} to {new.value}",
            current=stage.value,
            requested=new.value,
        )
