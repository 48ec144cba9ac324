"""
Commission distribution service.

Entry point for admin commission actions: creating a deal's commission,
approving it, marking it paid, and the side transitions (submit, query,
reject, deal stage changes).

Approval reconciles two flows and never runs both for one payment:
- split ledger: the payment owns PaymentSplit rows computed at creation,
  approval only advances their status;
- legacy distribution: the payment has no splits, so it is marked
  distributed and fresh per-level payment records are issued from the
  current partner chain.

Every mutating method runs in one transaction. Status changes go through a
compare-and-swap on payment_status so concurrent duplicates fail with
InvalidStateError instead of paying twice. Notifications are sent only
after commit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from partnerconnector.config.settings import settings
from partnerconnector.models.commission_payment import CommissionPayment
from partnerconnector.models.deal import Deal
from partnerconnector.models.enums import (
    ApprovalStatus,
    CommissionFlow,
    DealStage,
    PaymentStatus,
    SplitStatus,
)
from partnerconnector.models.payment_split import PaymentSplit
from partnerconnector.repositories.admin_audit_log_repository import (
    AdminAuditLogRepository,
)
from partnerconnector.repositories.commission_payment_repository import (
    CommissionPaymentRepository,
)
from partnerconnector.repositories.deal_repository import DealRepository
from partnerconnector.repositories.payment_split_repository import (
    PaymentSplitRepository,
)
from partnerconnector.repositories.user_repository import UserRepository
from partnerconnector.services.base_service import BaseService, transaction
from partnerconnector.services.commission.config import (
    COMMISSION_CREATED_STAGE,
    COMMISSION_ELIGIBLE_STAGES,
)
from partnerconnector.services.commission.hierarchy_resolver import (
    ChainLink,
    HierarchyResolver,
)
from partnerconnector.services.commission.notifications import (
    CommissionApprovalEvent,
    CommissionApprovedEvent,
    CommissionPaidEvent,
    NotificationDispatcher,
    NotificationEvent,
    StatusUpdateEvent,
    emit_safely,
)
from partnerconnector.services.commission.split_calculator import (
    CommissionSplit,
    compute_splits,
    retained_amount,
)
from partnerconnector.services.commission.split_ledger import SplitLedger
from partnerconnector.services.commission.state_machine import (
    can_advance_deal,
    coerce_deal_stage,
    ensure_approval_transition,
    ensure_deal_transition,
    ensure_payment_transition,
)
from partnerconnector.utils.datetime_utils import transfer_reference, utc_now
from partnerconnector.utils.exceptions import (
    AlreadyDistributedError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from partnerconnector.validators.common import (
    validate_gross_amount,
    validate_query_notes,
)


# Statuses meaning the payment was already handled by an approval
PROCESSED_STATUSES = frozenset({
    PaymentStatus.APPROVED,
    PaymentStatus.DISTRIBUTED,
    PaymentStatus.PAID,
})


@dataclass
class ApprovalResult:
    """Result of approving a commission payment."""

    payment_id: int
    deal_id: int
    flow: CommissionFlow
    splits: list[PaymentSplit] = field(default_factory=list)
    distributed_records: list[CommissionPayment] = field(default_factory=list)


@dataclass
class PaymentResult:
    """Result of marking a commission payment paid."""

    payment_id: int
    deal_id: int
    transfer_reference: str
    paid_at: datetime
    splits: list[PaymentSplit] = field(default_factory=list)
    deal_completed: bool = False


@dataclass
class PaymentStatusView:
    """Current commission state of a deal."""

    has_payment: bool
    payment: CommissionPayment | None = None
    splits: list[PaymentSplit] = field(default_factory=list)


class CommissionDistributionService(BaseService):
    """
    Commission distribution orchestrator.

    Collaborators are injectable so the service can be tested with mocks.
    """

    def __init__(
        self,
        session: AsyncSession,
        payment_repo: CommissionPaymentRepository | None = None,
        split_repo: PaymentSplitRepository | None = None,
        deal_repo: DealRepository | None = None,
        user_repo: UserRepository | None = None,
        audit_repo: AdminAuditLogRepository | None = None,
        resolver: HierarchyResolver | None = None,
        ledger: SplitLedger | None = None,
        notifier: NotificationDispatcher | None = None,
    ) -> None:
        """
        Initialize commission distribution service.

        Args:
            session: Async database session
            notifier: Dispatcher for post-commit notifications
        """
        super().__init__(session)
        self.payment_repo = payment_repo or CommissionPaymentRepository(session)
        self.split_repo = split_repo or PaymentSplitRepository(session)
        self.deal_repo = deal_repo or DealRepository(session)
        self.user_repo = user_repo or UserRepository(session)
        self.audit_repo = audit_repo or AdminAuditLogRepository(session)
        self.resolver = resolver or HierarchyResolver(session, self.user_repo)
        self.ledger = ledger or SplitLedger(session, self.split_repo)
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def create_commission(
        self,
        deal_id: int,
        gross_amount: Decimal | str | int,
        created_by: int | None = None,
        evidence_url: str | None = None,
        notes: str | None = None,
        currency: str | None = None,
    ) -> CommissionPayment:
        """
        Finalize a deal's gross commission.

        Creates the anchor payment (level 0 share, needs_approval) together
        with one split per partner in the referrer's chain.

        Args:
            deal_id: Deal ID
            gross_amount: Gross commission, Decimal or numeric string
            created_by: Admin user ID
            evidence_url: Link to invoice or other evidence
            notes: Free-form admin notes
            currency: Currency code, defaults to settings.default_currency

        Returns:
            Anchor payment record

        Raises:
            ValidationError: Invalid amount or missing referrer
            NotFoundError: Deal does not exist
            InvalidStateError: Deal stage does not allow commission
            AlreadyDistributedError: Deal already has an active payment
        """
        payment, events = await self._create_commission(
            deal_id, gross_amount, created_by, evidence_url, notes, currency
        )
        await emit_safely(self.notifier, events)
        return payment

    async def approve_payment(
        self, payment_id: int, approver_id: int
    ) -> ApprovalResult:
        """
        Approve a payment awaiting approval.

        Args:
            payment_id: Anchor payment ID
            approver_id: Admin user ID

        Returns:
            ApprovalResult describing the flow used

        Raises:
            NotFoundError: Payment or deal does not exist
            InvalidStateError: Payment not in needs_approval
            AlreadyDistributedError: Deal already has approved/paid records
        """
        result, events = await self._approve_payment(payment_id, approver_id)
        await emit_safely(self.notifier, events)
        return result

    async def mark_paid(
        self,
        payment_id: int,
        payer_id: int,
        transfer_reference: str | None = None,
    ) -> PaymentResult:
        """
        Record that an approved payment was paid.

        Args:
            payment_id: Payment ID
            payer_id: Admin user ID
            transfer_reference: Bank transfer reference, generated if empty

        Returns:
            PaymentResult

        Raises:
            NotFoundError: Payment does not exist
            InvalidStateError: Payment not approved, or deal declined
        """
        result, events = await self._mark_paid(
            payment_id, payer_id, transfer_reference
        )
        await emit_safely(self.notifier, events)
        return result

    async def submit_for_approval(
        self, payment_id: int, actor_id: int
    ) -> CommissionPayment:
        """Move a pending payment to needs_approval."""
        return await self._submit_for_approval(payment_id, actor_id)

    async def query_payment(
        self, payment_id: int, actor_id: int, notes: str
    ) -> CommissionPayment:
        """
        Flag a payment as queried.

        Allowed for the payment's recipient and for admins. Anyone else
        gets NotFoundError.

        Raises:
            ValidationError: Notes missing or too long
            NotFoundError: Payment not found or not visible to actor
            InvalidStateError: Payment already approved, paid or closed
        """
        payment, events = await self._query_payment(payment_id, actor_id, notes)
        await emit_safely(self.notifier, events)
        return payment

    async def reject_payment(
        self, payment_id: int, admin_id: int, reason: str | None = None
    ) -> CommissionPayment:
        """
        Reject a payment and its pending splits.

        A rejected payment no longer blocks a new commission for its deal.

        Raises:
            NotFoundError: Payment does not exist
            InvalidStateError: Payment already approved or paid
        """
        payment, events = await self._reject_payment(payment_id, admin_id, reason)
        await emit_safely(self.notifier, events)
        return payment

    async def advance_deal_stage(
        self, deal_id: int, stage: DealStage | str, actor_id: int | None = None
    ) -> Deal:
        """
        Move a deal along the pipeline.

        Raises:
            ValidationError: Unknown stage
            NotFoundError: Deal does not exist
            InvalidStateError: Backward move, move out of a terminal stage,
                or completion outside mark_paid
        """
        deal, events = await self._advance_deal_stage(deal_id, stage, actor_id)
        await emit_safely(self.notifier, events)
        return deal

    async def get_payment_status(self, deal_id: int) -> PaymentStatusView:
        """
        Get the active commission payment of a deal and its splits.

        The active payment is the earliest non-rejected record, which is
        the anchor in both flows.

        Args:
            deal_id: Deal ID

        Returns:
            PaymentStatusView, has_payment False when nothing is active
        """
        active = await self.payment_repo.get_active_by_deal(deal_id)
        if not active:
            return PaymentStatusView(has_payment=False)

        payment = active[0]
        splits = await self.ledger.get_splits(payment.id)
        return PaymentStatusView(has_payment=True, payment=payment, splits=splits)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @transaction
    async def _create_commission(
        self,
        deal_id: int,
        gross_amount: Decimal | str | int,
        created_by: int | None,
        evidence_url: str | None,
        notes: str | None,
        currency: str | None,
    ) -> tuple[CommissionPayment, list[NotificationEvent]]:
        is_valid, gross, error = validate_gross_amount(gross_amount)
        if not is_valid:
            raise ValidationError(error or "Invalid gross amount", deal_id=deal_id)

        deal = await self.deal_repo.get_by_id(deal_id, for_update=True)
        if deal is None:
            raise NotFoundError("Deal not found", deal_id=deal_id)

        stage = coerce_deal_stage(deal.deal_stage)
        if stage not in COMMISSION_ELIGIBLE_STAGES:
            raise InvalidStateError(
                f"Commission cannot be created for a deal in stage {stage.value}",
                deal_id=deal_id,
                stage=stage.value,
            )

        active = await self.payment_repo.get_active_by_deal(deal_id)
        if active:
            raise AlreadyDistributedError(
                "Commission already exists for this deal",
                deal_id=deal_id,
                payment_id=active[0].id,
            )

        chain = await self._resolve_referrer_chain(deal)
        splits = compute_splits(gross, chain)
        owner_split = splits[0]
        currency = currency or settings.default_currency

        payment = await self.payment_repo.create(
            deal_id=deal.id,
            recipient_id=deal.referrer_id,
            level=owner_split.level,
            amount=owner_split.amount,
            percentage=owner_split.percentage,
            total_commission=gross,
            gross_amount=gross,
            currency=currency,
            business_name=deal.business_name,
            deal_stage=deal.deal_stage,
            approval_status=ApprovalStatus.NEEDS_APPROVAL.value,
            payment_status=PaymentStatus.NEEDS_APPROVAL.value,
            evidence_url=evidence_url,
            notes=notes,
            created_by=created_by,
        )

        ledger_rows = await self.ledger.create_splits(payment.id, deal.id, splits)

        deal.actual_commission = gross
        if stage != COMMISSION_CREATED_STAGE and can_advance_deal(
            stage, COMMISSION_CREATED_STAGE
        ):
            deal.deal_stage = COMMISSION_CREATED_STAGE.value
        await self.session.flush()

        await self.audit_repo.log(
            actor_id=created_by,
            action="create_commission",
            entity_type="payment",
            entity_id=payment.id,
            details={
                "deal_id": deal.id,
                "gross_amount": str(gross),
                "levels": [row.level for row in ledger_rows],
                "retained_amount": str(retained_amount(gross, splits)),
            },
        )

        self.logger.info(
            "Commission created",
            extra={
                "deal_id": deal.id,
                "payment_id": payment.id,
                "gross_amount": str(gross),
                "splits_count": len(ledger_rows),
            },
        )

        events: list[NotificationEvent] = [
            CommissionApprovalEvent(
                user_id=row.beneficiary_user_id,
                deal_id=deal.id,
                business_name=deal.business_name,
                level=row.level,
                amount=row.amount,
                percentage=row.percentage,
                currency=currency,
            )
            for row in ledger_rows
        ]
        return payment, events

    @transaction
    async def _approve_payment(
        self, payment_id: int, approver_id: int
    ) -> tuple[ApprovalResult, list[NotificationEvent]]:
        payment = await self._get_payment(payment_id)

        if payment.payment_status != PaymentStatus.NEEDS_APPROVAL:
            if payment.payment_status in PROCESSED_STATUSES:
                raise InvalidStateError(
                    "Payment already processed",
                    payment_id=payment_id,
                    payment_status=payment.payment_status,
                )
            raise InvalidStateError(
                "Only payments awaiting approval can be approved",
                payment_id=payment_id,
                payment_status=payment.payment_status,
            )

        deal = await self.deal_repo.get_by_id(payment.deal_id)
        if deal is None:
            raise NotFoundError("Deal not found", deal_id=payment.deal_id)

        now = utc_now()
        if await self.split_repo.has_splits(payment.id):
            result, events = await self._approve_with_splits(
                payment, deal, approver_id, now
            )
        else:
            result, events = await self._approve_legacy(
                payment, deal, approver_id, now
            )

        await self.audit_repo.log(
            actor_id=approver_id,
            action="approve_payment",
            entity_type="payment",
            entity_id=payment.id,
            details={
                "deal_id": deal.id,
                "flow": result.flow.value,
                "split_ids": [split.id for split in result.splits],
                "distributed_record_ids": [
                    record.id for record in result.distributed_records
                ],
            },
        )

        self.logger.info(
            "Commission payment approved",
            extra={
                "payment_id": payment.id,
                "deal_id": deal.id,
                "approver_id": approver_id,
                "flow": result.flow.value,
            },
        )

        return result, events

    async def _approve_with_splits(
        self,
        payment: CommissionPayment,
        deal: Deal,
        approver_id: int,
        now: datetime,
    ) -> tuple[ApprovalResult, list[NotificationEvent]]:
        ensure_payment_transition(payment.payment_status, PaymentStatus.APPROVED)
        await self._swap_status(
            payment,
            [PaymentStatus.NEEDS_APPROVAL],
            payment_status=PaymentStatus.APPROVED.value,
            approval_status=ApprovalStatus.APPROVED.value,
            approved_by=approver_id,
            approved_at=now,
        )

        splits = await self.ledger.advance_all(payment.id, SplitStatus.APPROVED)

        events: list[NotificationEvent] = [
            CommissionApprovedEvent(
                user_id=split.beneficiary_user_id,
                deal_id=deal.id,
                business_name=deal.business_name,
                level=split.level,
                amount=split.amount,
                currency=payment.currency,
            )
            for split in splits
        ]
        return (
            ApprovalResult(
                payment_id=payment.id,
                deal_id=deal.id,
                flow=CommissionFlow.SPLIT_LEDGER,
                splits=splits,
            ),
            events,
        )

    async def _approve_legacy(
        self,
        payment: CommissionPayment,
        deal: Deal,
        approver_id: int,
        now: datetime,
    ) -> tuple[ApprovalResult, list[NotificationEvent]]:
        gross = payment.gross_basis or deal.actual_commission
        if gross is None or gross <= 0:
            raise ValidationError(
                "Deal has no gross commission to distribute",
                payment_id=payment.id,
                deal_id=deal.id,
            )

        await self._ensure_not_distributed(deal.id, exclude_payment_id=payment.id)

        ensure_payment_transition(payment.payment_status, PaymentStatus.DISTRIBUTED)
        await self._swap_status(
            payment,
            [PaymentStatus.NEEDS_APPROVAL],
            payment_status=PaymentStatus.DISTRIBUTED.value,
            approval_status=ApprovalStatus.APPROVED.value,
            approved_by=approver_id,
            approved_at=now,
        )

        chain = await self._resolve_referrer_chain(deal)
        splits = compute_splits(Decimal(gross), chain)

        records = []
        for split in splits:
            records.append(await self._issue_level_record(
                payment, deal, split, Decimal(gross), approver_id, now
            ))

        self.logger.info(
            "Legacy commission distributed",
            extra={
                "payment_id": payment.id,
                "deal_id": deal.id,
                "gross_amount": str(gross),
                "records_count": len(records),
            },
        )

        events: list[NotificationEvent] = [
            CommissionApprovedEvent(
                user_id=record.recipient_id,
                deal_id=deal.id,
                business_name=deal.business_name,
                level=record.level,
                amount=record.amount,
                currency=record.currency,
            )
            for record in records
        ]
        return (
            ApprovalResult(
                payment_id=payment.id,
                deal_id=deal.id,
                flow=CommissionFlow.LEGACY_DISTRIBUTION,
                distributed_records=records,
            ),
            events,
        )

    async def _issue_level_record(
        self,
        anchor: CommissionPayment,
        deal: Deal,
        split: CommissionSplit,
        gross: Decimal,
        approver_id: int,
        now: datetime,
    ) -> CommissionPayment:
        """Create an approved per-level record for the legacy flow."""
        return await self.payment_repo.create(
            deal_id=deal.id,
            recipient_id=split.user_id,
            level=split.level,
            amount=split.amount,
            percentage=split.percentage,
            total_commission=gross,
            gross_amount=gross,
            currency=anchor.currency,
            business_name=deal.business_name,
            deal_stage=deal.deal_stage,
            approval_status=ApprovalStatus.APPROVED.value,
            payment_status=PaymentStatus.APPROVED.value,
            evidence_url=anchor.evidence_url,
            notes=f"Level {split.level} ({split.percentage}% of {gross})",
            created_by=approver_id,
            approved_by=approver_id,
            approved_at=now,
        )

    @transaction
    async def _mark_paid(
        self,
        payment_id: int,
        payer_id: int,
        reference: str | None,
    ) -> tuple[PaymentResult, list[NotificationEvent]]:
        payment = await self._get_payment(payment_id)

        if payment.payment_status == PaymentStatus.PAID:
            raise InvalidStateError(
                "Payment already processed",
                payment_id=payment_id,
                payment_status=payment.payment_status,
            )
        if (
            payment.payment_status != PaymentStatus.APPROVED
            or payment.approved_by is None
        ):
            raise InvalidStateError(
                "Payment must be approved first",
                payment_id=payment_id,
                payment_status=payment.payment_status,
            )
        ensure_payment_transition(payment.payment_status, PaymentStatus.PAID)

        deal = await self.deal_repo.get_by_id(payment.deal_id, for_update=True)
        if deal is not None and deal.deal_stage == DealStage.DECLINED:
            raise InvalidStateError(
                "Commission for a declined deal cannot be paid",
                payment_id=payment_id,
                deal_id=deal.id,
            )

        reference = (reference or "").strip() or transfer_reference(
            settings.transfer_reference_prefix
        )
        now = utc_now()
        await self._swap_status(
            payment,
            [PaymentStatus.APPROVED],
            payment_status=PaymentStatus.PAID.value,
            paid_by=payer_id,
            paid_at=now,
            transfer_reference=reference,
        )

        splits = await self.ledger.get_splits(payment.id)
        if splits:
            splits = await self.ledger.advance_all(payment.id, SplitStatus.PAID)

        outstanding = await self.payment_repo.count(
            deal_id=payment.deal_id, payment_status=PaymentStatus.APPROVED.value
        )

        deal_completed = False
        if deal is None:
            self.logger.warning(
                "Paid commission has no deal to complete",
                extra={"payment_id": payment.id, "deal_id": payment.deal_id},
            )
        elif outstanding:
            # Sibling level records from a legacy distribution still unpaid
            self.logger.info(
                "Deal left open until remaining level records are paid",
                extra={"deal_id": deal.id, "outstanding": outstanding},
            )
        elif deal.deal_stage != DealStage.COMPLETED:
            ensure_deal_transition(
                deal.deal_stage, DealStage.COMPLETED, allow_completion=True
            )
            deal.deal_stage = DealStage.COMPLETED.value
            await self.session.flush()
            deal_completed = True

        await self.audit_repo.log(
            actor_id=payer_id,
            action="mark_paid",
            entity_type="payment",
            entity_id=payment.id,
            details={
                "deal_id": payment.deal_id,
                "transfer_reference": reference,
                "split_ids": [split.id for split in splits],
            },
        )

        self.logger.info(
            "Commission payment marked paid",
            extra={
                "payment_id": payment.id,
                "deal_id": payment.deal_id,
                "payer_id": payer_id,
                "amount": str(payment.amount),
                "transfer_reference": reference,
            },
        )

        business_name = deal.business_name if deal else payment.business_name
        if splits:
            events: list[NotificationEvent] = [
                CommissionPaidEvent(
                    user_id=split.beneficiary_user_id,
                    deal_id=payment.deal_id,
                    business_name=business_name,
                    amount=split.amount,
                    currency=payment.currency,
                    transfer_reference=reference,
                )
                for split in splits
            ]
        else:
            events = [
                CommissionPaidEvent(
                    user_id=payment.recipient_id,
                    deal_id=payment.deal_id,
                    business_name=business_name,
                    amount=payment.amount,
                    currency=payment.currency,
                    transfer_reference=reference,
                )
            ]

        return (
            PaymentResult(
                payment_id=payment.id,
                deal_id=payment.deal_id,
                transfer_reference=reference,
                paid_at=now,
                splits=splits,
                deal_completed=deal_completed,
            ),
            events,
        )

    @transaction
    async def _submit_for_approval(
        self, payment_id: int, actor_id: int
    ) -> CommissionPayment:
        payment = await self._get_payment(payment_id)
        ensure_payment_transition(
            payment.payment_status, PaymentStatus.NEEDS_APPROVAL
        )
        ensure_approval_transition(
            payment.approval_status, ApprovalStatus.NEEDS_APPROVAL
        )

        await self._swap_status(
            payment,
            [PaymentStatus.PENDING],
            payment_status=PaymentStatus.NEEDS_APPROVAL.value,
            approval_status=ApprovalStatus.NEEDS_APPROVAL.value,
        )

        await self.audit_repo.log(
            actor_id=actor_id,
            action="submit_for_approval",
            entity_type="payment",
            entity_id=payment.id,
            details={"deal_id": payment.deal_id},
        )

        self.logger.info(
            "Commission payment submitted for approval",
            extra={"payment_id": payment.id, "actor_id": actor_id},
        )

        return payment

    @transaction
    async def _query_payment(
        self, payment_id: int, actor_id: int, notes: str
    ) -> tuple[CommissionPayment, list[NotificationEvent]]:
        is_valid, cleaned_notes, error = validate_query_notes(notes)
        if not is_valid:
            raise ValidationError(error or "Invalid notes", payment_id=payment_id)

        payment = await self._get_payment(payment_id)
        actor = await self.user_repo.get_by_id(actor_id)
        if actor is None or (
            actor.id != payment.recipient_id and not actor.is_admin
        ):
            raise NotFoundError("Payment not found", payment_id=payment_id)

        ensure_payment_transition(payment.payment_status, PaymentStatus.QUERIED)
        ensure_approval_transition(payment.approval_status, ApprovalStatus.QUERIED)

        await self._swap_status(
            payment,
            [PaymentStatus.PENDING, PaymentStatus.NEEDS_APPROVAL],
            payment_status=PaymentStatus.QUERIED.value,
            approval_status=ApprovalStatus.QUERIED.value,
            query_notes=cleaned_notes,
        )

        await self.audit_repo.log(
            actor_id=actor_id,
            action="query_payment",
            entity_type="payment",
            entity_id=payment.id,
            details={"deal_id": payment.deal_id, "notes": cleaned_notes},
        )

        self.logger.info(
            "Commission payment queried",
            extra={
                "payment_id": payment.id,
                "actor_id": actor_id,
                "by_admin": actor.is_admin,
            },
        )

        if actor.id == payment.recipient_id and not actor.is_admin:
            audience = [admin.id for admin in await self.user_repo.get_admins()]
        else:
            audience = [payment.recipient_id]

        events: list[NotificationEvent] = [
            StatusUpdateEvent(
                user_id=user_id,
                deal_id=payment.deal_id,
                entity="payment",
                status=PaymentStatus.QUERIED.value,
                notes=cleaned_notes,
            )
            for user_id in audience
        ]
        return payment, events

    @transaction
    async def _reject_payment(
        self, payment_id: int, admin_id: int, reason: str | None
    ) -> tuple[CommissionPayment, list[NotificationEvent]]:
        payment = await self._get_payment(payment_id)
        ensure_payment_transition(payment.payment_status, PaymentStatus.REJECTED)
        ensure_approval_transition(payment.approval_status, ApprovalStatus.REJECTED)

        values: dict[str, Any] = {
            "payment_status": PaymentStatus.REJECTED.value,
            "approval_status": ApprovalStatus.REJECTED.value,
        }
        reason = (reason or "").strip() or None
        if reason:
            values["query_notes"] = reason

        await self._swap_status(
            payment,
            [
                PaymentStatus.PENDING,
                PaymentStatus.NEEDS_APPROVAL,
                PaymentStatus.QUERIED,
            ],
            **values,
        )

        splits = await self.ledger.advance_all(payment.id, SplitStatus.REJECTED)

        await self.audit_repo.log(
            actor_id=admin_id,
            action="reject_payment",
            entity_type="payment",
            entity_id=payment.id,
            details={
                "deal_id": payment.deal_id,
                "reason": reason,
                "split_ids": [split.id for split in splits],
            },
        )

        self.logger.info(
            "Commission payment rejected",
            extra={"payment_id": payment.id, "admin_id": admin_id},
        )

        events: list[NotificationEvent] = [
            StatusUpdateEvent(
                user_id=payment.recipient_id,
                deal_id=payment.deal_id,
                entity="payment",
                status=PaymentStatus.REJECTED.value,
                notes=reason,
            )
        ]
        return payment, events

    @transaction
    async def _advance_deal_stage(
        self, deal_id: int, stage: DealStage | str, actor_id: int | None
    ) -> tuple[Deal, list[NotificationEvent]]:
        try:
            new_stage = DealStage(stage)
        except ValueError:
            raise ValidationError(
                f"Unknown deal stage: {stage}", deal_id=deal_id
            ) from None

        deal = await self.deal_repo.get_by_id(deal_id, for_update=True)
        if deal is None:
            raise NotFoundError("Deal not found", deal_id=deal_id)

        previous = deal.deal_stage
        ensure_deal_transition(previous, new_stage)
        deal = await self.deal_repo.update_stage(deal.id, new_stage)

        await self.audit_repo.log(
            actor_id=actor_id,
            action="advance_deal_stage",
            entity_type="deal",
            entity_id=deal.id,
            details={"from": previous, "to": new_stage.value},
        )

        self.logger.info(
            "Deal stage advanced",
            extra={
                "deal_id": deal.id,
                "from_stage": previous,
                "to_stage": new_stage.value,
            },
        )

        events: list[NotificationEvent] = [
            StatusUpdateEvent(
                user_id=deal.referrer_id,
                deal_id=deal.id,
                entity="deal",
                status=new_stage.value,
            )
        ]
        return deal, events

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_payment(self, payment_id: int) -> CommissionPayment:
        payment = await self.payment_repo.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment not found", payment_id=payment_id)
        return payment

    async def _swap_status(
        self,
        payment: CommissionPayment,
        expected: list[PaymentStatus],
        **values: Any,
    ) -> None:
        """
        Apply a guarded status update and reload the payment.

        Raises:
            InvalidStateError: Another request changed the status first
        """
        swapped = await self.payment_repo.transition(payment.id, expected, **values)
        if not swapped:
            self.logger.warning(
                "Concurrent status change detected",
                extra={
                    "payment_id": payment.id,
                    "expected": [status.value for status in expected],
                },
            )
            raise InvalidStateError(
                "Payment already processed",
                payment_id=payment.id,
            )
        await self.session.refresh(payment)

    async def _ensure_not_distributed(
        self, deal_id: int, exclude_payment_id: int
    ) -> None:
        """
        Refuse a legacy distribution when the deal already paid out.

        Raises:
            AlreadyDistributedError: Approved/paid records or splits exist
        """
        for record in await self.payment_repo.get_by_deal(deal_id):
            if record.id == exclude_payment_id:
                continue
            if record.payment_status in PROCESSED_STATUSES:
                raise AlreadyDistributedError(
                    "Commission already distributed for this deal",
                    deal_id=deal_id,
                    payment_id=record.id,
                )

        settled = await self.split_repo.get_by_deal(
            deal_id, statuses=[SplitStatus.APPROVED, SplitStatus.PAID]
        )
        if settled:
            raise AlreadyDistributedError(
                "Commission already distributed for this deal",
                deal_id=deal_id,
                split_id=settled[0].id,
            )

    async def _resolve_referrer_chain(self, deal: Deal) -> list[ChainLink]:
        try:
            return await self.resolver.resolve_chain(deal.referrer_id)
        except NotFoundError as e:
            raise ValidationError(
                "Deal referrer does not exist",
                deal_id=deal.id,
                referrer_id=deal.referrer_id,
            ) from e
