"""
Status enumerations.

String enums stored as plain VARCHAR values in the database.
"""

from enum import StrEnum


class ApprovalStatus(StrEnum):
    """Approval status of a commission payment record."""

    PENDING = "pending"
    NEEDS_APPROVAL = "needs_approval"
    APPROVED = "approved"
    QUERIED = "queried"  # Recipient or admin raised a question
    REJECTED = "rejected"


class PaymentStatus(StrEnum):
    """Payment status of a commission payment record."""

    PENDING = "pending"
    NEEDS_APPROVAL = "needs_approval"
    APPROVED = "approved"
    DISTRIBUTED = "distributed"  # Legacy anchor fanned out into per-level rows
    PAID = "paid"
    QUERIED = "queried"
    REJECTED = "rejected"


class SplitStatus(StrEnum):
    """Status of a single beneficiary split."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


class DealStage(StrEnum):
    """Deal pipeline stage."""

    QUOTE_REQUEST_RECEIVED = "quote_request_received"
    QUOTE_SENT = "quote_sent"
    QUOTE_APPROVED = "quote_approved"
    AGREEMENT_SENT = "agreement_sent"
    SIGNED_AWAITING_DOCS = "signed_awaiting_docs"
    APPROVED = "approved"
    LIVE_CONFIRM_LTR = "live_confirm_ltr"
    INVOICE_RECEIVED = "invoice_received"
    COMPLETED = "completed"
    DECLINED = "declined"


class CommissionFlow(StrEnum):
    """Which distribution path handled an approval."""

    SPLIT_LEDGER = "new_deal_with_splits"
    LEGACY_DISTRIBUTION = "old_deal_distribute"


class NotificationType(StrEnum):
    """Notification kinds sent to partners."""

    COMMISSION_APPROVAL = "commission_approval"
    COMMISSION_APPROVED = "commission_approved"
    COMMISSION_PAID = "commission_paid"
    STATUS_UPDATE = "status_update"
