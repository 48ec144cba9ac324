"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from partnerconnector.models.admin_audit_log import AdminAuditLog
from partnerconnector.models.base import Base
from partnerconnector.models.commission_payment import CommissionPayment
from partnerconnector.models.deal import Deal
from partnerconnector.models.enums import (
    ApprovalStatus,
    CommissionFlow,
    DealStage,
    NotificationType,
    PaymentStatus,
    SplitStatus,
)
from partnerconnector.models.notification import Notification
from partnerconnector.models.payment_split import PaymentSplit
from partnerconnector.models.user import User


__all__ = [
    # Base
    "Base",
    # Enums
    "ApprovalStatus",
    "CommissionFlow",
    "DealStage",
    "NotificationType",
    "PaymentStatus",
    "SplitStatus",
    # Core Models
    "User",
    "Deal",
    "CommissionPayment",
    "PaymentSplit",
    # System Models
    "AdminAuditLog",
    "Notification",
]
