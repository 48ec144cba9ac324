"""
Commission services package.

Contains modular services for commission processing:
- config: Tier rates, depth and commission-eligible deal stages
- hierarchy_resolver: Walks and maintains the partner hierarchy
- split_calculator: Computes per-level shares of a gross commission
- split_ledger: Stores and advances payment splits
- state_machine: Legal payment, split and deal stage transitions
- distribution_service: Create, approve and pay commissions
- query_manager: Approval queue and earnings queries
- notifications: Post-commit partner notifications
"""

from partnerconnector.services.commission.config import (
    COMMISSION_DEPTH,
    COMMISSION_TIER_RATES,
)
from partnerconnector.services.commission.distribution_service import (
    ApprovalResult,
    CommissionDistributionService,
    PaymentResult,
    PaymentStatusView,
)
from partnerconnector.services.commission.hierarchy_resolver import (
    ChainLink,
    HierarchyResolver,
)
from partnerconnector.services.commission.notifications import (
    DatabaseNotificationDispatcher,
    NotificationDispatcher,
)
from partnerconnector.services.commission.query_manager import (
    CommissionQueryManager,
    EarningsSummary,
)
from partnerconnector.services.commission.split_calculator import (
    CommissionSplit,
    compute_splits,
)
from partnerconnector.services.commission.split_ledger import SplitLedger


__all__ = [
    # Configuration
    "COMMISSION_DEPTH",
    "COMMISSION_TIER_RATES",
    # Hierarchy and calculation
    "ChainLink",
    "HierarchyResolver",
    "CommissionSplit",
    "compute_splits",
    # Ledger and orchestration
    "SplitLedger",
    "CommissionDistributionService",
    "ApprovalResult",
    "PaymentResult",
    "PaymentStatusView",
    # Queries
    "CommissionQueryManager",
    "EarningsSummary",
    # Notifications
    "DatabaseNotificationDispatcher",
    "NotificationDispatcher",
]
