"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from partnerconnector.services.base_service import BaseService, transaction

# Commission Services
from partnerconnector.services.commission import (
    CommissionDistributionService,
    CommissionQueryManager,
    HierarchyResolver,
    SplitLedger,
)


__all__ = [
    "BaseService",
    "transaction",
    "CommissionDistributionService",
    "CommissionQueryManager",
    "HierarchyResolver",
    "SplitLedger",
]
