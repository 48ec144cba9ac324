"""
Commission system configuration.

Contains constants for the multi-level commission scheme.
"""

from decimal import Decimal

from partnerconnector.models.enums import DealStage

# 3-level scheme: direct referrer, first upline, second upline
COMMISSION_DEPTH = 3
COMMISSION_TIER_RATES = {
    0: Decimal("60.00"),  # Direct referrer (deal owner)
    1: Decimal("20.00"),  # Level 1 upline
    2: Decimal("10.00"),  # Level 2 upline
}
# The remaining 10% is retained by the platform and never written to the ledger

# partner_level is 1 for a root partner and capped at 3
MAX_PARTNER_LEVEL = 3

# Stages from which an admin may finalize a commission
COMMISSION_ELIGIBLE_STAGES = frozenset({
    DealStage.APPROVED,
    DealStage.LIVE_CONFIRM_LTR,
    DealStage.INVOICE_RECEIVED,
})

# Stage a deal moves to once its commission has been created
COMMISSION_CREATED_STAGE = DealStage.INVOICE_RECEIVED
