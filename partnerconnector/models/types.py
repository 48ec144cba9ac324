"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Money type for commission amounts (pounds and pence)
# Precision: 12 digits total, 2 after decimal point
# Range: up to 9,999,999,999.99
MoneyType = DECIMAL(12, 2)

# Percentage type for commission tiers
# Precision: 5 digits total, 2 after decimal point
# Range: 0.00 to 999.99 (e.g., 60.00, 20.00, 10.00)
PercentType = DECIMAL(5, 2)
