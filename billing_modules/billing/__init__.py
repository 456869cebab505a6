"""
Billing Module.

Fee and write-off edits on appointments, one transaction per edit.
"""

from billing_modules.billing.config import FeeAdjustmentConfig
from billing_modules.billing.service import BillingService

__all__ = ["BillingService", "FeeAdjustmentConfig"]
