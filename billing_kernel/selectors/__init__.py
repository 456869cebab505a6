"""Read-only selectors over the billing tables."""

from billing_kernel.selectors.appointment_selector import AppointmentSelector
from billing_kernel.selectors.balance_selector import BalanceSelector
from billing_kernel.selectors.base import BaseSelector
from billing_kernel.selectors.membership_selector import MembershipSelector
from billing_kernel.selectors.query import AppointmentFilter, day_bounds

__all__ = [
    "AppointmentFilter",
    "AppointmentSelector",
    "BalanceSelector",
    "BaseSelector",
    "MembershipSelector",
    "day_bounds",
]
