"""Pure domain layer - value objects, records and the clock."""

from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.dtos import (
    AppointmentRecord,
    AppointmentStatus,
    AppointmentType,
    BillingStatus,
    ClientGroupRecord,
    IncomePaymentRecord,
    InvoiceRecord,
    InvoiceStatus,
    MembershipRecord,
    NoteFilter,
    NoteStatus,
    PaymentRecord,
    PaymentStatus,
    ServiceRecord,
)
from billing_kernel.domain.values import Currency, Money

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "Currency",
    "Money",
    "AppointmentRecord",
    "AppointmentStatus",
    "AppointmentType",
    "BillingStatus",
    "ClientGroupRecord",
    "IncomePaymentRecord",
    "InvoiceRecord",
    "InvoiceStatus",
    "MembershipRecord",
    "NoteFilter",
    "NoteStatus",
    "PaymentRecord",
    "PaymentStatus",
    "ServiceRecord",
]
