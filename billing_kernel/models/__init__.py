"""SQLAlchemy ORM models for the billing kernel."""

from billing_kernel.models.appointment import Appointment, AppointmentNote
from billing_kernel.models.client import Client, ClientGroup, ClientGroupMembership
from billing_kernel.models.invoice import Invoice, Payment
from billing_kernel.models.practice import Clinician, PracticeService

__all__ = [
    "Appointment",
    "AppointmentNote",
    "Client",
    "ClientGroup",
    "ClientGroupMembership",
    "Clinician",
    "Invoice",
    "Payment",
    "PracticeService",
]
