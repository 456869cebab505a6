"""
DTOs -- Immutable records crossing the persistence boundary.

Responsibility:
    Defines the frozen read-side records the selectors hand to the engines:
    appointments, services, invoices with their payments, client group
    memberships and income payment rows, plus the status enums they use.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    from_model() class methods are boundary converters invoked only by
    selectors and services, never by engines.

Invariants enforced:
    - Engines accept records, never ORM entities.
    - Stored money stays exactly as persisted (Decimal or None); the
      "absence is zero" rule is applied by the engines via
      Money.from_nullable(), so a None fee stays distinguishable from 0.
    - InvoiceRecord.payments holds every payment; engines filter COMPLETED.

Data flow:
    ORM model -> selector -> *Record -> engine -> report DTO
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from billing_kernel.models.appointment import Appointment as AppointmentModel
    from billing_kernel.models.client import (
        ClientGroupMembership as MembershipModel,
    )
    from billing_kernel.models.invoice import Invoice as InvoiceModel
    from billing_kernel.models.invoice import Payment as PaymentModel
    from billing_kernel.models.practice import PracticeService as ServiceModel


class AppointmentType(str, Enum):
    APPOINTMENT = "APPOINTMENT"
    EVENT = "EVENT"


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    SHOW = "SHOW"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"
    LATE_CANCELLED = "LATE_CANCELLED"
    CLINICIAN_CANCELLED = "CLINICIAN_CANCELLED"


class InvoiceStatus(str, Enum):
    DRAFT = "DRAFT"
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    VOID = "VOID"

    @property
    def is_terminal(self) -> bool:
        return self in (InvoiceStatus.PAID, InvoiceStatus.VOID)

    @property
    def counts_toward_balance(self) -> bool:
        return self not in (InvoiceStatus.VOID, InvoiceStatus.DRAFT)


# Invoices in these states never count as billed, paid or outstanding.
NON_BILLABLE_INVOICE_STATUSES: tuple[str, ...] = (
    InvoiceStatus.VOID.value,
    InvoiceStatus.DRAFT.value,
)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class NoteStatus(str, Enum):
    """Progress note state of an appointment."""

    NO_NOTE = "NO_NOTE"
    COMPLETED = "COMPLETED"


class NoteFilter(str, Enum):
    """Note-status filter accepted by the appointment status report."""

    WITH_NOTE = "with_note"
    NO_NOTE = "no_note"


class BillingStatus(str, Enum):
    """Derived invoice state of one appointment."""

    UNINVOICED = "UNINVOICED"
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


@dataclass(frozen=True)
class ServiceRecord:
    """A billable practice service (CPT-style code, rate, duration)."""

    id: UUID
    code: str | None
    description: str | None = None
    rate: Decimal | None = None
    duration_minutes: int | None = None

    @classmethod
    def from_model(cls, model: ServiceModel) -> ServiceRecord:
        return cls(
            id=model.id,
            code=model.code,
            description=model.description,
            rate=model.rate,
            duration_minutes=model.duration_minutes,
        )


@dataclass(frozen=True)
class AppointmentRecord:
    """
    One appointment as persisted.

    Money fields are exactly what is stored: appointment_fee and
    adjustable_amount may be None, write_off may be None on legacy rows.
    """

    id: UUID
    client_group_id: UUID | None
    clinician_id: UUID | None
    start_date: datetime
    end_date: datetime
    status: str
    appointment_fee: Decimal | None
    write_off: Decimal | None
    adjustable_amount: Decimal | None
    type: str = AppointmentType.APPOINTMENT.value
    service_id: UUID | None = None
    service: ServiceRecord | None = None

    @classmethod
    def from_model(cls, model: AppointmentModel) -> AppointmentRecord:
        return cls(
            id=model.id,
            client_group_id=model.client_group_id,
            clinician_id=model.clinician_id,
            start_date=model.start_date,
            end_date=model.end_date,
            status=model.status,
            appointment_fee=model.appointment_fee,
            write_off=model.write_off,
            adjustable_amount=model.adjustable_amount,
            type=model.type,
            service_id=model.service_id,
            service=(
                ServiceRecord.from_model(model.service)
                if model.service is not None
                else None
            ),
        )


@dataclass(frozen=True)
class PaymentRecord:
    id: UUID
    invoice_id: UUID
    amount: Decimal
    credit_applied: Decimal | None
    status: str
    payment_date: datetime

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    @classmethod
    def from_model(cls, model: PaymentModel) -> PaymentRecord:
        return cls(
            id=model.id,
            invoice_id=model.invoice_id,
            amount=model.amount,
            credit_applied=model.credit_applied,
            status=model.status,
            payment_date=model.payment_date,
        )


@dataclass(frozen=True)
class InvoiceRecord:
    """An issued invoice and every payment recorded against it."""

    id: UUID
    appointment_id: UUID | None
    client_group_id: UUID | None
    amount: Decimal
    status: str
    issued_date: datetime
    due_date: datetime | None = None
    invoice_number: str | None = None
    clinician_id: UUID | None = None
    payments: tuple[PaymentRecord, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(
        cls,
        model: InvoiceModel,
        payments: tuple[PaymentRecord, ...] | None = None,
    ) -> InvoiceRecord:
        if payments is None:
            payments = tuple(PaymentRecord.from_model(p) for p in model.payments)
        return cls(
            id=model.id,
            appointment_id=model.appointment_id,
            client_group_id=model.client_group_id,
            amount=model.amount,
            status=model.status,
            issued_date=model.issued_date,
            due_date=model.due_date,
            invoice_number=model.invoice_number,
            clinician_id=model.clinician_id,
            payments=payments,
        )


@dataclass(frozen=True)
class MembershipRecord:
    """A client's membership in a client group, with the client's names."""

    client_group_id: UUID
    client_id: UUID
    first_name: str | None
    last_name: str | None
    created_at: datetime
    role: str | None = None
    is_responsible_for_billing: bool = False
    is_contact_only: bool = False

    @classmethod
    def from_model(cls, model: MembershipModel) -> MembershipRecord:
        client = model.client
        return cls(
            client_group_id=model.client_group_id,
            client_id=model.client_id,
            first_name=client.legal_first_name if client is not None else None,
            last_name=client.legal_last_name if client is not None else None,
            created_at=model.created_at,
            role=model.role,
            is_responsible_for_billing=bool(model.is_responsible_for_billing),
            is_contact_only=bool(model.is_contact_only),
        )


@dataclass(frozen=True)
class ClientGroupRecord:
    id: UUID
    name: str | None


@dataclass(frozen=True)
class IncomePaymentRecord:
    """
    One completed payment with what the income report needs to attribute it:
    the invoice's appointment (if any) and the clinician's revenue split.
    """

    payment_id: UUID
    payment_date: datetime
    amount: Decimal
    credit_applied: Decimal | None
    appointment: AppointmentRecord | None = None
    clinician_id: UUID | None = None
    percentage_split: Decimal | None = None
