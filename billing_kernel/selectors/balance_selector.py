"""
Module: billing_kernel.selectors.balance_selector
Responsibility: Read-only queries feeding the client-group balance rollup
    and the income report: appointments, invoices and completed payments
    within a date range, each attributed to a client group.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Invoices in VOID or DRAFT status never reach the balance math.
    - Only COMPLETED payments are returned.
    - Every range is inclusive on both ends; callers pass day bounds from
      query.day_bounds().
"""

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from billing_kernel.domain.dtos import (
    AppointmentRecord,
    AppointmentType,
    ClientGroupRecord,
    IncomePaymentRecord,
    NON_BILLABLE_INVOICE_STATUSES,
    InvoiceRecord,
    PaymentRecord,
    PaymentStatus,
)
from billing_kernel.models.appointment import Appointment
from billing_kernel.models.client import ClientGroup
from billing_kernel.models.invoice import Invoice, Payment
from billing_kernel.models.practice import Clinician
from billing_kernel.selectors.base import BaseSelector


class BalanceSelector(BaseSelector[Invoice]):
    """Group-level financial activity within a date range."""

    def find_group_appointments(
        self,
        start: datetime,
        end: datetime,
    ) -> list[AppointmentRecord]:
        """Appointments starting in range that belong to a client group."""
        stmt = (
            select(Appointment)
            .where(
                Appointment.start_date >= start,
                Appointment.start_date <= end,
                Appointment.type == AppointmentType.APPOINTMENT.value,
                Appointment.client_group_id.is_not(None),
            )
            .options(selectinload(Appointment.service))
            .order_by(Appointment.start_date, Appointment.id)
        )
        return [
            AppointmentRecord.from_model(a)
            for a in self.session.execute(stmt).scalars()
        ]

    def find_group_invoices(self, start: datetime, end: datetime) -> list[InvoiceRecord]:
        """Invoices issued in range that count toward balances (no payments)."""
        stmt = (
            select(Invoice)
            .where(
                Invoice.issued_date >= start,
                Invoice.issued_date <= end,
                Invoice.status.not_in(NON_BILLABLE_INVOICE_STATUSES),
                Invoice.client_group_id.is_not(None),
            )
            .order_by(Invoice.issued_date, Invoice.id)
        )
        return [
            InvoiceRecord.from_model(i, payments=())
            for i in self.session.execute(stmt).scalars()
        ]

    def find_group_payments(
        self,
        start: datetime,
        end: datetime,
    ) -> list[tuple[UUID, PaymentRecord]]:
        """
        Completed payments dated in range, each with the client group of the
        invoice it settles.
        """
        stmt = (
            select(Invoice.client_group_id, Payment)
            .join(Invoice, Payment.invoice_id == Invoice.id)
            .where(
                Payment.payment_date >= start,
                Payment.payment_date <= end,
                Payment.status == PaymentStatus.COMPLETED.value,
                Invoice.status.not_in(NON_BILLABLE_INVOICE_STATUSES),
                Invoice.client_group_id.is_not(None),
            )
            .order_by(Payment.payment_date, Payment.id)
        )
        return [
            (group_id, PaymentRecord.from_model(payment))
            for group_id, payment in self.session.execute(stmt).all()
        ]

    def find_client_groups(self, client_group_ids: Iterable[UUID]) -> list[ClientGroupRecord]:
        ids = list(client_group_ids)
        if not ids:
            return []
        stmt = select(ClientGroup.id, ClientGroup.name).where(ClientGroup.id.in_(ids))
        return [
            ClientGroupRecord(id=group_id, name=name)
            for group_id, name in self.session.execute(stmt).all()
        ]

    def find_income_payments(
        self,
        start: datetime,
        end: datetime,
        clinician_id: UUID | None = None,
    ) -> list[IncomePaymentRecord]:
        """
        Completed payments dated in range, joined through their invoice to
        the invoiced appointment and the invoice's clinician, either of
        which may be absent.
        """
        stmt = (
            select(Payment, Appointment, Clinician)
            .join(Invoice, Payment.invoice_id == Invoice.id)
            .outerjoin(Appointment, Invoice.appointment_id == Appointment.id)
            .outerjoin(Clinician, Invoice.clinician_id == Clinician.id)
            .where(
                Payment.payment_date >= start,
                Payment.payment_date <= end,
                Payment.status == PaymentStatus.COMPLETED.value,
            )
            .order_by(Payment.payment_date, Payment.id)
        )
        if clinician_id is not None:
            stmt = stmt.where(Invoice.clinician_id == clinician_id)

        records: list[IncomePaymentRecord] = []
        for payment, appointment, clinician in self.session.execute(stmt).all():
            records.append(
                IncomePaymentRecord(
                    payment_id=payment.id,
                    payment_date=payment.payment_date,
                    amount=payment.amount,
                    credit_applied=payment.credit_applied,
                    appointment=(
                        AppointmentRecord.from_model(appointment)
                        if appointment is not None
                        else None
                    ),
                    clinician_id=clinician.id if clinician is not None else None,
                    percentage_split=(
                        clinician.percentage_split if clinician is not None else None
                    ),
                )
            )
        return records
