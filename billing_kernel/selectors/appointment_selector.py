"""
Module: billing_kernel.selectors.appointment_selector
Responsibility: Read-only queries over appointments, their invoices and
    their progress notes, for the appointment status report.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - find_appointments() and count_appointments() take the same
      AppointmentFilter, so a page's rows and the reported total are
      filtered identically.
    - Row order is start_date descending, then appointment id, which makes
      OFFSET/LIMIT windows stable across requests.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from billing_kernel.domain.dtos import (
    NON_BILLABLE_INVOICE_STATUSES,
    AppointmentRecord,
    InvoiceRecord,
)
from billing_kernel.models.appointment import Appointment, AppointmentNote
from billing_kernel.models.invoice import Invoice
from billing_kernel.selectors.base import BaseSelector
from billing_kernel.selectors.query import AppointmentFilter


class AppointmentSelector(BaseSelector[Appointment]):
    """Selector for appointments and what hangs off them."""

    def find_appointments(
        self,
        appointment_filter: AppointmentFilter,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[AppointmentRecord]:
        """Appointments matching every predicate, newest first."""
        stmt = (
            select(Appointment)
            .where(*appointment_filter.clauses())
            .options(selectinload(Appointment.service))
            .order_by(Appointment.start_date.desc(), Appointment.id)
        )
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        appointments = self.session.execute(stmt).scalars().all()
        return [AppointmentRecord.from_model(a) for a in appointments]

    def count_appointments(self, appointment_filter: AppointmentFilter) -> int:
        stmt = select(func.count(Appointment.id)).where(*appointment_filter.clauses())
        return self.session.execute(stmt).scalar_one()

    def get_appointment(self, appointment_id: UUID) -> AppointmentRecord | None:
        appointment = self.session.get(Appointment, appointment_id)
        if appointment is None:
            return None
        return AppointmentRecord.from_model(appointment)

    def find_invoices_for_appointments(
        self,
        appointment_ids: Iterable[UUID],
    ) -> list[InvoiceRecord]:
        """
        Billable invoices (not VOID or DRAFT) linked to any of the
        appointments, with their payments.

        Ordered by issued_date then id; callers that need one invoice per
        appointment take the last (most recently issued) one.
        """
        ids = list(appointment_ids)
        if not ids:
            return []
        stmt = (
            select(Invoice)
            .where(
                Invoice.appointment_id.in_(ids),
                Invoice.status.not_in(NON_BILLABLE_INVOICE_STATUSES),
            )
            .options(selectinload(Invoice.payments))
            .order_by(Invoice.issued_date, Invoice.id)
        )
        invoices = self.session.execute(stmt).scalars().all()
        return [InvoiceRecord.from_model(i) for i in invoices]

    def find_appointment_ids_with_notes(
        self,
        appointment_ids: Iterable[UUID],
    ) -> set[UUID]:
        ids = list(appointment_ids)
        if not ids:
            return set()
        stmt = (
            select(AppointmentNote.appointment_id)
            .where(AppointmentNote.appointment_id.in_(ids))
            .distinct()
        )
        return set(self.session.execute(stmt).scalars().all())
