"""
Module: billing_engines.appointment_status
Responsibility:
    Turn appointment records, their invoices and their note state into
    appointment status report rows.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Filtering and pagination
    happen in the selectors; this module builds rows for one page.

Invariants enforced:
    - charge comes from ChargeResolver, the same call the balance report
      uses, so both reports agree on every appointment.
    - uninvoiced = charge when the appointment has no invoice, else 0.
    - paid/unpaid come from InvoicePaymentAggregator; an overpayment keeps
      its negative unpaid_raw.
    - Money is rounded half-up once, when a row is built.

Failure modes:
    - None; missing services, clients and invoices fall back to "N/A",
      "Unknown Client" and zero amounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from billing_engines.charge import ChargeResolver
from billing_engines.payments import InvoicePaymentAggregator
from billing_engines.responsible_biller import ResponsibleBillerSelector
from billing_engines.tracer import traced_engine
from billing_kernel.db.types import DISPLAY_DECIMAL_PLACES, round_money
from billing_kernel.domain.dtos import (
    NON_BILLABLE_INVOICE_STATUSES,
    AppointmentRecord,
    BillingStatus,
    InvoiceRecord,
    MembershipRecord,
    NoteStatus,
)
from billing_kernel.domain.values import Money

NO_BILLING_CODE = "N/A"


@dataclass(frozen=True)
class AppointmentStatusRow:
    appointment_id: UUID
    client_group_id: UUID | None
    date_of_service: date
    client: str
    billing_code: str
    rate_per_unit: Decimal
    units: int
    total_fee: Decimal
    progress_note_status: NoteStatus
    status: str
    billing_status: BillingStatus
    charge: Decimal
    uninvoiced: Decimal
    paid: Decimal
    unpaid: Decimal
    unpaid_raw: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.appointment_id),
            "clientGroupId": str(self.client_group_id) if self.client_group_id else None,
            "dateOfService": self.date_of_service.isoformat(),
            "client": self.client,
            "billingCode": self.billing_code,
            "ratePerUnit": str(self.rate_per_unit),
            "units": self.units,
            "totalFee": str(self.total_fee),
            "progressNoteStatus": self.progress_note_status.value,
            "status": self.status,
            "billingStatus": self.billing_status.value,
            "charge": str(self.charge),
            "uninvoiced": str(self.uninvoiced),
            "paid": str(self.paid),
            "unpaid": str(self.unpaid),
        }


def compute_units(start: datetime, end: datetime, duration_minutes: int | None) -> int:
    """ceil(whole minutes / unit duration); 1 when the service has no duration."""
    if not duration_minutes or duration_minutes <= 0:
        return 1
    minutes = max(int((end - start).total_seconds() // 60), 0)
    return -(-minutes // duration_minutes)


def index_invoices_by_appointment(
    invoices: Iterable[InvoiceRecord],
) -> dict[UUID, InvoiceRecord]:
    """
    One billable invoice per appointment.  Invoices arrive ordered by issue
    date, so the most recently issued one wins; VOID and DRAFT are skipped.
    """
    indexed: dict[UUID, InvoiceRecord] = {}
    for invoice in invoices:
        if invoice.status in NON_BILLABLE_INVOICE_STATUSES:
            continue
        if invoice.appointment_id is not None:
            indexed[invoice.appointment_id] = invoice
    return indexed


class AppointmentStatusRowBuilder:
    """Builds report rows from already selected, already paginated records."""

    def __init__(
        self,
        charge_resolver: ChargeResolver,
        aggregator: InvoicePaymentAggregator,
        biller_selector: ResponsibleBillerSelector | None = None,
        display_decimal_places: int = DISPLAY_DECIMAL_PLACES,
    ):
        self._charges = charge_resolver
        self._aggregator = aggregator
        self._billers = biller_selector or ResponsibleBillerSelector()
        self._dp = display_decimal_places

    def _display(self, value: Decimal) -> Decimal:
        return round_money(value, self._dp)

    def build_row(
        self,
        appointment: AppointmentRecord,
        invoice: InvoiceRecord | None,
        has_note: bool,
        client_name: str,
    ) -> AppointmentStatusRow:
        charge = self._charges.charge(appointment)
        summary = self._aggregator.aggregate(invoice)
        uninvoiced = charge if invoice is None else Money.zero(charge.currency)
        service = appointment.service

        return AppointmentStatusRow(
            appointment_id=appointment.id,
            client_group_id=appointment.client_group_id,
            date_of_service=appointment.start_date.date(),
            client=client_name,
            billing_code=(service.code if service and service.code else NO_BILLING_CODE),
            rate_per_unit=self._display(
                service.rate if service and service.rate is not None else Decimal("0")
            ),
            units=compute_units(
                appointment.start_date,
                appointment.end_date,
                service.duration_minutes if service else None,
            ),
            total_fee=self._display(appointment.appointment_fee or Decimal("0")),
            progress_note_status=NoteStatus.COMPLETED if has_note else NoteStatus.NO_NOTE,
            status=appointment.status,
            billing_status=self._aggregator.billing_status(summary),
            charge=charge.round(self._dp).amount,
            uninvoiced=uninvoiced.round(self._dp).amount,
            paid=summary.paid.round(self._dp).amount,
            unpaid=summary.unpaid.round(self._dp).amount,
            unpaid_raw=summary.unpaid_raw.round(self._dp).amount,
        )

    @traced_engine(
        "appointment_status", "1.0",
        fingerprint_fields=("appointments", "noted_appointment_ids"),
    )
    def build_rows(
        self,
        appointments: Sequence[AppointmentRecord],
        invoices: Iterable[InvoiceRecord],
        noted_appointment_ids: set[UUID],
        memberships_by_group: Mapping[UUID, Sequence[MembershipRecord]],
    ) -> list[AppointmentStatusRow]:
        """Rows in the order the appointments were given."""
        invoice_for = index_invoices_by_appointment(invoices)
        names: dict[UUID | None, str] = {}
        rows: list[AppointmentStatusRow] = []
        for appointment in appointments:
            group_id = appointment.client_group_id
            if group_id not in names:
                names[group_id] = self._billers.client_display_name(
                    memberships_by_group.get(group_id, ()) if group_id else ()
                )
            rows.append(
                self.build_row(
                    appointment,
                    invoice_for.get(appointment.id),
                    appointment.id in noted_appointment_ids,
                    names[group_id],
                )
            )
        return rows
