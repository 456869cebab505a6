"""
FeeAdjustmentService -- the one write path for an appointment's billing fields.

Responsibility:
    Applies a fee/write-off edit to one appointment: lock the row, check
    the invoice and the caller's expectations, compute the new adjustable
    amount, and write fee, write-off and adjustable amount together.

Architecture position:
    Kernel > Services -- imperative shell.  The adjustable-amount formula
    lives in billing_engines.fee_adjustment; the calculator is injected.

Invariants enforced:
    - Read, compute and write happen under a row lock (SELECT ... FOR
      UPDATE), so concurrent edits of one appointment serialize instead of
      losing an update.
    - The three money fields are written in a single UPDATE via flush().
    - adjustable_amount is never set anywhere else.
    - Flush only; the caller owns commit/rollback.

Failure modes:
    - AppointmentNotFoundError: unknown appointment id.
    - InvoiceLockedError: the appointment's invoice is PAID or VOID and
      edits on terminal invoices are not allowed.
    - OptimisticLockError: expected_fee / expected_write_off were given and
      the locked row holds different values.
    - InvalidAmountError: propagated from the calculator.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import select

from billing_kernel.domain.dtos import AppointmentRecord, InvoiceStatus
from billing_kernel.exceptions import (
    AppointmentNotFoundError,
    InvoiceLockedError,
    OptimisticLockError,
)
from billing_kernel.logging_config import get_logger
from billing_kernel.models.appointment import Appointment
from billing_kernel.models.invoice import Invoice
from billing_kernel.services.base import BaseService

if TYPE_CHECKING:
    from billing_engines.fee_adjustment import FeeAdjustmentCalculator

logger = get_logger("services.fee_adjustment")

_TERMINAL_STATUSES = (InvoiceStatus.PAID.value, InvoiceStatus.VOID.value)


class _Unchecked:
    def __repr__(self) -> str:
        return "UNCHECKED"


UNCHECKED = _Unchecked()


def _same_amount(stored: Decimal | None, expected: Decimal | None) -> bool:
    if stored is None or expected is None:
        return stored is None and expected is None
    return stored == expected


class FeeAdjustmentService(BaseService[Appointment]):
    """Locked read-compute-write of an appointment's fee fields."""

    def __init__(
        self,
        session,
        calculator: FeeAdjustmentCalculator,
        allow_edits_on_terminal_invoices: bool = False,
    ):
        super().__init__(session)
        self._calculator = calculator
        self._allow_terminal = allow_edits_on_terminal_invoices

    def _lock(self, appointment_id: UUID) -> Appointment:
        appointment = self.session.execute(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    def _check_invoice(self, appointment_id: UUID) -> None:
        if self._allow_terminal:
            return
        locked = self.session.execute(
            select(Invoice.id, Invoice.status)
            .where(
                Invoice.appointment_id == appointment_id,
                Invoice.status.in_(_TERMINAL_STATUSES),
            )
            .order_by(Invoice.issued_date.desc(), Invoice.id)
            .limit(1)
        ).first()
        if locked is not None:
            invoice_id, status = locked
            raise InvoiceLockedError(appointment_id, invoice_id, status)

    def apply(
        self,
        appointment_id: UUID,
        new_fee: Decimal | int | str | None,
        new_write_off: Decimal | int | str | None,
        expected_fee: Decimal | None | _Unchecked = UNCHECKED,
        expected_write_off: Decimal | None | _Unchecked = UNCHECKED,
    ) -> AppointmentRecord:
        """
        Apply a fee/write-off edit.

        When both values equal what is stored, nothing is written and the
        stored appointment is returned without consulting invoice state.
        """
        appointment = self._lock(appointment_id)

        if expected_fee is not UNCHECKED and not _same_amount(
            appointment.appointment_fee, expected_fee
        ):
            raise OptimisticLockError("Appointment", appointment_id)
        if expected_write_off is not UNCHECKED and not _same_amount(
            appointment.write_off, expected_write_off
        ):
            raise OptimisticLockError("Appointment", appointment_id)

        current = AppointmentRecord.from_model(appointment)
        result = self._calculator.calculate(
            current=current, new_fee=new_fee, new_write_off=new_write_off,
        )

        if not result.changed:
            logger.info(
                "fee_adjustment_unchanged",
                extra={"appointment_id": str(appointment_id)},
            )
            return current

        self._check_invoice(appointment_id)
        self._write(
            appointment,
            result.fee.amount,
            result.write_off.amount,
            result.adjustable_amount.amount,
        )
        logger.info(
            "fee_adjustment_applied",
            extra={
                "appointment_id": str(appointment_id),
                "fee_old": str(current.appointment_fee),
                "fee_new": str(result.fee.amount),
                "write_off_old": str(current.write_off),
                "write_off_new": str(result.write_off.amount),
                "adjustable_old": str(current.adjustable_amount),
                "adjustable_new": str(result.adjustable_amount.amount),
                "delta": str(result.delta.amount),
            },
        )
        return AppointmentRecord.from_model(appointment)

    def update_appointment_billing(
        self,
        appointment_id: UUID,
        fee: Decimal,
        write_off: Decimal,
        adjustable_amount: Decimal,
    ) -> AppointmentRecord:
        """Write the three money fields of a locked appointment atomically."""
        appointment = self._lock(appointment_id)
        self._write(appointment, fee, write_off, adjustable_amount)
        return AppointmentRecord.from_model(appointment)

    def _write(
        self,
        appointment: Appointment,
        fee: Decimal,
        write_off: Decimal,
        adjustable_amount: Decimal,
    ) -> None:
        appointment.appointment_fee = fee
        appointment.write_off = write_off
        appointment.adjustable_amount = adjustable_amount
        self.session.flush()
