"""
Billing Module Service - fee and write-off edits on appointments.

Thin glue layer that:
1. Validates the appointment id and the requested amounts
2. Calls FeeAdjustmentService (kernel) for the locked read-compute-write
3. Commits on success, rolls back on failure

All computation lives in billing_engines.fee_adjustment.  All writes live
in the kernel.  This service owns the transaction boundary.

Usage:
    service = BillingService(session, clock=clock)
    record = service.apply_fee_adjustment(
        appointment_id=appointment_id,
        new_fee=Decimal("120.00"),
        new_write_off=Decimal("20.00"),
        actor_id=actor_id,
    )
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_engines.fee_adjustment import FeeAdjustmentCalculator, parse_amount
from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.dtos import AppointmentRecord
from billing_kernel.exceptions import FieldError, InternalError, ValidationError
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.services.fee_adjustment_service import (
    UNCHECKED,
    FeeAdjustmentService,
)
from billing_modules.billing.config import FeeAdjustmentConfig

logger = get_logger("modules.billing.service")


def _parse_expected(field: str, value: Any) -> Any:
    # None means the stored value is expected to be NULL.
    if value is UNCHECKED or value is None:
        return value
    return parse_amount(field, value)


def _parse_appointment_id(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(
            "Invalid appointment id",
            details=(FieldError("appointment_id", "appointment_id must be a valid UUID."),),
        ) from None


class BillingService:
    """
    Applies fee adjustments inside one transaction per call.

    Transaction boundary: this service commits on success, rolls back on
    failure.  FeeAdjustmentService only flushes.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: FeeAdjustmentConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or FeeAdjustmentConfig.with_defaults()

        self._fee_adjustments = FeeAdjustmentService(
            session,
            calculator=FeeAdjustmentCalculator(self._config.currency),
            allow_edits_on_terminal_invoices=self._config.allow_edits_on_terminal_invoices,
        )

    def apply_fee_adjustment(
        self,
        appointment_id: UUID | str,
        new_fee: Decimal | int | str | None,
        new_write_off: Decimal | int | str | None,
        actor_id: UUID | str,
        expected_fee: Any = UNCHECKED,
        expected_write_off: Any = UNCHECKED,
    ) -> AppointmentRecord:
        """
        Set an appointment's fee and write-off, updating its adjustable
        amount by the net change.

        Raises:
            ValidationError: bad id or amount; nothing was read.
            AppointmentNotFoundError: unknown appointment.
            InvoiceLockedError: the appointment's invoice is PAID or VOID.
            OptimisticLockError: expected_* no longer match the stored row.
            InternalError: the database failed.
        """
        appointment_uuid = _parse_appointment_id(appointment_id)
        fee = parse_amount("fee", new_fee)
        write_off = parse_amount("write_off", new_write_off)
        expected_fee = _parse_expected("expected_fee", expected_fee)
        expected_write_off = _parse_expected("expected_write_off", expected_write_off)

        with LogContext.bind(actor_id=actor_id, appointment_id=appointment_uuid):
            logger.info(
                "fee_adjustment_started",
                extra={"fee": str(fee), "write_off": str(write_off)},
            )
            try:
                record = self._fee_adjustments.apply(
                    appointment_uuid,
                    fee,
                    write_off,
                    expected_fee=expected_fee,
                    expected_write_off=expected_write_off,
                )
                self._session.commit()
            except SQLAlchemyError as exc:
                self._session.rollback()
                logger.error(
                    "fee_adjustment_failed",
                    extra={"error": str(exc)},
                    exc_info=True,
                )
                raise InternalError("apply_fee_adjustment") from exc
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "fee_adjustment_committed",
                extra={
                    "committed_at": self._clock.now().isoformat(),
                    "adjustable_amount": str(record.adjustable_amount),
                },
            )
            return record
