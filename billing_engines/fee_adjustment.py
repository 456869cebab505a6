"""
Module: billing_engines.fee_adjustment
Responsibility:
    Keep an appointment's adjustable_amount in step with edits to its fee
    and write-off.  The adjustable amount absorbs the net effect of every
    edit so issued invoice amounts never have to be rewritten.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel/domain and billing_kernel/exceptions.

Invariants enforced:
    - adjustable_new = adjustable_old + (fee_new - fee_old)
                                      - (write_off_new - write_off_old)
    - Stored None values (fee, write-off, adjustable) count as zero.
    - When neither fee nor write-off changes, adjustable_amount is returned
      untouched and the result is flagged changed=False.
    - Decimal-only arithmetic through Money.

Failure modes:
    - InvalidAmountError when a requested fee or write-off is missing,
      negative, a float or not a number.

Usage:
    calculator = FeeAdjustmentCalculator(currency="USD")
    result = calculator.calculate(
        current=appointment_record,
        new_fee=Decimal("150"),
        new_write_off=Decimal("10"),
    )
    result.adjustable_amount  # Money(40, USD) for fee 100 -> 150, 0 -> 10
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from billing_engines.tracer import traced_engine
from billing_kernel.domain.dtos import AppointmentRecord
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import InvalidAmountError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.fee_adjustment")


def adjusted_amount(
    adjustable_old: Decimal,
    fee_old: Decimal,
    fee_new: Decimal,
    write_off_old: Decimal,
    write_off_new: Decimal,
) -> Decimal:
    """The adjustable-amount formula on bare Decimals."""
    return adjustable_old + (fee_new - fee_old) - (write_off_new - write_off_old)


def parse_amount(field: str, value: Decimal | int | str | None) -> Decimal:
    """
    Validate a requested fee/write-off.

    Raises:
        InvalidAmountError: missing, float, unparseable or negative.
    """
    if value is None:
        raise InvalidAmountError(field, value, "is required")
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(field, value, "must be an exact decimal amount")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise InvalidAmountError(field, value, "is not a number") from None
    if not amount.is_finite():
        raise InvalidAmountError(field, value, "is not a number")
    if amount < 0:
        raise InvalidAmountError(field, value, "must not be negative")
    return amount


@dataclass(frozen=True)
class FeeAdjustmentResult:
    """
    Persisted-state delta for one fee/write-off edit.

    fee, write_off and adjustable_amount are the values to store; delta is
    adjustable_amount minus the stored adjustable amount.
    """

    changed: bool
    fee: Money
    write_off: Money
    adjustable_amount: Money
    delta: Money


class FeeAdjustmentCalculator:
    """
    Computes the adjustable-amount update for a fee/write-off edit.

    Contract:
        Pure: reads the stored AppointmentRecord and the requested values,
        returns a FeeAdjustmentResult.  Persisting it is the caller's job
        (FeeAdjustmentService).
    """

    def __init__(self, currency: str = "USD"):
        self._currency = currency

    @traced_engine(
        "fee_adjustment", "1.0",
        fingerprint_fields=("current", "new_fee", "new_write_off"),
    )
    def calculate(
        self,
        current: AppointmentRecord,
        new_fee: Decimal | int | str | None,
        new_write_off: Decimal | int | str | None,
    ) -> FeeAdjustmentResult:
        fee_new = Money.of(parse_amount("fee", new_fee), self._currency)
        write_off_new = Money.of(parse_amount("write_off", new_write_off), self._currency)

        fee_old = Money.from_nullable(current.appointment_fee, self._currency)
        write_off_old = Money.from_nullable(current.write_off, self._currency)
        adjustable_old = Money.from_nullable(current.adjustable_amount, self._currency)

        if write_off_new > fee_new:
            logger.warning(
                "write_off_exceeds_fee",
                extra={
                    "appointment_id": str(current.id),
                    "fee": str(fee_new.amount),
                    "write_off": str(write_off_new.amount),
                },
            )

        if fee_new == fee_old and write_off_new == write_off_old:
            return FeeAdjustmentResult(
                changed=False,
                fee=fee_new,
                write_off=write_off_new,
                adjustable_amount=adjustable_old,
                delta=Money.zero(self._currency),
            )

        delta = (fee_new - fee_old) - (write_off_new - write_off_old)
        return FeeAdjustmentResult(
            changed=True,
            fee=fee_new,
            write_off=write_off_new,
            adjustable_amount=adjustable_old + delta,
            delta=delta,
        )
