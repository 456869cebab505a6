"""
Module: billing_engines.charge
Responsibility:
    The single definition of an appointment's billable charge, shared by
    the appointment status report, the outstanding balance report and the
    income report.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - charge = fee + adjustable_amount - write_off, each absent term zero.
    - Full precision internally; display_charge() is the only rounding.
"""

from __future__ import annotations

from billing_kernel.db.types import DISPLAY_DECIMAL_PLACES
from billing_kernel.domain.dtos import AppointmentRecord
from billing_kernel.domain.values import Money


class ChargeResolver:
    """Charge of one appointment, in the practice currency."""

    def __init__(
        self,
        currency: str = "USD",
        display_decimal_places: int = DISPLAY_DECIMAL_PLACES,
    ):
        self._currency = currency
        self._display_decimal_places = display_decimal_places

    @property
    def currency(self) -> str:
        return self._currency

    def charge(self, appointment: AppointmentRecord) -> Money:
        fee = Money.from_nullable(appointment.appointment_fee, self._currency)
        adjustable = Money.from_nullable(appointment.adjustable_amount, self._currency)
        write_off = Money.from_nullable(appointment.write_off, self._currency)
        return fee + adjustable - write_off

    def display_charge(self, appointment: AppointmentRecord) -> Money:
        return self.charge(appointment).round(self._display_decimal_places)

    def has_fee(self, appointment: AppointmentRecord) -> bool:
        return appointment.appointment_fee is not None
