"""
Module: billing_engines.outstanding_balance
Responsibility:
    Roll appointments, invoices and payments in a date range up to one
    balance row per client group, plus grand totals over every group.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - services_provided = sum of ChargeResolver.charge() over the group's
      appointments, the same figure the appointment status report shows.
    - uninvoiced_raw = services_provided - invoiced portion attributable to
      appointments.  It may go negative (over-invoiced); the displayed
      uninvoiced is floored at zero and the condition is flagged and logged.
    - client_balance = invoiced - client_paid.
    - A group with zero services, zero invoiced and zero paid is excluded.
    - Rows sort by group name (case-insensitive, None as ""), then group id.
    - Totals are summed from unrounded per-group values across the whole
      result set, then rounded once.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any
from uuid import UUID

from billing_engines.charge import ChargeResolver
from billing_engines.payments import InvoicePaymentAggregator
from billing_engines.responsible_biller import ResponsibleBillerSelector
from billing_engines.tracer import traced_engine
from billing_kernel.db.types import DISPLAY_DECIMAL_PLACES
from billing_kernel.domain.dtos import (
    AppointmentRecord,
    ClientGroupRecord,
    InvoiceRecord,
    MembershipRecord,
    PaymentRecord,
)
from billing_kernel.domain.values import Money
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.outstanding_balance")


@dataclass(frozen=True)
class ClientGroupBalance:
    client_group_id: UUID
    client_group_name: str | None
    services_provided: Decimal
    uninvoiced: Decimal
    invoiced: Decimal
    client_paid: Decimal
    client_balance: Decimal
    uninvoiced_raw: Decimal
    is_over_invoiced: bool = False
    responsible_first_name: str | None = None
    responsible_last_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "clientGroupId": str(self.client_group_id),
            "clientGroupName": self.client_group_name,
            "responsibleFirstName": self.responsible_first_name,
            "responsibleLastName": self.responsible_last_name,
            "servicesProvided": str(self.services_provided),
            "uninvoiced": str(self.uninvoiced),
            "invoiced": str(self.invoiced),
            "clientPaid": str(self.client_paid),
            "clientBalance": str(self.client_balance),
        }


@dataclass(frozen=True)
class BalanceTotals:
    services_provided: Decimal
    uninvoiced: Decimal
    invoiced: Decimal
    client_paid: Decimal
    client_balance: Decimal
    uninvoiced_raw: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "servicesProvided": str(self.services_provided),
            "uninvoiced": str(self.uninvoiced),
            "invoiced": str(self.invoiced),
            "clientPaid": str(self.client_paid),
            "clientBalance": str(self.client_balance),
        }


@dataclass(frozen=True)
class BalanceRollup:
    """Every non-empty group in sort order, and totals over all of them."""

    rows: tuple[ClientGroupBalance, ...]
    totals: BalanceTotals

    @property
    def total(self) -> int:
        return len(self.rows)


@dataclass
class _GroupFigures:
    services: Money
    invoiced: Money
    invoiced_from_appointments: Money
    paid: Money

    @property
    def is_empty(self) -> bool:
        return self.services.is_zero and self.invoiced.is_zero and self.paid.is_zero

    @property
    def uninvoiced_raw(self) -> Money:
        return self.services - self.invoiced_from_appointments

    @property
    def balance(self) -> Money:
        return self.invoiced - self.paid


@dataclass
class _Totals:
    currency: str
    values: dict[str, Money] = field(default_factory=dict)

    def add(self, name: str, amount: Money) -> None:
        self.values[name] = self.values.get(name, Money.zero(self.currency)) + amount

    def get(self, name: str) -> Money:
        return self.values.get(name, Money.zero(self.currency))


class OutstandingBalanceCalculator:
    """Per-group balance rollup."""

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
        self._currency = charge_resolver.currency

    def _figures(self) -> _GroupFigures:
        zero = Money.zero(self._currency)
        return _GroupFigures(zero, zero, zero, zero)

    @traced_engine(
        "outstanding_balance", "1.0",
        fingerprint_fields=("appointments", "invoices", "payments"),
    )
    def rollup(
        self,
        appointments: Iterable[AppointmentRecord],
        invoices: Iterable[InvoiceRecord],
        payments: Iterable[tuple[UUID, PaymentRecord]],
        groups: Mapping[UUID, ClientGroupRecord],
    ) -> BalanceRollup:
        figures: dict[UUID, _GroupFigures] = {}

        for appointment in appointments:
            if appointment.client_group_id is None:
                continue
            f = figures.setdefault(appointment.client_group_id, self._figures())
            f.services = f.services + self._charges.charge(appointment)

        for invoice in invoices:
            if invoice.client_group_id is None:
                continue
            f = figures.setdefault(invoice.client_group_id, self._figures())
            amount = Money.of(invoice.amount, self._currency)
            f.invoiced = f.invoiced + amount
            if invoice.appointment_id is not None:
                f.invoiced_from_appointments = f.invoiced_from_appointments + amount

        for group_id, payment in payments:
            if not payment.is_completed:
                continue
            f = figures.setdefault(group_id, self._figures())
            f.paid = f.paid + self._aggregator.payment_contribution(payment)

        totals = _Totals(self._currency)
        rows: list[ClientGroupBalance] = []
        for group_id, f in figures.items():
            if f.is_empty:
                continue
            group = groups.get(group_id)
            uninvoiced_raw = f.uninvoiced_raw
            over_invoiced = uninvoiced_raw.is_negative
            if over_invoiced:
                logger.warning(
                    "client_group_over_invoiced",
                    extra={
                        "client_group_id": str(group_id),
                        "services_provided": str(f.services.amount),
                        "invoiced_from_appointments": str(
                            f.invoiced_from_appointments.amount
                        ),
                    },
                )

            totals.add("services_provided", f.services)
            totals.add("uninvoiced", uninvoiced_raw.floor_zero())
            totals.add("uninvoiced_raw", uninvoiced_raw)
            totals.add("invoiced", f.invoiced)
            totals.add("client_paid", f.paid)
            totals.add("client_balance", f.balance)

            rows.append(
                ClientGroupBalance(
                    client_group_id=group_id,
                    client_group_name=group.name if group is not None else None,
                    services_provided=f.services.round(self._dp).amount,
                    uninvoiced=uninvoiced_raw.floor_zero().round(self._dp).amount,
                    invoiced=f.invoiced.round(self._dp).amount,
                    client_paid=f.paid.round(self._dp).amount,
                    client_balance=f.balance.round(self._dp).amount,
                    uninvoiced_raw=uninvoiced_raw.round(self._dp).amount,
                    is_over_invoiced=over_invoiced,
                )
            )

        rows.sort(key=lambda r: ((r.client_group_name or "").casefold(), str(r.client_group_id)))

        return BalanceRollup(
            rows=tuple(rows),
            totals=BalanceTotals(
                services_provided=totals.get("services_provided").round(self._dp).amount,
                uninvoiced=totals.get("uninvoiced").round(self._dp).amount,
                invoiced=totals.get("invoiced").round(self._dp).amount,
                client_paid=totals.get("client_paid").round(self._dp).amount,
                client_balance=totals.get("client_balance").round(self._dp).amount,
                uninvoiced_raw=totals.get("uninvoiced_raw").round(self._dp).amount,
            ),
        )

    def with_billers(
        self,
        rows: Sequence[ClientGroupBalance],
        memberships_by_group: Mapping[UUID, Sequence[MembershipRecord]],
    ) -> list[ClientGroupBalance]:
        """Fill in the responsible biller's names on (a page of) rows."""
        filled = []
        for row in rows:
            biller = self._billers.select(memberships_by_group.get(row.client_group_id, ()))
            filled.append(
                replace(
                    row,
                    responsible_first_name=biller.first_name,
                    responsible_last_name=biller.last_name,
                )
            )
        return filled
