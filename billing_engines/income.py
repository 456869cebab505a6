"""
Module: billing_engines.income
Responsibility:
    Monthly income rollup over completed payments: what clients paid, the
    gross income it represents, the clinicians' cut and the practice's net.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - client_payments sums amount + credit_applied.
    - gross counts the appointment's charge when the invoiced appointment
      has a fee, and the payment contribution otherwise.
    - clinician_cut = gross * percentage_split / 100 when the invoice's
      clinician has a split, else zero.  net = gross - clinician_cut.
    - Months are "YYYY-MM" of the payment date, newest first.  Rounding
      happens once per figure, after summing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from billing_engines.charge import ChargeResolver
from billing_engines.tracer import traced_engine
from billing_kernel.db.types import DISPLAY_DECIMAL_PLACES
from billing_kernel.domain.dtos import IncomePaymentRecord
from billing_kernel.domain.values import Money

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class IncomeFigures:
    client_payments: Decimal
    gross_income: Decimal
    clinician_cut: Decimal
    net_income: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "clientPayments": str(self.client_payments),
            "grossIncome": str(self.gross_income),
            "clinicianCut": str(self.clinician_cut),
            "netIncome": str(self.net_income),
        }


@dataclass(frozen=True)
class IncomeMonth(IncomeFigures):
    month: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.month, **super().to_dict()}


@dataclass(frozen=True)
class IncomeRollup:
    rows: tuple[IncomeMonth, ...]
    totals: IncomeFigures


class _Sums:
    def __init__(self, currency: str):
        zero = Money.zero(currency)
        self.payments = zero
        self.gross = zero
        self.cut = zero

    def add(self, payments: Money, gross: Money, cut: Money) -> None:
        self.payments = self.payments + payments
        self.gross = self.gross + gross
        self.cut = self.cut + cut


class IncomeCalculator:
    def __init__(
        self,
        charge_resolver: ChargeResolver,
        display_decimal_places: int = DISPLAY_DECIMAL_PLACES,
    ):
        self._charges = charge_resolver
        self._currency = charge_resolver.currency
        self._dp = display_decimal_places

    def _figures(self, sums: _Sums) -> dict[str, Decimal]:
        return {
            "client_payments": sums.payments.round(self._dp).amount,
            "gross_income": sums.gross.round(self._dp).amount,
            "clinician_cut": sums.cut.round(self._dp).amount,
            "net_income": (sums.gross - sums.cut).round(self._dp).amount,
        }

    @traced_engine("income", "1.0", fingerprint_fields=("payments",))
    def rollup(self, payments: Iterable[IncomePaymentRecord]) -> IncomeRollup:
        by_month: dict[str, _Sums] = {}
        totals = _Sums(self._currency)

        for payment in payments:
            contribution = Money.of(payment.amount, self._currency) + Money.from_nullable(
                payment.credit_applied, self._currency
            )
            appointment = payment.appointment
            if appointment is not None and self._charges.has_fee(appointment):
                gross = self._charges.charge(appointment)
            else:
                gross = contribution
            if payment.percentage_split is not None:
                cut = gross * (payment.percentage_split / _HUNDRED)
            else:
                cut = Money.zero(self._currency)

            month = payment.payment_date.strftime("%Y-%m")
            by_month.setdefault(month, _Sums(self._currency)).add(contribution, gross, cut)
            totals.add(contribution, gross, cut)

        rows = tuple(
            IncomeMonth(month=month, **self._figures(by_month[month]))
            for month in sorted(by_month, reverse=True)
        )
        return IncomeRollup(rows=rows, totals=IncomeFigures(**self._figures(totals)))
