"""
Module: billing_engines.payments
Responsibility:
    Aggregate completed payments against an invoice (or a set of invoices)
    into invoiced / paid / unpaid figures, and derive an appointment's
    billing status from them.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only COMPLETED payments count; each contributes amount + credit_applied.
    - No invoice means invoiced = paid = unpaid = 0.
    - unpaid is clamped at zero for display, but unpaid_raw keeps the
      negative value of an overpayment, and the overpayment is logged.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from billing_kernel.domain.dtos import BillingStatus, InvoiceRecord, PaymentRecord
from billing_kernel.domain.values import Money
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.payments")


@dataclass(frozen=True)
class InvoicePaymentSummary:
    """
    invoiced / paid / unpaid for one invoice or a set of them.

    unpaid_raw = invoiced - paid and may be negative (overpayment).
    """

    invoiced: Money
    paid: Money
    unpaid_raw: Money
    has_invoice: bool = True

    @property
    def unpaid(self) -> Money:
        if not self.has_invoice:
            return Money.zero(self.unpaid_raw.currency)
        return self.unpaid_raw.floor_zero()

    @property
    def overpayment(self) -> Money:
        return (-self.unpaid_raw).floor_zero()

    @property
    def is_overpaid(self) -> bool:
        return self.unpaid_raw.is_negative


class InvoicePaymentAggregator:
    """Sums completed payments against invoices."""

    def __init__(self, currency: str = "USD"):
        self._currency = currency

    def payment_contribution(self, payment: PaymentRecord) -> Money:
        """amount + credit_applied of one payment, regardless of status."""
        return Money.of(payment.amount, self._currency) + Money.from_nullable(
            payment.credit_applied, self._currency
        )

    def paid(self, payments: Iterable[PaymentRecord]) -> Money:
        return Money.sum(
            (self.payment_contribution(p) for p in payments if p.is_completed),
            self._currency,
        )

    def aggregate(self, invoice: InvoiceRecord | None) -> InvoicePaymentSummary:
        if invoice is None:
            zero = Money.zero(self._currency)
            return InvoicePaymentSummary(
                invoiced=zero, paid=zero, unpaid_raw=zero, has_invoice=False,
            )

        invoiced = Money.of(invoice.amount, self._currency)
        paid = self.paid(invoice.payments)
        summary = InvoicePaymentSummary(
            invoiced=invoiced, paid=paid, unpaid_raw=invoiced - paid,
        )
        if summary.is_overpaid:
            logger.warning(
                "invoice_overpaid",
                extra={
                    "invoice_id": str(invoice.id),
                    "invoiced": str(invoiced.amount),
                    "paid": str(paid.amount),
                },
            )
        return summary

    def aggregate_many(self, invoices: Iterable[InvoiceRecord]) -> InvoicePaymentSummary:
        """Statement-level totals over several invoices."""
        invoiced = Money.zero(self._currency)
        paid = Money.zero(self._currency)
        count = 0
        for invoice in invoices:
            summary = self.aggregate(invoice)
            invoiced = invoiced + summary.invoiced
            paid = paid + summary.paid
            count += 1
        return InvoicePaymentSummary(
            invoiced=invoiced,
            paid=paid,
            unpaid_raw=invoiced - paid,
            has_invoice=count > 0,
        )

    def billing_status(self, summary: InvoicePaymentSummary) -> BillingStatus:
        if not summary.has_invoice:
            return BillingStatus.UNINVOICED
        if summary.paid >= summary.invoiced:
            return BillingStatus.PAID
        if summary.paid.is_positive:
            return BillingStatus.PARTIAL
        return BillingStatus.UNPAID
