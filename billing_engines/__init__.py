"""
Module: billing_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines: fee
    adjustment, charge, payment aggregation, responsible biller selection,
    pagination and the report rollups.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel/domain, billing_kernel/db/types,
    billing_kernel/exceptions and sibling engine modules.
    MUST NOT import billing_modules.

Invariants enforced:
    - Engines never read the clock or the database.
    - Decimal-only money arithmetic through billing_kernel.domain.values.Money.
    - Every report engine entry point is traced via ``@traced_engine``.
"""

from billing_engines.appointment_status import (
    AppointmentStatusRow,
    AppointmentStatusRowBuilder,
    compute_units,
    index_invoices_by_appointment,
)
from billing_engines.charge import ChargeResolver
from billing_engines.fee_adjustment import (
    FeeAdjustmentCalculator,
    FeeAdjustmentResult,
    adjusted_amount,
    parse_amount,
)
from billing_engines.income import IncomeCalculator, IncomeFigures, IncomeMonth, IncomeRollup
from billing_engines.outstanding_balance import (
    BalanceRollup,
    BalanceTotals,
    ClientGroupBalance,
    OutstandingBalanceCalculator,
)
from billing_engines.pagination import PageRequest, Pagination, total_pages
from billing_engines.payments import InvoicePaymentAggregator, InvoicePaymentSummary
from billing_engines.responsible_biller import (
    NO_BILLER,
    UNKNOWN_CLIENT,
    ResponsibleBiller,
    ResponsibleBillerSelector,
)
from billing_engines.tracer import traced_engine

__all__ = [
    "AppointmentStatusRow",
    "AppointmentStatusRowBuilder",
    "compute_units",
    "index_invoices_by_appointment",
    "ChargeResolver",
    "FeeAdjustmentCalculator",
    "FeeAdjustmentResult",
    "adjusted_amount",
    "parse_amount",
    "IncomeCalculator",
    "IncomeFigures",
    "IncomeMonth",
    "IncomeRollup",
    "BalanceRollup",
    "BalanceTotals",
    "ClientGroupBalance",
    "OutstandingBalanceCalculator",
    "PageRequest",
    "Pagination",
    "total_pages",
    "InvoicePaymentAggregator",
    "InvoicePaymentSummary",
    "NO_BILLER",
    "UNKNOWN_CLIENT",
    "ResponsibleBiller",
    "ResponsibleBillerSelector",
    "traced_engine",
]
