"""
Analytics Report Models (``billing_modules.analytics.models``).

Responsibility
--------------
Frozen dataclass value objects returned by ``AnalyticsService``: the
appointment status report, the client-group outstanding balance report
and the monthly income report.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Row types come
from the engines; this module wraps them with metadata and pagination.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields are ``Decimal`` already rounded for display.
* ``to_dict()`` renders money as strings so no float ever reaches JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from billing_engines.appointment_status import AppointmentStatusRow
from billing_engines.income import IncomeFigures, IncomeMonth
from billing_engines.outstanding_balance import BalanceTotals, ClientGroupBalance
from billing_engines.pagination import Pagination


class ReportType(str, Enum):
    """Types of analytics reports."""

    APPOINTMENT_STATUS = "appointment_status"
    OUTSTANDING_BALANCE = "outstanding_balance"
    INCOME = "income"


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every analytics report."""

    report_type: ReportType
    currency: str
    generated_at: str
    period_start: date
    period_end: date
    filters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "reportType": self.report_type.value,
            "currency": self.currency,
            "generatedAt": self.generated_at,
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            "filters": dict(self.filters),
        }


@dataclass(frozen=True)
class AppointmentStatusReport:
    metadata: ReportMetadata
    rows: tuple[AppointmentStatusRow, ...]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [row.to_dict() for row in self.rows],
            "pagination": self.pagination.to_dict(),
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class OutstandingBalanceReport:
    """One page of client-group rows; totals cover every group, not the page."""

    metadata: ReportMetadata
    rows: tuple[ClientGroupBalance, ...]
    totals: BalanceTotals
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [row.to_dict() for row in self.rows],
            "totals": self.totals.to_dict(),
            "pagination": self.pagination.to_dict(),
            "metadata": self.metadata.to_dict(),
        }


@dataclass(frozen=True)
class IncomeReport:
    metadata: ReportMetadata
    rows: tuple[IncomeMonth, ...]
    totals: IncomeFigures

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [row.to_dict() for row in self.rows],
            "totals": self.totals.to_dict(),
            "metadata": self.metadata.to_dict(),
        }
