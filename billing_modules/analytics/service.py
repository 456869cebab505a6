"""
Analytics Service (``billing_modules.analytics.service``).

Responsibility
--------------
Read-only orchestration of the three practice analytics reports:
appointment status, client-group outstanding balance and monthly income.
Each report validates its request, loads records through kernel
selectors and hands them to a pure engine for the money math.

Architecture position
---------------------
**Modules layer** -- thin glue between kernel selectors (reads) and
``billing_engines`` (calculation).  Constructor: ``session`` + ``clock``
+ ``config``.

Invariants enforced
-------------------
* Validation completes before the first query.
* The appointment status report filters (including the progress-note
  filter) in SQL, so the page and its total agree.
* Every report derives a charge through the same ``ChargeResolver``.
* Balance totals cover every non-empty group; only the page's rows get
  responsible-biller lookups.

Failure modes
-------------
* ``ValidationError`` (and subclasses) -- bad request input.
* ``InternalError`` -- a database failure; the cause is chained and
  logged, the public message stays generic.

Non-goals
---------
* Does NOT write to the database.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from billing_engines.appointment_status import AppointmentStatusRowBuilder
from billing_engines.charge import ChargeResolver
from billing_engines.income import IncomeCalculator
from billing_engines.outstanding_balance import OutstandingBalanceCalculator
from billing_engines.pagination import Pagination
from billing_engines.payments import InvoicePaymentAggregator
from billing_engines.responsible_biller import ResponsibleBillerSelector
from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.exceptions import InternalError
from billing_kernel.logging_config import LogContext, get_logger
from billing_kernel.selectors import (
    AppointmentFilter,
    AppointmentSelector,
    BalanceSelector,
    MembershipSelector,
    day_bounds,
)
from billing_modules.analytics.config import AnalyticsConfig
from billing_modules.analytics.models import (
    AppointmentStatusReport,
    IncomeReport,
    OutstandingBalanceReport,
    ReportMetadata,
    ReportType,
)
from billing_modules.analytics.validation import (
    DateRange,
    validate_report_request,
)

logger = get_logger("modules.analytics.service")


class AnalyticsService:
    """
    Builds analytics reports from kernel selectors and billing engines.

    Usage:
        service = AnalyticsService(session, clock=clock)
        report = service.get_appointment_status_report(
            "2024-01-01", "2024-01-31", note_status="no_note", page=2,
        )
        payload = report.to_dict()
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: AnalyticsConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or AnalyticsConfig.with_defaults()

        self._appointments = AppointmentSelector(session)
        self._balances = BalanceSelector(session)
        self._memberships = MembershipSelector(session)

        dp = self._config.display_decimal_places
        charges = ChargeResolver(self._config.currency, dp)
        aggregator = InvoicePaymentAggregator(self._config.currency)
        billers = ResponsibleBillerSelector()
        self._row_builder = AppointmentStatusRowBuilder(charges, aggregator, billers, dp)
        self._balance_calculator = OutstandingBalanceCalculator(
            charges, aggregator, billers, dp,
        )
        self._income_calculator = IncomeCalculator(charges, dp)

        logger.info(
            "analytics_service_initialized",
            extra={
                "currency": self._config.currency,
                "default_page_size": self._config.default_page_size,
            },
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @contextmanager
    def _timed(self, event: str, **fields: Any) -> Iterator[None]:
        """Log ``event`` at WARNING when the block runs past the threshold."""
        started = time.monotonic()
        yield
        elapsed_ms = (time.monotonic() - started) * 1000
        if elapsed_ms > self._config.slow_query_threshold_ms:
            logger.warning(
                event,
                extra={
                    "elapsed_ms": round(elapsed_ms, 1),
                    "threshold_ms": self._config.slow_query_threshold_ms,
                    **fields,
                },
            )

    @contextmanager
    def _database(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(
                "analytics_query_failed",
                extra={"operation": operation, "error": str(exc)},
                exc_info=True,
            )
            raise InternalError(operation) from exc

    def _metadata(
        self,
        report_type: ReportType,
        date_range: DateRange,
        filters: dict[str, Any],
    ) -> ReportMetadata:
        return ReportMetadata(
            report_type=report_type,
            currency=self._config.currency,
            generated_at=self._clock.now().isoformat(),
            period_start=date_range.start,
            period_end=date_range.end,
            filters={k: v for k, v in filters.items() if v is not None},
        )

    # =========================================================================
    # Appointment status
    # =========================================================================

    def get_appointment_status_report(
        self,
        start_date: Any,
        end_date: Any,
        client_group_id: Any = None,
        status: Any = None,
        note_status: Any = None,
        clinician_id: Any = None,
        page: Any = 1,
        page_size: Any = None,
    ) -> AppointmentStatusReport:
        """
        One page of appointments in the range with their billing status.

        Raises:
            ValidationError: bad input; no query has run.
            InternalError: the database failed.
        """
        request = validate_report_request(
            start_date,
            end_date,
            page=page,
            page_size=page_size,
            client_group_id=client_group_id,
            clinician_id=clinician_id,
            status=status,
            note_status=note_status,
            default_page_size=self._config.default_page_size,
            max_page_size=self._config.max_page_size,
        )

        with LogContext.bind(report=ReportType.APPOINTMENT_STATUS.value):
            start, end = day_bounds(request.date_range.start, request.date_range.end)
            appointment_filter = AppointmentFilter.for_report(
                start,
                end,
                client_group_id=request.client_group_id,
                status=request.status,
                clinician_id=request.clinician_id,
                note_filter=request.note_filter,
            )
            page_request = request.page

            with self._database("appointment_status_report"):
                with self._timed("appointment_status_slow_query", query="rows"):
                    appointments = self._appointments.find_appointments(
                        appointment_filter,
                        offset=page_request.offset,
                        limit=page_request.limit,
                    )
                with self._timed("appointment_status_slow_query", query="count"):
                    total = self._appointments.count_appointments(appointment_filter)

                ids = [a.id for a in appointments]
                invoices = self._appointments.find_invoices_for_appointments(ids)
                noted = self._appointments.find_appointment_ids_with_notes(ids)
                memberships = self._memberships.find_memberships_for_groups(
                    {a.client_group_id for a in appointments if a.client_group_id}
                )

            rows = self._row_builder.build_rows(
                appointments=appointments,
                invoices=invoices,
                noted_appointment_ids=noted,
                memberships_by_group=memberships,
            )
            pagination = Pagination.of(page_request, total)

            logger.info(
                "appointment_status_report_generated",
                extra={
                    "filters": appointment_filter.describe(),
                    "row_count": len(rows),
                    "total": total,
                    "page": pagination.page,
                },
            )

        return AppointmentStatusReport(
            metadata=self._metadata(
                ReportType.APPOINTMENT_STATUS,
                request.date_range,
                {
                    "client_group_id": (
                        str(request.client_group_id) if request.client_group_id else None
                    ),
                    "clinician_id": (
                        str(request.clinician_id) if request.clinician_id else None
                    ),
                    "status": request.status,
                    "note_status": (
                        request.note_filter.value if request.note_filter else None
                    ),
                },
            ),
            rows=tuple(rows),
            pagination=pagination,
        )

    # =========================================================================
    # Outstanding balance
    # =========================================================================

    def get_outstanding_balance_report(
        self,
        start_date: Any,
        end_date: Any,
        page: Any = 1,
        page_size: Any = None,
    ) -> OutstandingBalanceReport:
        """
        Per client group: services provided, uninvoiced, invoiced, paid and
        balance over the range, one page of groups at a time.

        Raises:
            ValidationError: bad input; no query has run.
            InternalError: the database failed.
        """
        request = validate_report_request(
            start_date,
            end_date,
            page=page,
            page_size=page_size,
            default_page_size=self._config.default_page_size,
            max_page_size=self._config.max_page_size,
        )

        with LogContext.bind(report=ReportType.OUTSTANDING_BALANCE.value):
            start, end = day_bounds(request.date_range.start, request.date_range.end)
            page_request = request.page

            with self._database("outstanding_balance_report"):
                with self._timed("outstanding_balance_slow_query", query="rows"):
                    appointments = self._balances.find_group_appointments(start, end)
                    invoices = self._balances.find_group_invoices(start, end)
                    payments = self._balances.find_group_payments(start, end)

                group_ids = (
                    {a.client_group_id for a in appointments}
                    | {i.client_group_id for i in invoices}
                    | {group_id for group_id, _ in payments}
                )
                groups = {g.id: g for g in self._balances.find_client_groups(group_ids)}

            rollup = self._balance_calculator.rollup(
                appointments=appointments,
                invoices=invoices,
                payments=payments,
                groups=groups,
            )

            page_rows = page_request.slice(rollup.rows)
            with self._database("outstanding_balance_report"):
                with self._timed("outstanding_balance_slow_query", query="billers"):
                    memberships = self._memberships.find_memberships_for_groups(
                        [row.client_group_id for row in page_rows]
                    )
            page_rows = self._balance_calculator.with_billers(page_rows, memberships)
            pagination = Pagination.of(page_request, rollup.total)

            logger.info(
                "outstanding_balance_report_generated",
                extra={
                    "group_count": rollup.total,
                    "row_count": len(page_rows),
                    "page": pagination.page,
                    "client_balance": str(rollup.totals.client_balance),
                },
            )

        return OutstandingBalanceReport(
            metadata=self._metadata(
                ReportType.OUTSTANDING_BALANCE, request.date_range, {},
            ),
            rows=tuple(page_rows),
            totals=rollup.totals,
            pagination=pagination,
        )

    # =========================================================================
    # Income
    # =========================================================================

    def get_income_report(
        self,
        start_date: Any,
        end_date: Any,
        clinician_id: Any = None,
    ) -> IncomeReport:
        """Monthly income from completed payments dated in the range."""
        request = validate_report_request(
            start_date,
            end_date,
            paginated=False,
            clinician_id=clinician_id,
        )

        with LogContext.bind(report=ReportType.INCOME.value):
            start, end = day_bounds(request.date_range.start, request.date_range.end)

            with self._database("income_report"):
                with self._timed("income_slow_query", query="payments"):
                    payments = self._balances.find_income_payments(
                        start, end, clinician_id=request.clinician_id,
                    )

            rollup = self._income_calculator.rollup(payments=payments)

            logger.info(
                "income_report_generated",
                extra={
                    "payment_count": len(payments),
                    "month_count": len(rollup.rows),
                    "net_income": str(rollup.totals.net_income),
                },
            )

        return IncomeReport(
            metadata=self._metadata(
                ReportType.INCOME,
                request.date_range,
                {"clinician_id": str(request.clinician_id) if request.clinician_id else None},
            ),
            rows=rollup.rows,
            totals=rollup.totals,
        )
