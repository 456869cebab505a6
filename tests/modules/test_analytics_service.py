"""
End-to-end tests for AnalyticsService against an in-memory database.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from billing_kernel.db.base import Base
from billing_kernel.domain.dtos import BillingStatus, NoteStatus
from billing_kernel.exceptions import (
    InternalError,
    InvalidDateRangeError,
    InvalidPaginationError,
)
from billing_modules.analytics import AnalyticsConfig, AnalyticsService
from billing_modules.analytics.models import ReportType

JAN_FIRST = "2024-01-01"
JAN_LAST = "2024-01-31"


@pytest.fixture
def analytics(session, clock):
    return AnalyticsService(session, clock=clock)


class TestInvoiceLifecycle:
    """An appointment moving from uninvoiced to partially paid."""

    def test_uninvoiced_then_partially_paid(self, analytics, factory):
        group = factory.group()
        appointment = factory.appointment(group, datetime(2024, 1, 15, 10), fee="100.00")

        row = analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST).rows[0]
        assert (row.charge, row.uninvoiced, row.paid, row.unpaid) == (
            Decimal("100.00"), Decimal("100.00"), Decimal("0.00"), Decimal("0.00"),
        )
        assert row.billing_status == BillingStatus.UNINVOICED

        invoice = factory.invoice(appointment, amount="100.00")
        factory.payment(invoice, amount="50.00")

        row = analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST).rows[0]
        assert (row.charge, row.uninvoiced, row.paid, row.unpaid) == (
            Decimal("100.00"), Decimal("0.00"), Decimal("50.00"), Decimal("50.00"),
        )
        assert row.billing_status == BillingStatus.PARTIAL

        balance = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).rows[0]
        assert balance.services_provided == Decimal("100.00")
        assert balance.invoiced == Decimal("100.00")
        assert balance.uninvoiced == Decimal("0.00")
        assert balance.client_paid == Decimal("50.00")
        assert balance.client_balance == Decimal("50.00")

    def test_voided_invoice_uninvoiced_in_both_reports(self, analytics, factory):
        group = factory.group()
        appointment = factory.appointment(group, datetime(2024, 1, 15, 10), fee="100.00")
        factory.invoice(appointment, amount="100.00", status="VOID")

        row = analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST).rows[0]
        balance = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).rows[0]

        assert row.uninvoiced == balance.uninvoiced == Decimal("100.00")
        assert row.unpaid == Decimal("0.00")
        assert row.billing_status == BillingStatus.UNINVOICED
        assert balance.invoiced == Decimal("0.00")

    def test_reports_agree_on_charge(self, analytics, factory):
        group = factory.group()
        factory.appointment(
            group, datetime(2024, 1, 9, 9), fee="120.00", write_off="15.00", adjustable="5.00",
        )

        status_row = analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST).rows[0]
        balance_row = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).rows[0]

        assert status_row.charge == Decimal("110.00")
        assert balance_row.services_provided == status_row.charge


class TestAppointmentStatusReport:
    def test_pagination_totals(self, analytics, factory):
        group = factory.group()
        for day in range(12):
            factory.appointment(group, datetime(2024, 1, 2 + day, 9))

        third = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, page=3, page_size=5,
        )
        beyond = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, page=4, page_size=5,
        )

        assert len(third.rows) == 2
        assert third.pagination.to_dict() == {
            "page": 3, "pageSize": 5, "total": 12, "totalPages": 3,
        }
        assert beyond.rows == ()
        assert beyond.pagination.total == 12

    def test_default_page_size_from_config(self, session, clock, factory):
        group = factory.group()
        for day in range(4):
            factory.appointment(group, datetime(2024, 1, 2 + day, 9))
        service = AnalyticsService(
            session, clock=clock, config=AnalyticsConfig(default_page_size=3),
        )

        report = service.get_appointment_status_report(JAN_FIRST, JAN_LAST)

        assert len(report.rows) == 3
        assert report.pagination.total_pages == 2

    def test_note_filter_paginates_accurately(self, analytics, factory):
        group = factory.group()
        for day in range(10):
            appointment = factory.appointment(group, datetime(2024, 1, 1, 9) + timedelta(days=day))
            if day % 3 == 0:
                factory.note(appointment)

        first = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, note_status="no_note", page=1, page_size=4,
        )
        second = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, note_status="no_note", page=2, page_size=4,
        )

        assert first.pagination.total == 6
        assert [len(first.rows), len(second.rows)] == [4, 2]
        assert all(
            r.progress_note_status == NoteStatus.NO_NOTE
            for r in first.rows + second.rows
        )

    def test_client_group_filter_and_names(self, analytics, factory):
        group = factory.group()
        other = factory.group(name="Other Family")
        ada = factory.client("Ada", "Lovelace")
        byron = factory.client("Byron", "Lovelace")
        factory.membership(group, ada, created_at=datetime(2023, 1, 1))
        factory.membership(group, byron, created_at=datetime(2023, 2, 1))
        wanted = factory.appointment(group, datetime(2024, 1, 10, 9))
        factory.appointment(other, datetime(2024, 1, 11, 9))

        report = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, client_group_id=str(group.id),
        )

        assert [r.appointment_id for r in report.rows] == [wanted.id]
        assert report.rows[0].client == "Ada Lovelace & Byron Lovelace"
        assert report.metadata.filters == {"client_group_id": str(group.id)}

    def test_metadata_and_payload(self, analytics, factory):
        factory.appointment(factory.group(), datetime(2024, 1, 10, 9))

        report = analytics.get_appointment_status_report(
            JAN_FIRST, JAN_LAST, note_status="no_note",
        )
        payload = report.to_dict()

        assert report.metadata.report_type == ReportType.APPOINTMENT_STATUS
        assert payload["metadata"] == {
            "reportType": "appointment_status",
            "currency": "USD",
            "generatedAt": "2024-03-01T09:00:00",
            "periodStart": "2024-01-01",
            "periodEnd": "2024-01-31",
            "filters": {"note_status": "no_note"},
        }
        assert payload["data"][0]["billingStatus"] == "UNINVOICED"
        assert payload["pagination"]["total"] == 1

    def test_report_logged(self, analytics, factory, captured_logs):
        factory.appointment(factory.group(), datetime(2024, 1, 10, 9))

        analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST)

        generated = [
            r for r in captured_logs()
            if r["message"] == "appointment_status_report_generated"
        ]
        assert generated[0]["total"] == 1
        assert generated[0]["report"] == "appointment_status"


class TestOutstandingBalanceReport:
    def _groups(self, factory, names):
        groups = []
        for name in names:
            group = factory.group(name=name)
            factory.appointment(group, datetime(2024, 1, 10, 9), fee="10.00")
            groups.append(group)
        return groups

    def test_totals_span_every_page(self, analytics, factory):
        self._groups(factory, ["Carver", "adams", "Baker"])

        second = analytics.get_outstanding_balance_report(
            JAN_FIRST, JAN_LAST, page=2, page_size=2,
        )

        assert [r.client_group_name for r in second.rows] == ["Carver"]
        assert second.pagination.total == 3
        assert second.totals.services_provided == Decimal("30.00")
        assert second.totals.uninvoiced == Decimal("30.00")

    def test_sorted_by_name(self, analytics, factory):
        self._groups(factory, ["Carver", "adams", "Baker"])

        report = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST)

        assert [r.client_group_name for r in report.rows] == ["adams", "Baker", "Carver"]

    def test_quiet_groups_excluded(self, analytics, factory):
        self._groups(factory, ["Active"])
        quiet = factory.group(name="Quiet")
        factory.appointment(quiet, datetime(2023, 6, 1, 9))

        report = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST)

        assert [r.client_group_name for r in report.rows] == ["Active"]

    def test_responsible_biller_on_page_rows(self, analytics, factory):
        group = self._groups(factory, ["Lovelace"])[0]
        factory.membership(group, factory.client("Ada", "Lovelace"), created_at=datetime(2023, 1, 1))
        factory.membership(
            group,
            factory.client("Anne", "Milbanke"),
            created_at=datetime(2023, 3, 1),
            is_responsible_for_billing=True,
        )

        row = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).rows[0]

        assert (row.responsible_first_name, row.responsible_last_name) == ("Anne", "Milbanke")

    def test_group_without_members(self, analytics, factory):
        self._groups(factory, ["Empty"])

        row = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).rows[0]

        assert row.responsible_first_name is None
        assert row.responsible_last_name is None

    def test_payload(self, analytics, factory):
        self._groups(factory, ["Solo"])

        payload = analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST).to_dict()

        assert payload["totals"]["servicesProvided"] == "10.00"
        assert payload["data"][0]["clientGroupName"] == "Solo"
        assert payload["metadata"]["reportType"] == "outstanding_balance"


class TestIncomeReport:
    def test_monthly_income_with_clinician_cut(self, analytics, factory):
        group = factory.group()
        clinician = factory.clinician(percentage_split="40")
        appointment = factory.appointment(group, datetime(2024, 1, 10, 9), fee="100.00")
        invoice = factory.invoice(appointment, clinician_id=clinician.id)
        factory.payment(invoice, amount="60.00")

        report = analytics.get_income_report(JAN_FIRST, JAN_LAST)

        january = report.rows[0]
        assert january.month == "2024-01"
        assert january.client_payments == Decimal("60.00")
        assert january.gross_income == Decimal("100.00")
        assert january.clinician_cut == Decimal("40.00")
        assert january.net_income == Decimal("60.00")
        assert report.totals.net_income == Decimal("60.00")

    def test_clinician_filter(self, analytics, factory):
        group = factory.group()
        first = factory.clinician("Anna", "Freud")
        second = factory.clinician("Carl", "Jung")
        for clinician, amount in ((first, "30.00"), (second, "70.00")):
            appointment = factory.appointment(group, datetime(2024, 1, 10, 9), fee=None)
            invoice = factory.invoice(appointment, clinician_id=clinician.id)
            factory.payment(invoice, amount=amount)

        report = analytics.get_income_report(JAN_FIRST, JAN_LAST, clinician_id=first.id)

        assert report.totals.client_payments == Decimal("30.00")
        assert report.metadata.filters == {"clinician_id": str(first.id)}

    def test_no_payments(self, analytics):
        report = analytics.get_income_report(JAN_FIRST, JAN_LAST)

        assert report.rows == ()
        assert report.to_dict()["totals"]["netIncome"] == "0.00"


class TestFailures:
    def test_validation_precedes_queries(self, analytics, engine):
        Base.metadata.drop_all(engine)

        with pytest.raises(InvalidDateRangeError):
            analytics.get_appointment_status_report("2024-02-01", JAN_FIRST)
        with pytest.raises(InvalidPaginationError):
            analytics.get_outstanding_balance_report(JAN_FIRST, JAN_LAST, page_size=500)
        with pytest.raises(InvalidPaginationError):
            analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST, page="\u00b2")

    def test_database_failure_is_internal_error(self, analytics, engine, captured_logs):
        Base.metadata.drop_all(engine)

        with pytest.raises(InternalError) as exc_info:
            analytics.get_appointment_status_report(JAN_FIRST, JAN_LAST)

        error = exc_info.value
        assert isinstance(error.__cause__, SQLAlchemyError)
        assert error.to_response() == {
            "error": InternalError.PUBLIC_MESSAGE,
            "code": "INTERNAL_ERROR",
        }
        failures = [r for r in captured_logs() if r["message"] == "analytics_query_failed"]
        assert failures[0]["operation"] == "appointment_status_report"

    def test_slow_query_warning(self, session, clock, factory, captured_logs):
        factory.appointment(factory.group(), datetime(2024, 1, 10, 9))
        service = AnalyticsService(
            session, clock=clock, config=AnalyticsConfig(slow_query_threshold_ms=0),
        )

        service.get_income_report(date(2024, 1, 1), date(2024, 1, 31))

        slow = [r for r in captured_logs() if r["message"] == "income_slow_query"]
        assert slow and slow[0]["level"] == "WARNING"
        assert slow[0]["threshold_ms"] == 0
