"""
Analytics Module.

Read-only practice reports: appointment status, client-group outstanding
balance and monthly income.
"""

from billing_modules.analytics.config import AnalyticsConfig
from billing_modules.analytics.models import (
    AppointmentStatusReport,
    IncomeReport,
    OutstandingBalanceReport,
    ReportMetadata,
    ReportType,
)
from billing_modules.analytics.service import AnalyticsService
from billing_modules.analytics.validation import (
    DateRange,
    ReportRequest,
    validate_date_range,
    validate_pagination,
    validate_report_request,
)

__all__ = [
    "AnalyticsConfig",
    "AnalyticsService",
    "AppointmentStatusReport",
    "DateRange",
    "IncomeReport",
    "OutstandingBalanceReport",
    "ReportMetadata",
    "ReportRequest",
    "ReportType",
    "validate_date_range",
    "validate_pagination",
    "validate_report_request",
]
