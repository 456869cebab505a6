"""
Report request validation (``billing_modules.analytics.validation``).

Every report validates its inputs here before any query runs.  Problems
are collected, not short-circuited, so a caller sees every bad field in
one ``ValidationError``.

Accepted dates are ``YYYY-MM-DD`` strings (a full ISO-8601 timestamp is
accepted and its date part used), ``date`` or ``datetime`` objects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from uuid import UUID

from billing_engines.pagination import PageRequest
from billing_kernel.domain.dtos import AppointmentStatus, NoteFilter
from billing_kernel.exceptions import (
    FieldError,
    InvalidDateRangeError,
    InvalidPaginationError,
    ValidationError,
)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ].+)?$")

_LABELS = {"start_date": "Start date", "end_date": "End date"}


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


def _parse_date(field: str, value: Any, errors: list[FieldError]) -> date | None:
    label = _LABELS[field]
    if value is None or (isinstance(value, str) and not value.strip()):
        errors.append(FieldError(field, f"{label} is required."))
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _ISO_DATE.match(value.strip()):
        errors.append(FieldError(field, f"{label} must be in YYYY-MM-DD format."))
        return None
    text = value.strip()
    try:
        if len(text) > 10:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        errors.append(FieldError(field, f"{label} is invalid."))
        return None


def _date_errors(start_value: Any, end_value: Any) -> tuple[DateRange | None, list[FieldError]]:
    errors: list[FieldError] = []
    start = _parse_date("start_date", start_value, errors)
    end = _parse_date("end_date", end_value, errors)
    if start is not None and end is not None and end < start:
        errors.append(FieldError("end_date", "End date must be on or after start date."))
    if errors or start is None or end is None:
        return None, errors
    return DateRange(start, end), errors


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, str) and value.strip().isdecimal():
        parsed = int(value.strip())
        return parsed if parsed >= 1 else None
    return None


def _pagination_errors(
    page: Any,
    page_size: Any,
    default_page_size: int,
    max_page_size: int,
) -> tuple[PageRequest | None, list[FieldError]]:
    errors: list[FieldError] = []

    parsed_page = 1 if page is None else _positive_int(page)
    if parsed_page is None:
        errors.append(FieldError("page", "Page must be a positive integer."))

    parsed_size = default_page_size if page_size is None else _positive_int(page_size)
    if parsed_size is None:
        errors.append(FieldError("page_size", "Page size must be a positive integer."))
    elif parsed_size > max_page_size:
        errors.append(
            FieldError("page_size", f"Page size must not exceed {max_page_size}.")
        )

    if errors:
        return None, errors
    return PageRequest(page=parsed_page, page_size=parsed_size), errors


def validate_date_range(start_date: Any, end_date: Any) -> DateRange:
    """
    Raises:
        InvalidDateRangeError: with one FieldError per problem.
    """
    date_range, errors = _date_errors(start_date, end_date)
    if errors:
        raise InvalidDateRangeError("Invalid date parameters", details=errors)
    return date_range


def validate_pagination(
    page: Any = None,
    page_size: Any = None,
    default_page_size: int = 10,
    max_page_size: int = 100,
) -> PageRequest:
    """
    Raises:
        InvalidPaginationError: with one FieldError per problem.
    """
    request, errors = _pagination_errors(page, page_size, default_page_size, max_page_size)
    if errors:
        raise InvalidPaginationError("Invalid pagination parameters", details=errors)
    return request


def validate_uuid(field: str, value: Any, errors: list[FieldError]) -> UUID | None:
    """Parse an optional id; a malformed one is recorded in ``errors``."""
    if value is None or value == "":
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        errors.append(FieldError(field, f"{field} must be a valid UUID."))
        return None


def _note_filter(value: Any, errors: list[FieldError]) -> NoteFilter | None:
    if value is None or value == "":
        return None
    try:
        return NoteFilter(value)
    except ValueError:
        errors.append(
            FieldError("note_status", "Note status must be one of: with_note, no_note.")
        )
        return None


def _status(value: Any, errors: list[FieldError]) -> str | None:
    if value is None or value == "":
        return None
    try:
        return AppointmentStatus(value).value
    except ValueError:
        errors.append(FieldError("status", f"Unknown appointment status: {value}."))
        return None


@dataclass(frozen=True)
class ReportRequest:
    """A validated report request."""

    date_range: DateRange
    page: PageRequest | None = None
    client_group_id: UUID | None = None
    clinician_id: UUID | None = None
    status: str | None = None
    note_filter: NoteFilter | None = None


def validate_report_request(
    start_date: Any,
    end_date: Any,
    *,
    page: Any = None,
    page_size: Any = None,
    paginated: bool = True,
    client_group_id: Any = None,
    clinician_id: Any = None,
    status: Any = None,
    note_status: Any = None,
    default_page_size: int = 10,
    max_page_size: int = 100,
) -> ReportRequest:
    """
    Validate every report input at once.

    Raises:
        InvalidDateRangeError: only date fields are wrong.
        InvalidPaginationError: only page/page_size are wrong.
        ValidationError: anything else, or a mix.
    """
    date_range, date_errs = _date_errors(start_date, end_date)

    page_request, page_errs = (None, [])
    if paginated:
        page_request, page_errs = _pagination_errors(
            page, page_size, default_page_size, max_page_size
        )

    other_errs: list[FieldError] = []
    group_id = validate_uuid("client_group_id", client_group_id, other_errs)
    clin_id = validate_uuid("clinician_id", clinician_id, other_errs)
    parsed_status = _status(status, other_errs)
    note_filter = _note_filter(note_status, other_errs)

    errors = date_errs + page_errs + other_errs
    if errors:
        if errors == date_errs:
            raise InvalidDateRangeError("Invalid date parameters", details=errors)
        if errors == page_errs:
            raise InvalidPaginationError("Invalid pagination parameters", details=errors)
        raise ValidationError("Invalid report parameters", details=errors)

    return ReportRequest(
        date_range=date_range,
        page=page_request,
        client_group_id=group_id,
        clinician_id=clin_id,
        status=parsed_status,
        note_filter=note_filter,
    )
