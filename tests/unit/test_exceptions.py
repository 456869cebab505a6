"""
Tests for the billing error hierarchy and its API payloads.
"""

import pytest

from billing_kernel.exceptions import (
    AppointmentNotFoundError,
    BillingEngineError,
    ConflictError,
    FieldError,
    InternalError,
    InvalidAmountError,
    InvalidDateRangeError,
    InvoiceLockedError,
    NotFoundError,
    OptimisticLockError,
    ValidationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error, parent",
        [
            (InvalidAmountError("fee", "-1", "must not be negative"), ValidationError),
            (InvalidDateRangeError("Invalid date parameters"), ValidationError),
            (AppointmentNotFoundError("abc"), NotFoundError),
            (InvoiceLockedError("a", "i", "PAID"), ConflictError),
            (OptimisticLockError("Appointment", "a"), ConflictError),
            (InternalError("report"), BillingEngineError),
        ],
    )
    def test_parent(self, error, parent):
        assert isinstance(error, parent)
        assert isinstance(error, BillingEngineError)

    def test_http_status_hints(self):
        assert ValidationError("x").http_status == 400
        assert AppointmentNotFoundError("x").http_status == 404
        assert OptimisticLockError("Appointment", "x").http_status == 409
        assert InternalError("x").http_status == 500


class TestResponses:
    def test_validation_details(self):
        error = ValidationError(
            "Invalid date parameters",
            details=[FieldError("start_date", "Start date is required.")],
        )
        assert error.fields == ("start_date",)
        assert error.to_response() == {
            "error": "Invalid date parameters",
            "code": "VALIDATION_ERROR",
            "details": [{"field": "start_date", "message": "Start date is required."}],
        }

    def test_invalid_amount_names_field(self):
        error = InvalidAmountError("write_off", "-3", "must not be negative")
        assert error.code == "INVALID_AMOUNT"
        assert error.to_response()["details"] == [
            {"field": "write_off", "message": "must not be negative"}
        ]

    def test_internal_error_hides_cause(self):
        try:
            try:
                raise RuntimeError("password=hunter2 at db.internal:5432")
            except RuntimeError as exc:
                raise InternalError("appointment_status_report") from exc
        except InternalError as error:
            payload = error.to_response()
            assert "hunter2" not in payload["error"]
            assert payload["code"] == "INTERNAL_ERROR"
            assert isinstance(error.__cause__, RuntimeError)
            assert error.operation == "appointment_status_report"

    def test_not_found_message(self):
        assert str(AppointmentNotFoundError("123")) == "Appointment not found: 123"
