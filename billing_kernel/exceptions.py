"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every failure the engine can report has its own class, a machine-readable
CODE class attribute and structured attributes.  The presentation layer
catches by type and renders ``to_response()``; it never parses messages.

Example:
    try:
        service.get_outstanding_balance_report(...)
    except ValidationError as e:
        return json_response(e.to_response(), status=e.http_status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingEngineError (base)
    |
    +-- ValidationError                 400
    |   +-- InvalidAmountError
    |   +-- InvalidDateRangeError
    |   +-- InvalidPaginationError
    |
    +-- NotFoundError                   404
    |   +-- AppointmentNotFoundError
    |   +-- InvoiceNotFoundError
    |   +-- ClientGroupNotFoundError
    |
    +-- ConflictError                   409
    |   +-- InvoiceLockedError
    |   +-- OptimisticLockError
    |
    +-- CurrencyMismatchError
    |
    +-- InternalError                   500

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category     | Code                      | When Raised
-------------|---------------------------|-----------------------------------
Validation   | VALIDATION_ERROR          | Bad/missing input, field details
             | INVALID_AMOUNT            | Fee or write-off missing/negative
             | INVALID_DATE_RANGE        | Missing, malformed or inverted dates
             | INVALID_PAGINATION        | page/page_size not positive or too big
-------------|---------------------------|-----------------------------------
Not found    | APPOINTMENT_NOT_FOUND     | Appointment id doesn't exist
             | INVOICE_NOT_FOUND         | Invoice id doesn't exist
             | CLIENT_GROUP_NOT_FOUND    | Client group id doesn't exist
-------------|---------------------------|-----------------------------------
Conflict     | INVOICE_LOCKED            | Fee edit on a PAID/VOID invoice
             | OPTIMISTIC_LOCK_CONFLICT  | Stored fee/write-off changed under us
-------------|---------------------------|-----------------------------------
Money        | CURRENCY_MISMATCH         | Arithmetic across currencies
-------------|---------------------------|-----------------------------------
Internal     | INTERNAL_ERROR            | Persistence failure, broken relation
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldError:
    """One field-level validation problem."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class BillingEngineError(Exception):
    """
    Base exception for all billing engine errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification and an ``http_status`` hint for the transport layer.
    """

    code: str = "BILLING_ENGINE_ERROR"
    http_status: int = 500

    def to_response(self) -> dict[str, Any]:
        """API-safe payload for this error."""
        return {"error": str(self), "code": self.code}


# Validation exceptions


class ValidationError(BillingEngineError):
    """Input rejected before any persistence access."""

    code: str = "VALIDATION_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: tuple[FieldError, ...] | list[FieldError] = (),
    ):
        self.details = tuple(details)
        super().__init__(message)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(d.field for d in self.details)

    def to_response(self) -> dict[str, Any]:
        payload = super().to_response()
        payload["details"] = [d.to_dict() for d in self.details]
        return payload


class InvalidAmountError(ValidationError):
    """A fee or write-off amount is missing or negative."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, amount: Any, reason: str):
        self.field = field
        self.amount = amount
        super().__init__(
            f"Invalid {field}: {reason}",
            details=(FieldError(field, reason),),
        )


class InvalidDateRangeError(ValidationError):
    """Report date range is missing, malformed or inverted."""

    code: str = "INVALID_DATE_RANGE"


class InvalidPaginationError(ValidationError):
    """page or page_size is not acceptable."""

    code: str = "INVALID_PAGINATION"


# Not-found exceptions


class NotFoundError(BillingEngineError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"
    http_status: int = 404

    entity_type: str = "Entity"

    def __init__(self, entity_id: Any):
        self.entity_id = str(entity_id)
        super().__init__(f"{self.entity_type} not found: {entity_id}")


class AppointmentNotFoundError(NotFoundError):
    """Appointment with given ID was not found."""

    code: str = "APPOINTMENT_NOT_FOUND"
    entity_type = "Appointment"


class InvoiceNotFoundError(NotFoundError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"
    entity_type = "Invoice"


class ClientGroupNotFoundError(NotFoundError):
    """Client group with given ID was not found."""

    code: str = "CLIENT_GROUP_NOT_FOUND"
    entity_type = "Client group"


# Conflict exceptions


class ConflictError(BillingEngineError):
    """Base exception for state conflicts."""

    code: str = "CONFLICT"
    http_status: int = 409


class InvoiceLockedError(ConflictError):
    """Fee edit refused because the appointment's invoice is settled or void."""

    code: str = "INVOICE_LOCKED"

    def __init__(self, appointment_id: Any, invoice_id: Any, invoice_status: str):
        self.appointment_id = str(appointment_id)
        self.invoice_id = str(invoice_id)
        self.invoice_status = invoice_status
        super().__init__(
            f"Appointment {appointment_id} is billed on invoice {invoice_id} "
            f"with status {invoice_status}; fee and write-off are locked"
        )


class OptimisticLockError(ConflictError):
    """Stored values differ from what the caller last read."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: Any):
        self.entity_type = entity_type
        self.entity_id = str(entity_id)
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Money exceptions


class CurrencyMismatchError(BillingEngineError):
    """Arithmetic attempted across different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(f"Currency mismatch: {left} vs {right}")


# Internal exceptions


class InternalError(BillingEngineError):
    """
    Unexpected failure (persistence, broken relation).

    The public message is always generic.  Full context goes to the
    server-side log, and the original exception is chained as __cause__.
    """

    code: str = "INTERNAL_ERROR"
    http_status: int = 500

    PUBLIC_MESSAGE = "An internal error occurred while processing the request."

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(self.PUBLIC_MESSAGE)
