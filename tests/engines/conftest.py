"""
Record builders for the pure engine tests (no database).
"""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from billing_kernel.domain.dtos import (
    AppointmentRecord,
    InvoiceRecord,
    MembershipRecord,
    PaymentRecord,
    ServiceRecord,
)


def _dec(value):
    return Decimal(value) if value is not None else None


@pytest.fixture
def make_appointment():
    def _make(
        fee="100.00",
        write_off="0",
        adjustable="0",
        group_id=None,
        start=datetime(2024, 1, 15, 10, 0),
        minutes=45,
        service=None,
        status="SHOW",
    ) -> AppointmentRecord:
        return AppointmentRecord(
            id=uuid4(),
            client_group_id=group_id,
            clinician_id=None,
            start_date=start,
            end_date=start + timedelta(minutes=minutes),
            status=status,
            appointment_fee=_dec(fee),
            write_off=_dec(write_off),
            adjustable_amount=_dec(adjustable),
            service_id=service.id if service else None,
            service=service,
        )

    return _make


@pytest.fixture
def make_service():
    def _make(code="90834", rate="150.00", duration_minutes=45) -> ServiceRecord:
        return ServiceRecord(
            id=uuid4(), code=code, rate=_dec(rate), duration_minutes=duration_minutes,
        )

    return _make


@pytest.fixture
def make_payment():
    def _make(
        amount="50.00",
        credit_applied="0",
        status="COMPLETED",
        invoice_id=None,
        paid_on=datetime(2024, 1, 20, 9, 0),
    ) -> PaymentRecord:
        return PaymentRecord(
            id=uuid4(),
            invoice_id=invoice_id or uuid4(),
            amount=Decimal(amount),
            credit_applied=_dec(credit_applied),
            status=status,
            payment_date=paid_on,
        )

    return _make


@pytest.fixture
def make_invoice():
    def _make(
        amount="100.00",
        payments=(),
        appointment_id=None,
        group_id=None,
        issued=datetime(2024, 1, 16, 9, 0),
        status="UNPAID",
    ) -> InvoiceRecord:
        return InvoiceRecord(
            id=uuid4(),
            appointment_id=appointment_id,
            client_group_id=group_id,
            amount=Decimal(amount),
            status=status,
            issued_date=issued,
            payments=tuple(payments),
        )

    return _make


@pytest.fixture
def make_membership():
    def _make(
        group_id,
        first="Ada",
        last="Lovelace",
        created_at=datetime(2023, 1, 1),
        client_id=None,
        responsible=False,
        contact_only=False,
    ) -> MembershipRecord:
        return MembershipRecord(
            client_group_id=group_id,
            client_id=client_id or uuid4(),
            first_name=first,
            last_name=last,
            created_at=created_at,
            is_responsible_for_billing=responsible,
            is_contact_only=contact_only,
        )

    return _make
