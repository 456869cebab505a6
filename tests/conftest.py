"""
Pytest fixtures for the billing test suite.

Provides:
- Structured logging for the whole session, and captured_logs
- An in-memory SQLite database per test
- Factories for the billing records the reports read
"""

import json
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import billing_kernel.models  # noqa: F401
from billing_kernel.db.base import Base
from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from billing_kernel.models import (
    Appointment,
    AppointmentNote,
    Client,
    ClientGroup,
    ClientGroupMembership,
    Clinician,
    Invoice,
    Payment,
    PracticeService,
)

TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture billing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            ...
            logs = captured_logs()
            assert any(r["message"] == "fee_adjustment_applied" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("billing_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Session:
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    session = factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clock():
    return DeterministicClock(datetime(2024, 3, 1, 9, 0))


# =============================================================================
# Record factories
# =============================================================================


class BillingFactory:
    """Inserts rows and flushes, so ids are usable immediately."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def client(self, first="Ada", last="Lovelace", **kwargs) -> Client:
        return self._add(Client(legal_first_name=first, legal_last_name=last, **kwargs))

    def group(self, name="Lovelace Family", **kwargs) -> ClientGroup:
        return self._add(ClientGroup(name=name, **kwargs))

    def membership(
        self,
        group: ClientGroup,
        client: Client,
        created_at: datetime,
        **kwargs,
    ) -> ClientGroupMembership:
        return self._add(
            ClientGroupMembership(
                client_group_id=group.id,
                client_id=client.id,
                created_at=created_at,
                **kwargs,
            )
        )

    def service(self, code="90834", rate="150.00", duration_minutes=45) -> PracticeService:
        return self._add(
            PracticeService(
                code=code,
                description="Psychotherapy",
                rate=Decimal(rate) if rate is not None else None,
                duration_minutes=duration_minutes,
            )
        )

    def clinician(self, first="Sigmund", last="Freud", percentage_split=None) -> Clinician:
        return self._add(
            Clinician(
                first_name=first,
                last_name=last,
                percentage_split=(
                    Decimal(percentage_split) if percentage_split is not None else None
                ),
            )
        )

    def appointment(
        self,
        group: ClientGroup | None,
        start: datetime,
        fee="100.00",
        write_off="0",
        adjustable="0",
        minutes=45,
        **kwargs,
    ) -> Appointment:
        return self._add(
            Appointment(
                client_group_id=group.id if group is not None else None,
                start_date=start,
                end_date=start + timedelta(minutes=minutes),
                appointment_fee=Decimal(fee) if fee is not None else None,
                write_off=Decimal(write_off) if write_off is not None else None,
                adjustable_amount=Decimal(adjustable) if adjustable is not None else None,
                **kwargs,
            )
        )

    def note(self, appointment: Appointment) -> AppointmentNote:
        return self._add(AppointmentNote(appointment_id=appointment.id, content="Progress note"))

    def invoice(
        self,
        appointment: Appointment | None,
        amount="100.00",
        issued: datetime | None = None,
        status="UNPAID",
        group: ClientGroup | None = None,
        **kwargs,
    ) -> Invoice:
        if group is not None:
            group_id = group.id
        else:
            group_id = appointment.client_group_id if appointment is not None else None
        return self._add(
            Invoice(
                appointment_id=appointment.id if appointment is not None else None,
                client_group_id=group_id,
                amount=Decimal(amount),
                status=status,
                issued_date=issued or (
                    appointment.start_date if appointment is not None else datetime(2024, 1, 1)
                ),
                **kwargs,
            )
        )

    def payment(
        self,
        invoice: Invoice,
        amount="50.00",
        paid_on: datetime | None = None,
        credit_applied="0",
        status="COMPLETED",
    ) -> Payment:
        return self._add(
            Payment(
                invoice_id=invoice.id,
                amount=Decimal(amount),
                credit_applied=Decimal(credit_applied) if credit_applied is not None else None,
                status=status,
                payment_date=paid_on or invoice.issued_date,
            )
        )


@pytest.fixture
def factory(session) -> BillingFactory:
    return BillingFactory(session)
