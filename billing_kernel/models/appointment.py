"""
Module: billing_kernel.models.appointment
Responsibility: ORM persistence for appointments, with their three billing
    money fields, and for the progress notes attached to them.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - adjustable_amount starts at 0 and is changed only by
      FeeAdjustmentService (enforced by convention; there is no setter).
    - start_date/end_date are naive practice-local timestamps.

Failure modes:
    - IntegrityError on a dangling client group, clinician or service id.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase
from billing_kernel.models.practice import PracticeService


class Appointment(TrackedBase):
    """One scheduled service instance."""

    __tablename__ = "appointments"

    __table_args__ = (
        Index("idx_appointment_start", "start_date"),
        Index("idx_appointment_group", "client_group_id"),
        Index("idx_appointment_clinician", "clinician_id"),
    )

    type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="APPOINTMENT",
    )
    client_group_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("client_groups.id"), nullable=True,
    )
    clinician_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("clinicians.id"), nullable=True,
    )
    service_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("practice_services.id"), nullable=True,
    )

    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="SCHEDULED",
    )

    # Billing money fields
    appointment_fee: Mapped[Decimal | None] = mapped_column(nullable=True)
    write_off: Mapped[Decimal | None] = mapped_column(
        nullable=True, default=Decimal("0"),
    )
    adjustable_amount: Mapped[Decimal | None] = mapped_column(
        nullable=True, default=Decimal("0"),
    )

    service: Mapped[PracticeService | None] = relationship()
    notes: Mapped[list["AppointmentNote"]] = relationship(
        back_populates="appointment",
    )

    def __repr__(self) -> str:
        return f"<Appointment {self.id} {self.start_date:%Y-%m-%d} {self.status}>"


class AppointmentNote(TrackedBase):
    """A progress note (or survey answer) recorded for an appointment."""

    __tablename__ = "appointment_notes"

    __table_args__ = (Index("idx_note_appointment", "appointment_id"),)

    appointment_id: Mapped[UUID] = mapped_column(
        ForeignKey("appointments.id"), nullable=False,
    )
    note_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="PROGRESS_NOTE",
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    appointment: Mapped[Appointment] = relationship(back_populates="notes")
