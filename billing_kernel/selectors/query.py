"""
Module: billing_kernel.selectors.query
Responsibility: Composable, typed query predicates for the report selectors.
    Each predicate compiles to a SQLAlchemy boolean clause, so filters are
    combined without building SQL text and every value is bound as a
    parameter.
Architecture position: Kernel > Selectors.  May import from models/.

Invariants enforced:
    - The row query and its count query are built from the same
      AppointmentFilter, so paginated totals always agree with the rows.
    - Note-status filtering is an EXISTS predicate evaluated by the database
      before OFFSET/LIMIT.
    - Date ranges are inclusive on both ends.  A day range runs from
      00:00:00 of the first day to 23:59:59.999 of the last day.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement, and_, exists, select

from billing_kernel.domain.dtos import AppointmentType, NoteFilter
from billing_kernel.models.appointment import Appointment, AppointmentNote

END_OF_DAY = time(23, 59, 59, 999000)


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Normalize a date range to [start 00:00, end 23:59:59.999]."""
    return (
        datetime.combine(start, time.min),
        datetime.combine(end, END_OF_DAY),
    )


class AppointmentPredicate(ABC):
    """One condition on the appointments table."""

    @abstractmethod
    def clause(self) -> ColumnElement[bool]:
        ...

    @abstractmethod
    def describe(self) -> dict[str, Any]:
        """Loggable form of the predicate."""
        ...


@dataclass(frozen=True)
class StartsWithin(AppointmentPredicate):
    start: datetime
    end: datetime

    def clause(self) -> ColumnElement[bool]:
        return and_(Appointment.start_date >= self.start, Appointment.start_date <= self.end)

    def describe(self) -> dict[str, Any]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class TypeIs(AppointmentPredicate):
    appointment_type: str

    def clause(self) -> ColumnElement[bool]:
        return Appointment.type == self.appointment_type

    def describe(self) -> dict[str, Any]:
        return {"type": self.appointment_type}


@dataclass(frozen=True)
class InClientGroup(AppointmentPredicate):
    client_group_id: UUID

    def clause(self) -> ColumnElement[bool]:
        return Appointment.client_group_id == self.client_group_id

    def describe(self) -> dict[str, Any]:
        return {"client_group_id": str(self.client_group_id)}


@dataclass(frozen=True)
class StatusIs(AppointmentPredicate):
    status: str

    def clause(self) -> ColumnElement[bool]:
        return Appointment.status == self.status

    def describe(self) -> dict[str, Any]:
        return {"status": self.status}


@dataclass(frozen=True)
class WithClinician(AppointmentPredicate):
    clinician_id: UUID

    def clause(self) -> ColumnElement[bool]:
        return Appointment.clinician_id == self.clinician_id

    def describe(self) -> dict[str, Any]:
        return {"clinician_id": str(self.clinician_id)}


@dataclass(frozen=True)
class NoteState(AppointmentPredicate):
    """EXISTS / NOT EXISTS over the appointment's notes."""

    has_note: bool

    def clause(self) -> ColumnElement[bool]:
        note_exists = exists(
            select(AppointmentNote.id).where(
                AppointmentNote.appointment_id == Appointment.id
            )
        )
        return note_exists if self.has_note else ~note_exists

    def describe(self) -> dict[str, Any]:
        return {"has_note": self.has_note}


@dataclass(frozen=True)
class AppointmentFilter:
    """An AND of predicates, shared by a row query and its count query."""

    predicates: tuple[AppointmentPredicate, ...] = ()

    def with_predicate(self, predicate: AppointmentPredicate) -> AppointmentFilter:
        return AppointmentFilter(self.predicates + (predicate,))

    def clauses(self) -> list[ColumnElement[bool]]:
        return [p.clause() for p in self.predicates]

    def describe(self) -> dict[str, Any]:
        described: dict[str, Any] = {}
        for predicate in self.predicates:
            described.update(predicate.describe())
        return described

    @classmethod
    def for_report(
        cls,
        start: datetime,
        end: datetime,
        *,
        client_group_id: UUID | None = None,
        status: str | None = None,
        clinician_id: UUID | None = None,
        note_filter: NoteFilter | None = None,
        appointment_type: str | None = AppointmentType.APPOINTMENT.value,
    ) -> AppointmentFilter:
        """Build the filter in the order the report applies them."""
        f = cls((StartsWithin(start, end),))
        if appointment_type is not None:
            f = f.with_predicate(TypeIs(appointment_type))
        if client_group_id is not None:
            f = f.with_predicate(InClientGroup(client_group_id))
        if status is not None:
            f = f.with_predicate(StatusIs(status))
        if clinician_id is not None:
            f = f.with_predicate(WithClinician(clinician_id))
        if note_filter is not None:
            f = f.with_predicate(NoteState(has_note=note_filter == NoteFilter.WITH_NOTE))
        return f
