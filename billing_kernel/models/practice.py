"""
Module: billing_kernel.models.practice
Responsibility: ORM persistence for the practice's clinicians and its
    billable service catalogue.
Architecture position: Kernel > Models.  May import from db/ only.
"""

from decimal import Decimal

from sqlalchemy import Boolean, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import TrackedBase


class Clinician(TrackedBase):
    """A clinician.  percentage_split is the clinician's cut of gross income."""

    __tablename__ = "clinicians"

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    percentage_split: Mapped[Decimal | None] = mapped_column(
        Numeric(7, 4), nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PracticeService(TrackedBase):
    """
    A billable service: billing code, default rate per unit and the
    duration of one unit.
    """

    __tablename__ = "practice_services"

    code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
