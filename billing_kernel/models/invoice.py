"""
Module: billing_kernel.models.invoice
Responsibility: ORM persistence for invoices and the payments settling them.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Invoice.amount is set at issue time and never recomputed from
      appointments.
    - VOID and DRAFT invoices are excluded from balance math (by the
      selectors, not the schema).
    - Only COMPLETED payments count as paid; their contribution is
      amount + credit_applied.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase


class Invoice(TrackedBase):
    """A billing document for one appointment or for a whole client group."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("idx_invoice_appointment", "appointment_id"),
        Index("idx_invoice_group_issued", "client_group_id", "issued_date"),
    )

    invoice_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    appointment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("appointments.id"), nullable=True,
    )
    client_group_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("client_groups.id"), nullable=True,
    )
    clinician_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("clinicians.id"), nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="UNPAID")
    issued_date: Mapped[datetime] = mapped_column(nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(nullable=True)

    payments: Mapped[list["Payment"]] = relationship(
        back_populates="invoice",
        order_by="Payment.payment_date",
    )

    def __repr__(self) -> str:
        return f"<Invoice {self.invoice_number or self.id} {self.amount} {self.status}>"


class Payment(TrackedBase):
    """A settlement against an invoice."""

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payment_invoice", "invoice_id"),
        Index("idx_payment_date", "payment_date"),
    )

    invoice_id: Mapped[UUID] = mapped_column(
        ForeignKey("invoices.id"), nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    credit_applied: Mapped[Decimal | None] = mapped_column(
        nullable=True, default=Decimal("0"),
    )
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default="COMPLETED",
    )
    payment_date: Mapped[datetime] = mapped_column(nullable=False)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    invoice: Mapped[Invoice] = relationship(back_populates="payments")
