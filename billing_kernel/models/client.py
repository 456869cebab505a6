"""
Module: billing_kernel.models.client
Responsibility: ORM persistence for clients, client groups (the billing
    unit: individual, couple, family) and the memberships linking them.
Architecture position: Kernel > Models.  May import from db/base.py only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - A client appears at most once per group (uq_membership_group_client).
    - Any number of memberships may be flagged is_responsible_for_billing;
      picking one is the ResponsibleBillerSelector's job, not the schema's.

Failure modes:
    - IntegrityError on a duplicate membership.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase


class Client(TrackedBase):
    """A person receiving services or paying for them."""

    __tablename__ = "clients"

    legal_first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    legal_last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    preferred_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    memberships: Mapped[list["ClientGroupMembership"]] = relationship(
        back_populates="client",
    )

    def __repr__(self) -> str:
        return f"<Client {self.legal_first_name} {self.legal_last_name}>"


class ClientGroup(TrackedBase):
    """
    Billing unit.  Appointments and invoices are owned by a group, and the
    group's balance is attributed to its responsible biller.
    """

    __tablename__ = "client_groups"

    __table_args__ = (Index("idx_client_group_name", "name"),)

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    group_type: Mapped[str] = mapped_column(
        String(50), nullable=False, default="individual",
    )

    memberships: Mapped[list["ClientGroupMembership"]] = relationship(
        back_populates="client_group",
        order_by="ClientGroupMembership.created_at",
    )

    def __repr__(self) -> str:
        return f"<ClientGroup {self.name}>"


class ClientGroupMembership(TrackedBase):
    """
    A client's place in a group.

    created_at is the "oldest member" tie-breaker for biller selection, so
    fixtures and imports set it explicitly.
    """

    __tablename__ = "client_group_memberships"

    __table_args__ = (
        UniqueConstraint(
            "client_group_id", "client_id", name="uq_membership_group_client",
        ),
        Index("idx_membership_group", "client_group_id"),
    )

    client_group_id: Mapped[UUID] = mapped_column(
        ForeignKey("client_groups.id"), nullable=False,
    )
    client_id: Mapped[UUID] = mapped_column(
        ForeignKey("clients.id"), nullable=False,
    )
    role: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_responsible_for_billing: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    is_contact_only: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )

    client: Mapped[Client] = relationship(back_populates="memberships")
    client_group: Mapped[ClientGroup] = relationship(back_populates="memberships")
