"""
Module: billing_kernel.selectors.membership_selector
Responsibility: Read-only access to client group memberships with the
    member's name fields, the input of ResponsibleBillerSelector and of the
    report's client display name.
Architecture position: Kernel > Selectors.
"""

from collections import defaultdict
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from billing_kernel.domain.dtos import MembershipRecord
from billing_kernel.models.client import ClientGroupMembership
from billing_kernel.selectors.base import BaseSelector


class MembershipSelector(BaseSelector[ClientGroupMembership]):
    """Memberships ordered by (created_at, client_id)."""

    def find_memberships_for_group(self, client_group_id: UUID) -> list[MembershipRecord]:
        return self.find_memberships_for_groups([client_group_id]).get(client_group_id, [])

    def find_memberships_for_groups(
        self,
        client_group_ids: Iterable[UUID],
    ) -> dict[UUID, list[MembershipRecord]]:
        """Memberships of several groups in one query, keyed by group id."""
        ids = list(client_group_ids)
        if not ids:
            return {}
        stmt = (
            select(ClientGroupMembership)
            .where(ClientGroupMembership.client_group_id.in_(ids))
            .options(selectinload(ClientGroupMembership.client))
            .order_by(
                ClientGroupMembership.created_at,
                ClientGroupMembership.client_id,
            )
        )
        grouped: dict[UUID, list[MembershipRecord]] = defaultdict(list)
        for membership in self.session.execute(stmt).scalars():
            grouped[membership.client_group_id].append(
                MembershipRecord.from_model(membership)
            )
        return dict(grouped)
