"""
Module: billing_engines.responsible_biller
Responsibility:
    Pick the one client accountable for a client group's balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    Exactly one candidate or nobody, never several:
    1. the earliest membership flagged is_responsible_for_billing;
    2. otherwise the earliest membership that is not contact-only;
    3. otherwise nobody (all name fields None).
    "Earliest" orders by (created_at, client_id), so ties are deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from billing_kernel.domain.dtos import MembershipRecord

UNKNOWN_CLIENT = "Unknown Client"


@dataclass(frozen=True)
class ResponsibleBiller:
    client_id: UUID | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def is_known(self) -> bool:
        return self.client_id is not None

    @property
    def placeholder_name(self) -> str:
        """Display name, or the neutral placeholder when nobody is eligible."""
        if not self.is_known:
            return UNKNOWN_CLIENT
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or UNKNOWN_CLIENT


NO_BILLER = ResponsibleBiller()


def _seniority(membership: MembershipRecord) -> tuple:
    return (membership.created_at, str(membership.client_id))


class ResponsibleBillerSelector:
    """Deterministic biller choice over a group's memberships."""

    def select(self, memberships: Iterable[MembershipRecord]) -> ResponsibleBiller:
        members = sorted(memberships, key=_seniority)

        flagged = [m for m in members if m.is_responsible_for_billing]
        if flagged:
            return self._biller(flagged[0])

        eligible = [m for m in members if not m.is_contact_only]
        if eligible:
            return self._biller(eligible[0])

        return NO_BILLER

    def client_display_name(self, memberships: Iterable[MembershipRecord]) -> str:
        """All non-contact-only members joined with " & "."""
        names = []
        for m in sorted(memberships, key=_seniority):
            if m.is_contact_only:
                continue
            name = " ".join(p for p in (m.first_name, m.last_name) if p)
            if name:
                names.append(name)
        return " & ".join(names) if names else UNKNOWN_CLIENT

    @staticmethod
    def _biller(membership: MembershipRecord) -> ResponsibleBiller:
        return ResponsibleBiller(
            client_id=membership.client_id,
            first_name=membership.first_name,
            last_name=membership.last_name,
        )
