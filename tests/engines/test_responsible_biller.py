"""
Tests for ResponsibleBillerSelector.

Covers the four selection cases plus tie-breaks and display names.
"""

from datetime import datetime
from uuid import UUID, uuid4

from billing_engines.responsible_biller import (
    NO_BILLER,
    UNKNOWN_CLIENT,
    ResponsibleBillerSelector,
)

T1 = datetime(2023, 1, 1, 9, 0)
T2 = datetime(2023, 6, 1, 9, 0)


class TestSelect:
    def setup_method(self):
        self.selector = ResponsibleBillerSelector()
        self.group_id = uuid4()

    def test_exactly_one_responsible(self, make_membership):
        memberships = [
            make_membership(self.group_id, "Older", "Member", created_at=T1),
            make_membership(self.group_id, "Payer", "Member", created_at=T2, responsible=True),
        ]

        biller = self.selector.select(memberships)

        assert (biller.first_name, biller.last_name) == ("Payer", "Member")

    def test_multiple_responsible_first_wins(self, make_membership):
        second = make_membership(self.group_id, "Second", "Payer", created_at=T2, responsible=True)
        first = make_membership(self.group_id, "First", "Payer", created_at=T1, responsible=True)

        biller = self.selector.select([second, first])

        assert biller.client_id == first.client_id

    def test_zero_responsible_oldest_wins(self, make_membership):
        newer = make_membership(self.group_id, "Newer", "Member", created_at=T2)
        older = make_membership(self.group_id, "Older", "Member", created_at=T1)

        biller = self.selector.select([newer, older])

        assert biller.client_id == older.client_id
        assert biller.first_name == "Older"

    def test_zero_members(self):
        biller = self.selector.select([])

        assert biller == NO_BILLER
        assert biller.first_name is None
        assert biller.last_name is None
        assert biller.placeholder_name == UNKNOWN_CLIENT

    def test_contact_only_skipped(self, make_membership):
        contact = make_membership(self.group_id, "Contact", "Only", created_at=T1, contact_only=True)
        member = make_membership(self.group_id, "Real", "Client", created_at=T2)

        assert self.selector.select([contact, member]).client_id == member.client_id

    def test_only_contacts_is_nobody(self, make_membership):
        contact = make_membership(self.group_id, created_at=T1, contact_only=True)

        assert not self.selector.select([contact]).is_known

    def test_created_at_tie_broken_by_client_id(self, make_membership):
        low = make_membership(
            self.group_id, "Low", "Id", created_at=T1,
            client_id=UUID("00000000-0000-4000-8000-000000000001"),
        )
        high = make_membership(
            self.group_id, "High", "Id", created_at=T1,
            client_id=UUID("ffffffff-0000-4000-8000-000000000001"),
        )

        assert self.selector.select([high, low]).client_id == low.client_id


class TestClientDisplayName:
    def test_joins_members_in_seniority_order(self, make_membership):
        group_id = uuid4()
        selector = ResponsibleBillerSelector()
        memberships = [
            make_membership(group_id, "Bob", "Smith", created_at=T2),
            make_membership(group_id, "Alice", "Smith", created_at=T1),
            make_membership(group_id, "Carol", "Contact", created_at=T1, contact_only=True),
        ]

        assert selector.client_display_name(memberships) == "Alice Smith & Bob Smith"

    def test_placeholder_when_empty(self):
        assert ResponsibleBillerSelector().client_display_name([]) == UNKNOWN_CLIENT
