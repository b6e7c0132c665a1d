"""
Tests for account and customer lifecycle
"""

import pytest
from datetime import date, timedelta

from resellervault.exceptions import AccountNotFoundError, CustomerNotFoundError
from resellervault.models import Account, AccountType, Slot
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.inventory import InventoryService, compute_dashboard_stats
from resellervault.services.slot_assignment import SlotAssignmentService
from resellervault.services_catalog import find_suggested_service, get_default_slots, list_services


@pytest.fixture
def inventory(db_session):
    return InventoryService(AccountRepository(db_session), CustomerRepository(db_session))


@pytest.fixture
def assignment(db_session):
    return SlotAssignmentService(AccountRepository(db_session), CustomerRepository(db_session))


class TestCreateAccount:
    """Tests for InventoryService.create_account"""

    def test_private_has_one_slot(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com")
        assert account.type == AccountType.PRIVATE
        assert account.max_slots == 1
        assert len(account.slots) == 1
        assert not account.slots[0].is_occupied

    def test_private_rejects_extra_slots(self, inventory, db_session):
        with pytest.raises(ValueError):
            inventory.create_account("Netflix", "a@mail.com", max_slots=4)
        assert AccountRepository(db_session).list_accounts() == []

    def test_private_accepts_one_slot(self, inventory):
        assert inventory.create_account("Netflix", "a@mail.com", max_slots=1).max_slots == 1

    def test_shared_uses_catalog_default(self, inventory):
        account = inventory.create_account("Spotify", "s@mail.com", account_type=AccountType.SHARED)
        assert account.max_slots == 6
        assert len(account.slots) == 6
        assert all(not s.is_occupied for s in account.slots)

    def test_shared_unknown_service(self, inventory):
        account = inventory.create_account("Crunchyroll", "c@mail.com", account_type=AccountType.SHARED)
        assert account.max_slots == 1

    def test_explicit_capacity(self, inventory):
        account = inventory.create_account(
            "Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=2
        )
        assert account.max_slots == 2

    def test_invalid_capacity(self, inventory):
        with pytest.raises(ValueError):
            inventory.create_account("Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=0)

    def test_slot_ids_unique(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com", account_type=AccountType.SHARED)
        assert len({s.id for s in account.slots}) == 5


class TestUpdateAccount:
    """Tests for InventoryService.update_account"""

    def test_grow_keeps_occupants(self, inventory, assignment):
        account = inventory.create_account(
            "Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=2
        )
        assignment.assign(account.id, "1", name="Ana")

        updated = inventory.update_account(account.id, max_slots=4)
        assert updated.max_slots == 4
        assert updated.slots[0].customer_name == "Ana"
        assert updated.slots[0].id == account.slots[0].id
        assert [s.is_occupied for s in updated.slots] == [True, False, False, False]

    def test_shrink_truncates_tail(self, inventory, assignment):
        """Test shrinking drops the occupants of removed slots"""
        account = inventory.create_account(
            "Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=3
        )
        assignment.assign(account.id, "3", name="Cy")

        updated = inventory.update_account(account.id, max_slots=2)
        assert updated.max_slots == 2
        assert all(not s.is_occupied for s in updated.slots)

    def test_shared_to_private(self, inventory, assignment):
        account = inventory.create_account(
            "Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=3
        )
        assignment.assign(account.id, "1", name="Ana")

        updated = inventory.update_account(account.id, account_type=AccountType.PRIVATE)
        assert updated.type == AccountType.PRIVATE
        assert updated.max_slots == 1
        assert updated.slots[0].customer_name == "Ana"

    def test_private_to_shared(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com")
        updated = inventory.update_account(
            account.id, account_type=AccountType.SHARED, max_slots=3
        )
        assert updated.type == AccountType.SHARED
        assert len(updated.slots) == 3
        assert updated.slots[0].id == account.slots[0].id

    def test_private_capacity_change_rejected(self, inventory, db_session):
        """Test raising the slot count of a private account needs type=shared"""
        account = inventory.create_account("Netflix", "a@mail.com")
        with pytest.raises(ValueError):
            inventory.update_account(account.id, max_slots=3)
        assert AccountRepository(db_session).get_account(account.id).max_slots == 1

    def test_switch_to_private_with_capacity_rejected(self, inventory):
        account = inventory.create_account(
            "Netflix", "a@mail.com", account_type=AccountType.SHARED, max_slots=3
        )
        with pytest.raises(ValueError):
            inventory.update_account(account.id, account_type=AccountType.PRIVATE, max_slots=3)

    def test_plain_fields(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com", password="old")
        updated = inventory.update_account(
            account.id, email="b@mail.com", password="new", expiration_date=date(2027, 1, 1)
        )
        assert updated.email == "b@mail.com"
        assert updated.password == "new"
        assert updated.expiration_date == date(2027, 1, 1)
        assert updated.created_at == account.created_at

    def test_clear_expiration(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com", expiration_date=date(2027, 1, 1))
        assert inventory.update_account(account.id, expiration_date=None).expiration_date is None

    def test_renew(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com")
        assert inventory.renew_account(account.id, date(2027, 2, 1)).expiration_date == date(2027, 2, 1)

    def test_not_found(self, inventory):
        with pytest.raises(AccountNotFoundError):
            inventory.update_account("missing", email="x")

    def test_delete(self, inventory):
        account = inventory.create_account("Netflix", "a@mail.com")
        assert inventory.delete_account(account.id) is True
        assert inventory.delete_account(account.id) is False


class TestCustomers:
    """Tests for the customer book"""

    def test_add_and_update(self, inventory):
        customer = inventory.add_customer("Ana", contact="+961 1")
        updated = inventory.update_customer(customer.id, name="Ana Maria")
        assert updated.name == "Ana Maria"
        assert updated.contact == "+961 1"

    def test_empty_name_rejected(self, inventory):
        with pytest.raises(ValueError):
            inventory.add_customer("   ")

    def test_update_missing(self, inventory):
        with pytest.raises(CustomerNotFoundError):
            inventory.update_customer("missing", name="X")

    def test_rename_shows_on_slots(self, inventory, assignment):
        """Test bound slots display the customer's current name"""
        customer = inventory.add_customer("Ana")
        account = inventory.create_account("Netflix", "a@mail.com")
        account = assignment.assign(account.id, "1", customer_id=customer.id)
        inventory.update_customer(customer.id, name="Anna")

        assert account.slots[0].customer_name == "Ana"
        assert assignment.display_names(account) == {account.slots[0].id: "Anna"}

    def test_delete_keeps_slot_names(self, inventory, assignment, db_session):
        customer = inventory.add_customer("Ana")
        account = inventory.create_account("Netflix", "a@mail.com")
        assignment.assign(account.id, "1", customer_id=customer.id)

        assert inventory.delete_customer(customer.id) is True
        stored = AccountRepository(db_session).get_account(account.id)
        assert stored.slots[0].customer_name == "Ana"
        assert assignment.display_names(stored) == {stored.slots[0].id: "Ana"}


class TestDashboardStats:
    """Tests for compute_dashboard_stats"""

    def test_counts(self, today):
        accounts = [
            Account(
                service_name="Netflix",
                expiration_date=today + timedelta(days=2),
                type=AccountType.SHARED,
                max_slots=3,
                slots=[Slot(customer_name="Ana"), Slot(), Slot()],
            ),
            Account(service_name="Spotify", expiration_date=today + timedelta(days=40), slots=[Slot()]),
            Account(service_name="VPN", slots=[Slot(customer_name="Bo")]),
        ]
        stats = compute_dashboard_stats(accounts, today)
        assert stats.total_accounts == 3
        assert stats.expiring_soon == 1
        assert stats.empty_slots == 3
        assert stats.occupied_slots == 2

    def test_empty(self, today):
        stats = compute_dashboard_stats([], today)
        assert (stats.total_accounts, stats.expiring_soon, stats.empty_slots, stats.occupied_slots) == (0, 0, 0, 0)


class TestServicesCatalog:
    def test_defaults(self):
        assert get_default_slots("Netflix") == 5
        assert get_default_slots("Disney+") == 4
        assert get_default_slots("Unknown") == 1

    def test_find_ignores_case(self):
        assert find_suggested_service("  netflix ") == "Netflix"
        assert find_suggested_service("Hulu") is None

    def test_list_services(self):
        names = [s["name"] for s in list_services()]
        assert names[0] == "Netflix"
        assert names[-1] == "Other"
