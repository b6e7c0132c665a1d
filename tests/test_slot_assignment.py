"""
Tests for the slot assignment engine
"""

import pytest
from datetime import date

from resellervault.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    SlotNotFoundError,
)
from resellervault.models import Account, AccountType, Customer, Slot
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.slot_allocator import allocate_slots
from resellervault.services.slot_assignment import (
    SlotAssignmentService,
    assign_slot,
    clear_slot,
    find_slot_index,
    renew_slot,
    resolve_display_name,
)


class TestAssignSlot:
    """Tests for the pure slot transitions"""

    def test_assign_empty_slot(self):
        """Test EMPTY -> OCCUPIED"""
        slot = Slot()
        assigned = assign_slot(slot, "c1", "Ana", date(2026, 11, 1), "Kids")

        assert assigned.id == slot.id
        assert assigned.is_occupied is True
        assert assigned.customer_id == "c1"
        assert assigned.customer_name == "Ana"
        assert assigned.expiration_date == date(2026, 11, 1)
        assert assigned.profile_name == "Kids"

    def test_assign_guest_without_customer(self):
        """Test ad-hoc guests only need a name"""
        assigned = assign_slot(Slot(), None, "Walk-in")
        assert assigned.customer_id is None
        assert assigned.customer_name == "Walk-in"
        assert assigned.is_occupied

    def test_reassign_occupied_slot(self):
        """Test OCCUPIED -> OCCUPIED replaces the occupant"""
        slot = assign_slot(Slot(), "c1", "Ana")
        reassigned = assign_slot(slot, "c2", "Bo")
        assert reassigned.customer_id == "c2"
        assert reassigned.customer_name == "Bo"
        assert reassigned.is_occupied

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            assign_slot(Slot(), None, "  ")

    def test_assign_keeps_notes(self):
        slot = Slot(notes="pays cash")
        assert assign_slot(slot, None, "Ana").notes == "pays cash"

    def test_clear_resets_everything(self):
        """Test assign then clear returns to EMPTY regardless of occupant"""
        slot = assign_slot(Slot(notes="x"), "c1", "Ana", date(2026, 11, 1), "Kids")
        cleared = clear_slot(slot)

        assert cleared.id == slot.id
        assert cleared.is_occupied is False
        assert cleared.customer_name == ""
        assert cleared.customer_id is None
        assert cleared.expiration_date is None
        assert cleared.profile_name is None
        assert cleared.notes is None

    def test_clear_empty_slot_is_noop(self):
        slot = Slot()
        assert clear_slot(slot) == slot

    def test_renew_updates_date_only(self):
        """Test renewal keeps the occupant and occupancy"""
        slot = assign_slot(Slot(), "c1", "Ana", date(2026, 10, 20), "Kids")
        renewed = renew_slot(slot, date(2026, 11, 20))

        assert renewed.is_occupied
        assert renewed.customer_id == "c1"
        assert renewed.customer_name == "Ana"
        assert renewed.profile_name == "Kids"
        assert renewed.expiration_date == date(2026, 11, 20)

    def test_renew_can_change_profile(self):
        slot = assign_slot(Slot(), None, "Ana", profile_name="Kids")
        assert renew_slot(slot, date(2026, 12, 1), "Main").profile_name == "Main"

    def test_renew_empty_slot_rejected(self):
        with pytest.raises(ValueError):
            renew_slot(Slot(), date(2026, 12, 1))


class TestResolveDisplayName:
    """Tests for display-name resolution"""

    def test_live_customer_name_wins(self):
        """Test edits to the customer show up in the slot"""
        slot = assign_slot(Slot(), "c1", "Old Name")
        customers = {"c1": Customer(id="c1", name="New Name")}
        assert resolve_display_name(slot, customers) == "New Name"
        # Not written back
        assert slot.customer_name == "Old Name"

    def test_dangling_reference_falls_back_to_cache(self):
        slot = assign_slot(Slot(), "gone", "Cached")
        assert resolve_display_name(slot, {}) == "Cached"

    def test_guest_uses_cached_name(self):
        slot = assign_slot(Slot(), None, "Guest")
        assert resolve_display_name(slot, {"c1": Customer(id="c1", name="Ana")}) == "Guest"


class TestFindSlotIndex:
    """Tests for slot lookup by id or position"""

    def _account(self):
        slots = allocate_slots(AccountType.SHARED, 3)
        return Account(service_name="Spotify", type=AccountType.SHARED, max_slots=3, slots=slots)

    def test_by_position(self):
        account = self._account()
        assert find_slot_index(account, 1) == 0
        assert find_slot_index(account, "3") == 2

    def test_by_id(self):
        account = self._account()
        assert find_slot_index(account, account.slots[1].id) == 1

    def test_out_of_range(self):
        account = self._account()
        with pytest.raises(SlotNotFoundError):
            find_slot_index(account, 4)
        with pytest.raises(SlotNotFoundError):
            find_slot_index(account, 0)
        with pytest.raises(SlotNotFoundError):
            find_slot_index(account, "nope")


class TestSlotAssignmentService:
    """Tests for persisted slot operations"""

    def _setup(self, db_session, max_slots=3):
        account_repo = AccountRepository(db_session)
        customer_repo = CustomerRepository(db_session)
        slots = allocate_slots(AccountType.SHARED, max_slots)
        account = account_repo.create_or_replace(
            Account(
                service_name="Netflix",
                email="shared@mail.com",
                type=AccountType.SHARED,
                max_slots=max_slots,
                slots=slots,
            )
        )
        return SlotAssignmentService(account_repo, customer_repo), account, customer_repo

    def test_assign_customer_persists(self, db_session):
        """Test assigning a known customer caches their name and persists"""
        service, account, customers = self._setup(db_session)
        ana = customers.create_or_replace(Customer(name="Ana", contact="ana@mail.com"))

        service.assign(account.id, 2, customer_id=ana.id, expiration_date=date(2026, 11, 1))

        stored = AccountRepository(db_session).get_account(account.id)
        slot = stored.slots[1]
        assert slot.customer_id == ana.id
        assert slot.customer_name == "Ana"
        assert slot.is_occupied
        assert slot.expiration_date == date(2026, 11, 1)
        assert len(stored.slots) == stored.max_slots

    def test_assign_guest(self, db_session):
        service, account, _ = self._setup(db_session)
        updated = service.assign(account.id, 1, name="Guest")
        assert updated.slots[0].customer_id is None
        assert updated.slots[0].customer_name == "Guest"

    def test_assign_unknown_customer(self, db_session):
        """Test a customer must exist at assignment time"""
        service, account, _ = self._setup(db_session)
        with pytest.raises(CustomerNotFoundError):
            service.assign(account.id, 1, customer_id="missing")

    def test_assign_without_name_or_customer(self, db_session):
        service, account, _ = self._setup(db_session)
        with pytest.raises(ValueError):
            service.assign(account.id, 1)

    def test_unknown_account(self, db_session):
        service, _, _ = self._setup(db_session)
        with pytest.raises(AccountNotFoundError):
            service.assign("missing", 1, name="Ana")

    def test_unknown_slot(self, db_session):
        service, account, _ = self._setup(db_session)
        with pytest.raises(SlotNotFoundError):
            service.clear(account.id, 9)

    def test_clear_persists(self, db_session):
        service, account, _ = self._setup(db_session)
        service.assign(account.id, 3, name="Ana")
        updated = service.clear(account.id, 3)
        assert not updated.slots[2].is_occupied
        assert updated.slots[2].customer_name == ""

    def test_renew_persists(self, db_session):
        service, account, _ = self._setup(db_session)
        service.assign(account.id, 1, name="Ana", expiration_date=date(2026, 10, 19))
        updated = service.renew(account.id, 1, date(2026, 11, 19))
        assert updated.slots[0].expiration_date == date(2026, 11, 19)
        assert updated.slots[0].customer_name == "Ana"

    def test_deleted_customer_keeps_slot(self, db_session):
        """Test deleting a customer leaves the slot occupied with its cached name"""
        service, account, customers = self._setup(db_session)
        ana = customers.create_or_replace(Customer(name="Ana"))
        service.assign(account.id, 1, customer_id=ana.id)

        customers.delete_customer(ana.id)

        stored = AccountRepository(db_session).get_account(account.id)
        assert stored.slots[0].is_occupied
        assert stored.slots[0].customer_name == "Ana"
        assert service.display_names(stored)[stored.slots[0].id] == "Ana"

    def test_display_names_follow_customer_edits(self, db_session):
        service, account, customers = self._setup(db_session)
        ana = customers.create_or_replace(Customer(name="Ana"))
        updated = service.assign(account.id, 1, customer_id=ana.id)

        customers.create_or_replace(Customer(id=ana.id, name="Ana Maria"))

        assert service.display_names(updated)[updated.slots[0].id] == "Ana Maria"
