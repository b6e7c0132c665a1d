"""
Slot assignment engine.

A slot is either EMPTY (no customer, empty name) or OCCUPIED (non-empty
name). The pure functions below move a slot between those states; the
SlotAssignmentService wraps them with loading and persisting the owning
account.
"""

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from resellervault.exceptions import (
    AccountNotFoundError,
    CustomerNotFoundError,
    SlotNotFoundError,
)
from resellervault.models import Account, Customer, Slot
from resellervault.repositories import AccountRepository, CustomerRepository

logger = logging.getLogger(__name__)

SlotRef = Union[str, int]


def _rebuild(slot: Slot, **changes) -> Slot:
    # Re-validate so is_occupied follows customer_name
    return Slot.model_validate({**slot.model_dump(), **changes})


def assign_slot(
    slot: Slot,
    customer_id: Optional[str],
    name: str,
    expiration_date: Optional[date] = None,
    profile_name: Optional[str] = None,
) -> Slot:
    """
    Bind a customer (or an ad-hoc guest when customer_id is None) to a slot.

    Works on empty and occupied slots alike; assigning to an occupied slot
    replaces its occupant. Notes are kept.

    Raises:
        ValueError: If name is empty
    """
    if not name or not name.strip():
        raise ValueError("A slot can only be assigned to a non-empty name")
    return _rebuild(
        slot,
        customer_id=customer_id,
        customer_name=name,
        expiration_date=expiration_date,
        profile_name=profile_name,
    )


def clear_slot(slot: Slot) -> Slot:
    """Release a slot; only its id survives"""
    return Slot(id=slot.id)


def renew_slot(
    slot: Slot,
    expiration_date: Optional[date],
    profile_name: Optional[str] = None,
) -> Slot:
    """
    Re-assign the current occupant with a new expiration date.
    The profile name is kept unless a new one is given.

    Raises:
        ValueError: If the slot is empty
    """
    if not slot.is_occupied:
        raise ValueError("Cannot renew an empty slot")
    return assign_slot(
        slot,
        slot.customer_id,
        slot.customer_name,
        expiration_date=expiration_date,
        profile_name=profile_name if profile_name is not None else slot.profile_name,
    )


def resolve_display_name(slot: Slot, customers: Mapping[str, Customer]) -> str:
    """Live customer name when the reference resolves, else the cached name"""
    if slot.customer_id:
        customer = customers.get(slot.customer_id)
        if customer is not None:
            return customer.name
    return slot.customer_name


def find_slot_index(account: Account, slot_ref: SlotRef) -> int:
    """
    Locate a slot by id or by 1-based position.

    Raises:
        SlotNotFoundError: If nothing matches
    """
    for index, slot in enumerate(account.slots):
        if slot.id == slot_ref:
            return index
    if isinstance(slot_ref, int) or (isinstance(slot_ref, str) and slot_ref.isdigit()):
        position = int(slot_ref)
        if 1 <= position <= len(account.slots):
            return position - 1
    raise SlotNotFoundError(account.id, slot_ref)


class SlotAssignmentService:
    """Applies slot transitions and writes the account's slot sequence back"""

    def __init__(self, accounts: AccountRepository, customers: CustomerRepository):
        self.accounts = accounts
        self.customers = customers

    def _load(self, account_id: str) -> Account:
        account = self.accounts.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def _store(self, account: Account, index: int, slot: Slot) -> Account:
        slots: List[Slot] = list(account.slots)
        slots[index] = slot
        return self.accounts.replace_slots(account.id, slots)

    def assign(
        self,
        account_id: str,
        slot_ref: SlotRef,
        customer_id: Optional[str] = None,
        name: Optional[str] = None,
        expiration_date: Optional[date] = None,
        profile_name: Optional[str] = None,
    ) -> Account:
        """
        Assign a customer to a slot and persist the account.

        Args:
            account_id: Owning account
            slot_ref: Slot id or 1-based position
            customer_id: Existing customer, or None for a guest
            name: Display name to cache; defaults to the customer's name
            expiration_date: Per-slot override of the account expiration
            profile_name: Profile label within the service

        Returns:
            The updated account

        Raises:
            AccountNotFoundError, SlotNotFoundError, CustomerNotFoundError
            ValueError: If neither a customer nor a name is given
        """
        account = self._load(account_id)
        index = find_slot_index(account, slot_ref)

        if customer_id is not None:
            customer = self.customers.get_customer(customer_id)
            if customer is None:
                raise CustomerNotFoundError(customer_id)
            name = name or customer.name

        slot = assign_slot(
            account.slots[index],
            customer_id,
            name or "",
            expiration_date=expiration_date,
            profile_name=profile_name,
        )
        updated = self._store(account, index, slot)
        logger.info(
            f"Assigned slot {index + 1} of {account.service_name} ({account.id}) "
            f"to {slot.customer_name}"
        )
        return updated

    def clear(self, account_id: str, slot_ref: SlotRef) -> Account:
        """Release a slot and persist the account"""
        account = self._load(account_id)
        index = find_slot_index(account, slot_ref)
        previous = account.slots[index].customer_name
        updated = self._store(account, index, clear_slot(account.slots[index]))
        logger.info(
            f"Released slot {index + 1} of {account.service_name} ({account.id})"
            + (f", was {previous}" if previous else "")
        )
        return updated

    def renew(
        self,
        account_id: str,
        slot_ref: SlotRef,
        expiration_date: Optional[date],
        profile_name: Optional[str] = None,
    ) -> Account:
        """Extend the current occupant's slot expiration and persist the account"""
        account = self._load(account_id)
        index = find_slot_index(account, slot_ref)
        slot = renew_slot(account.slots[index], expiration_date, profile_name)
        updated = self._store(account, index, slot)
        logger.info(
            f"Renewed slot {index + 1} of {account.service_name} ({account.id}) "
            f"until {expiration_date}"
        )
        return updated

    def display_names(self, account: Account) -> Dict[str, str]:
        """Resolved display name per slot id"""
        customers = self.customers.customers_by_id()
        return {slot.id: resolve_display_name(slot, customers) for slot in account.slots}
