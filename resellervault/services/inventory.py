"""
Inventory service - account and customer lifecycle.
Creates accounts with their initial slots, applies edits (including
capacity and type changes) and maintains the customer book.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from resellervault.exceptions import AccountNotFoundError, CustomerNotFoundError
from resellervault.models import Account, AccountType, Customer
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.expiration import days_remaining, is_expiring_soon
from resellervault.services.slot_allocator import allocate_slots, reshape_slots
from resellervault.services_catalog import get_default_slots

logger = logging.getLogger(__name__)

# Sentinel for "leave this field as it is" in update_account
_UNSET = object()


@dataclass
class DashboardStats:
    """Headline numbers for the operator"""
    total_accounts: int
    expiring_soon: int
    empty_slots: int
    occupied_slots: int


def compute_dashboard_stats(
    accounts: List[Account], today: Optional[date] = None
) -> DashboardStats:
    expiring = sum(
        1 for a in accounts if is_expiring_soon(days_remaining(a.expiration_date, today))
    )
    empty = sum(a.empty_slot_count for a in accounts)
    occupied = sum(len(a.occupied_slots) for a in accounts)
    return DashboardStats(
        total_accounts=len(accounts),
        expiring_soon=expiring,
        empty_slots=empty,
        occupied_slots=occupied,
    )


def _check_private_capacity(account_type: AccountType, max_slots: Optional[int]) -> None:
    if account_type == AccountType.PRIVATE and max_slots is not None and max_slots != 1:
        raise ValueError(
            f"A private account has exactly one slot, got {max_slots}; set type=shared for more"
        )


class InventoryService:
    """Account and customer operations on top of the repositories"""

    def __init__(self, accounts: AccountRepository, customers: CustomerRepository):
        self.accounts = accounts
        self.customers = customers

    # --- Accounts ---

    def create_account(
        self,
        service_name: str,
        email: str,
        password: str = "",
        expiration_date: Optional[date] = None,
        account_type: AccountType = AccountType.PRIVATE,
        max_slots: Optional[int] = None,
    ) -> Account:
        """
        Create an account with empty slots.

        SHARED accounts without an explicit capacity get the catalog
        default for the service.

        Raises:
            ValueError: If a PRIVATE account is given more than one slot
        """
        _check_private_capacity(account_type, max_slots)
        if max_slots is None:
            max_slots = (
                get_default_slots(service_name)
                if account_type == AccountType.SHARED
                else 1
            )
        slots = allocate_slots(account_type, max_slots)
        account = Account(
            service_name=service_name,
            email=email,
            password=password,
            expiration_date=expiration_date,
            type=account_type,
            max_slots=len(slots),
            slots=slots,
        )
        saved = self.accounts.create_or_replace(account)
        logger.info(
            f"Created {saved.type.value} {saved.service_name} account {saved.id} "
            f"with {saved.max_slots} slot(s)"
        )
        return saved

    def update_account(
        self,
        account_id: str,
        service_name=_UNSET,
        email=_UNSET,
        password=_UNSET,
        expiration_date=_UNSET,
        account_type=_UNSET,
        max_slots=_UNSET,
    ) -> Account:
        """
        Edit account fields. Changing the type or capacity resizes the slot
        sequence; shrinking drops the occupants of the removed tail slots.

        Raises:
            AccountNotFoundError: If the account does not exist
            ValueError: If slots above 1 are requested for a PRIVATE account
        """
        account = self.accounts.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        new_type = account.type if account_type is _UNSET else account_type
        if max_slots is not _UNSET:
            _check_private_capacity(new_type, max_slots)
        new_capacity = account.max_slots if max_slots is _UNSET else max_slots
        slots = reshape_slots(account.slots, new_type, new_capacity)

        changes = {
            "type": new_type,
            "max_slots": len(slots),
            "slots": slots,
        }
        if service_name is not _UNSET:
            changes["service_name"] = service_name
        if email is not _UNSET:
            changes["email"] = email
        if password is not _UNSET:
            changes["password"] = password
        if expiration_date is not _UNSET:
            changes["expiration_date"] = expiration_date

        updated = Account.model_validate({**account.model_dump(), **changes})
        saved = self.accounts.create_or_replace(updated)
        logger.info(f"Updated account {account_id}")
        return saved

    def renew_account(self, account_id: str, expiration_date: date) -> Account:
        """Set a new account-level expiration date"""
        return self.update_account(account_id, expiration_date=expiration_date)

    def delete_account(self, account_id: str) -> bool:
        deleted = self.accounts.delete_account(account_id)
        if deleted:
            logger.info(f"Deleted account {account_id}")
        return deleted

    # --- Customers ---

    def add_customer(self, name: str, contact: str = "", notes: Optional[str] = None) -> Customer:
        customer = self.customers.create_or_replace(
            Customer(name=name, contact=contact, notes=notes)
        )
        logger.info(f"Added customer {customer.id} ({customer.name})")
        return customer

    def update_customer(
        self,
        customer_id: str,
        name: Optional[str] = None,
        contact: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Customer:
        """Edit a customer; slots pick up the new name at display time"""
        customer = self.customers.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        changes = {}
        if name is not None:
            changes["name"] = name
        if contact is not None:
            changes["contact"] = contact
        if notes is not None:
            changes["notes"] = notes
        updated = Customer.model_validate({**customer.model_dump(), **changes})
        return self.customers.create_or_replace(updated)

    def delete_customer(self, customer_id: str) -> bool:
        """Remove a customer; slots keep their cached names"""
        deleted = self.customers.delete_customer(customer_id)
        if deleted:
            logger.info(f"Deleted customer {customer_id}")
        return deleted
