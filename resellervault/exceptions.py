"""
Exceptions raised by the inventory core and its repositories
"""


class InventoryError(Exception):
    """Base class for inventory operations that can be reported to an operator"""


class AccountNotFoundError(InventoryError):
    def __init__(self, account_id: str):
        super().__init__(f"Account {account_id} not found")
        self.account_id = account_id


class SlotNotFoundError(InventoryError):
    def __init__(self, account_id: str, slot_ref):
        super().__init__(f"Slot {slot_ref} not found in account {account_id}")
        self.account_id = account_id
        self.slot_ref = slot_ref


class CustomerNotFoundError(InventoryError):
    def __init__(self, customer_id: str):
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class PersistenceError(InventoryError):
    """The document store rejected a read or write"""


class SlotInvariantError(AssertionError):
    """Slot count no longer matches max_slots. Always a programming defect."""
