"""
Slot allocation for accounts.
Turns an account's type and capacity into an ordered slot sequence and
resizes that sequence when the capacity changes.
"""

import logging
from typing import List

from resellervault.exceptions import SlotInvariantError
from resellervault.models import AccountType, Slot

logger = logging.getLogger(__name__)


def normalize_capacity(account_type: AccountType, max_slots: int) -> int:
    """PRIVATE accounts always hold exactly one slot"""
    if account_type == AccountType.PRIVATE:
        return 1
    if max_slots < 1:
        raise ValueError(f"max_slots must be at least 1, got {max_slots}")
    return max_slots


def allocate_slots(account_type: AccountType, max_slots: int) -> List[Slot]:
    """Fresh empty slots for a new account"""
    count = normalize_capacity(account_type, max_slots)
    return [Slot() for _ in range(count)]


def resize_slots(slots: List[Slot], max_slots: int) -> List[Slot]:
    """
    Grow or shrink a slot sequence to max_slots.

    Growing appends empty slots at the end. Shrinking truncates from the
    end and drops whoever occupied the removed slots; displaced customers
    are not moved into free slots further up.

    Args:
        slots: Current slot sequence (not modified)
        max_slots: New capacity, at least 1

    Returns:
        New list of exactly max_slots slots
    """
    if max_slots < 1:
        raise ValueError(f"max_slots must be at least 1, got {max_slots}")

    current = list(slots)
    if max_slots > len(current):
        current.extend(Slot() for _ in range(max_slots - len(current)))
    elif max_slots < len(current):
        dropped = [s for s in current[max_slots:] if s.is_occupied]
        if dropped:
            logger.warning(
                f"Shrinking to {max_slots} slots releases {len(dropped)} occupant(s): "
                f"{', '.join(s.customer_name for s in dropped)}"
            )
        current = current[:max_slots]

    if len(current) != max_slots:
        raise SlotInvariantError(f"Resize produced {len(current)} slots, expected {max_slots}")
    return current


def reshape_slots(
    slots: List[Slot], account_type: AccountType, max_slots: int
) -> List[Slot]:
    """Apply a type and capacity change; SHARED to PRIVATE takes the shrink path"""
    return resize_slots(slots, normalize_capacity(account_type, max_slots))
