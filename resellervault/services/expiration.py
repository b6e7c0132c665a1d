"""
Expiration math on calendar days.
Both the target date and "today" are whole days, so the time of day at
which a check runs never changes the result.
"""

import sys
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

from resellervault.models import Account, Slot

# Alerts fire when 0 <= days remaining <= EXPIRING_SOON_DAYS
EXPIRING_SOON_DAYS = 3

# Days remaining for a missing date
FAR_FUTURE = sys.maxsize

DateLike = Union[date, datetime, str, None]


class ExpirationStatus(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring_soon"
    SAFE = "safe"


def _to_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    # Accept full ISO timestamps too, only the day part matters
    return date.fromisoformat(value[:10])


def days_remaining(value: DateLike, today: Optional[date] = None) -> int:
    """
    Whole calendar days from today until the given date.

    Args:
        value: date, datetime or ISO "YYYY-MM-DD" string; empty means no date
        today: Reference day (default: local today)

    Returns:
        Negative when the date has passed, 0 on the day itself,
        FAR_FUTURE when no date is set

    Raises:
        ValueError: If a string is not an ISO date
    """
    target = _to_date(value)
    if target is None:
        return FAR_FUTURE
    if today is None:
        today = date.today()
    return (target - today).days


def classify(days: int) -> ExpirationStatus:
    if days < 0:
        return ExpirationStatus.EXPIRED
    if days <= EXPIRING_SOON_DAYS:
        return ExpirationStatus.EXPIRING_SOON
    return ExpirationStatus.SAFE


def is_expiring_soon(days: int) -> bool:
    return classify(days) == ExpirationStatus.EXPIRING_SOON


def account_status(account: Account, today: Optional[date] = None) -> ExpirationStatus:
    return classify(days_remaining(account.expiration_date, today))


def slot_status(slot: Slot, today: Optional[date] = None) -> ExpirationStatus:
    """Status of a slot's own override date; slots without one are always safe"""
    return classify(days_remaining(slot.expiration_date, today))
