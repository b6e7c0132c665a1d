"""
Domain models for the reseller inventory
Uses pydantic so every record is validated on construction
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def generate_id() -> str:
    """Short opaque identifier, easy to type in bot commands"""
    return uuid.uuid4().hex[:10]


def utc_now() -> datetime:
    """Timezone-aware current UTC time; stored timestamps are always aware"""
    return datetime.now(timezone.utc)


def _empty_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class AccountType(str, Enum):
    """Whether an account is sold whole or split into slots"""

    PRIVATE = "PRIVATE"
    SHARED = "SHARED"


class IntervalUnit(str, Enum):
    """Unit of the periodic notification interval"""

    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


INTERVAL_UNIT_SECONDS = {
    IntervalUnit.MINUTES: 60,
    IntervalUnit.HOURS: 60 * 60,
    IntervalUnit.DAYS: 24 * 60 * 60,
}


class Customer(BaseModel):
    """A buyer who can be bound to one or more slots"""

    id: str = Field(default_factory=generate_id)
    name: str
    contact: str = ""
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Customer name must not be empty")
        return v

    @field_validator("contact", mode="before")
    @classmethod
    def normalize_contact(cls, v):
        return (v or "").strip()


class Slot(BaseModel):
    """
    One assignable seat within an account.

    is_occupied is always recomputed from customer_name, so the two can
    never disagree on a constructed slot.
    """

    id: str = Field(default_factory=generate_id)
    customer_id: Optional[str] = None
    customer_name: str = ""
    is_occupied: bool = False
    expiration_date: Optional[date] = None
    profile_name: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("customer_name", mode="before")
    @classmethod
    def normalize_customer_name(cls, v):
        return (v or "").strip()

    @field_validator("expiration_date", "profile_name", "notes", "customer_id", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        return _empty_to_none(v)

    @model_validator(mode="after")
    def sync_occupancy(self) -> "Slot":
        self.is_occupied = self.customer_name != ""
        return self


class Account(BaseModel):
    """A service subscription owned by the reseller"""

    id: str = Field(default_factory=generate_id)
    service_name: str
    email: str = ""
    password: str = ""
    expiration_date: Optional[date] = None
    type: AccountType = AccountType.PRIVATE
    max_slots: int = Field(1, ge=1)
    slots: List[Slot] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("service_name")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Service name must not be empty")
        return v

    @field_validator("expiration_date", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        return _empty_to_none(v)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_slot_invariants(self) -> "Account":
        if self.type == AccountType.PRIVATE and self.max_slots != 1:
            raise ValueError("PRIVATE accounts must have exactly one slot")
        if len(self.slots) != self.max_slots:
            raise ValueError(
                f"Account has {len(self.slots)} slots but max_slots is {self.max_slots}"
            )
        return self

    @property
    def occupied_slots(self) -> List[Slot]:
        return [slot for slot in self.slots if slot.is_occupied]

    @property
    def empty_slot_count(self) -> int:
        return sum(1 for slot in self.slots if not slot.is_occupied)

    def slot_position(self, slot_id: str) -> Optional[int]:
        """1-based position of a slot, or None if it is not in this account"""
        for index, slot in enumerate(self.slots):
            if slot.id == slot_id:
                return index + 1
        return None


class NotificationConfig(BaseModel):
    """Delivery credentials and cadence of the expiration notifier"""

    bot_token: str = ""
    chat_id: str = ""
    enabled: bool = False
    interval_value: int = Field(24, gt=0)
    interval_unit: IntervalUnit = IntervalUnit.HOURS

    @field_validator("bot_token", "chat_id", mode="before")
    @classmethod
    def strip_credentials(cls, v):
        return str(v or "").strip()

    @property
    def has_credentials(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @property
    def interval_seconds(self) -> int:
        return self.interval_value * INTERVAL_UNIT_SECONDS[self.interval_unit]
