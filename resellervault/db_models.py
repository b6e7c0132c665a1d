"""
Database models using SQLModel
Each table holds one document collection; an account stores its slot
sequence inline as JSON because slots have no lifecycle of their own.
"""

from sqlmodel import SQLModel, Field, Column, JSON
from typing import Optional, List
from datetime import datetime

from resellervault.models import utc_now


class AccountRecord(SQLModel, table=True):
    """Account document"""

    __tablename__ = "accounts"

    id: str = Field(primary_key=True, max_length=32)
    service_name: str = Field(index=True, max_length=255)
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=255)
    expiration_date: Optional[str] = Field(default=None, max_length=10)  # YYYY-MM-DD
    type: str = Field(default="PRIVATE", max_length=10)
    max_slots: int = Field(default=1)
    slots: List[dict] = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)


class CustomerRecord(SQLModel, table=True):
    """Customer document"""

    __tablename__ = "customers"

    id: str = Field(primary_key=True, max_length=32)
    name: str = Field(index=True, max_length=255)
    contact: str = Field(default="", max_length=255)
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class NotificationConfigRecord(SQLModel, table=True):
    """Single notification settings document (always id=1)"""

    __tablename__ = "notification_config"

    id: int = Field(default=1, primary_key=True)
    bot_token: str = Field(default="", max_length=255)
    chat_id: str = Field(default="", max_length=64)
    enabled: bool = Field(default=False)
    interval_value: int = Field(default=24)
    interval_unit: str = Field(default="hours", max_length=10)
    updated_at: datetime = Field(default_factory=utc_now)
