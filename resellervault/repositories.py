"""
Repository pattern for database access
Provides clean separation between business logic and data access.
Repositories translate between SQLModel records and domain models and
announce every committed write on the change feed.
"""

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from typing import Dict, List, Optional
import logging

from resellervault.db_models import AccountRecord, CustomerRecord, NotificationConfigRecord
from resellervault.exceptions import PersistenceError, SlotInvariantError
from resellervault.models import (
    Account,
    AccountType,
    Customer,
    IntervalUnit,
    NotificationConfig,
    Slot,
    utc_now,
)
from resellervault.services.change_feed import ChangeFeed, CollectionKind

logger = logging.getLogger(__name__)


class _Repository:
    """Shared commit/notify plumbing"""

    collection: CollectionKind

    def __init__(self, session: Session, feed: Optional[ChangeFeed] = None):
        self.session = session
        self.feed = feed

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Write to {self.collection.value} failed: {e}")
            raise PersistenceError(str(e)) from e
        if self.feed is not None:
            self.feed.notify(self.collection)


def account_from_record(record: AccountRecord) -> Account:
    return Account(
        id=record.id,
        service_name=record.service_name,
        email=record.email,
        password=record.password,
        expiration_date=record.expiration_date,
        type=AccountType(record.type),
        max_slots=record.max_slots,
        slots=[Slot.model_validate(slot) for slot in record.slots or []],
        created_at=record.created_at,
    )


def customer_from_record(record: CustomerRecord) -> Customer:
    return Customer(
        id=record.id, name=record.name, contact=record.contact, notes=record.notes
    )


def _dump_slots(slots: List[Slot]) -> List[dict]:
    return [slot.model_dump(mode="json") for slot in slots]


class AccountRepository(_Repository):
    """Repository for Account documents"""

    collection = CollectionKind.ACCOUNTS

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID"""
        record = self.session.get(AccountRecord, account_id)
        return account_from_record(record) if record else None

    def list_accounts(self, service_name: Optional[str] = None) -> List[Account]:
        """Get all accounts, oldest first, optionally for one service"""
        statement = select(AccountRecord).order_by(AccountRecord.created_at)
        if service_name:
            statement = statement.where(AccountRecord.service_name == service_name)
        return [account_from_record(r) for r in self.session.exec(statement)]

    def list_service_names(self) -> List[str]:
        """Distinct service names in use, sorted"""
        statement = select(AccountRecord.service_name).distinct()
        return sorted(self.session.exec(statement))

    def create_or_replace(self, account: Account) -> Account:
        """Insert a new account or replace every field of an existing one"""
        record = self.session.get(AccountRecord, account.id)
        if record is None:
            record = AccountRecord(id=account.id, created_at=account.created_at)
            self.session.add(record)

        # created_at is never overwritten
        record.service_name = account.service_name
        record.email = account.email
        record.password = account.password
        record.expiration_date = (
            account.expiration_date.isoformat() if account.expiration_date else None
        )
        record.type = account.type.value
        record.max_slots = account.max_slots
        record.slots = _dump_slots(account.slots)
        record.updated_at = utc_now()

        self._commit()
        self.session.refresh(record)
        return account_from_record(record)

    def replace_slots(self, account_id: str, slots: List[Slot]) -> Optional[Account]:
        """Write the whole slot sequence of an account"""
        record = self.session.get(AccountRecord, account_id)
        if record is None:
            return None
        if len(slots) != record.max_slots:
            raise SlotInvariantError(
                f"Refusing to store {len(slots)} slots for account {account_id} "
                f"with max_slots={record.max_slots}"
            )
        record.slots = _dump_slots(slots)
        record.updated_at = utc_now()
        self._commit()
        self.session.refresh(record)
        return account_from_record(record)

    def delete_account(self, account_id: str) -> bool:
        """Delete account together with its slots"""
        record = self.session.get(AccountRecord, account_id)
        if record:
            self.session.delete(record)
            self._commit()
            return True
        return False


class CustomerRepository(_Repository):
    """Repository for Customer documents"""

    collection = CollectionKind.CUSTOMERS

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        """Get customer by ID"""
        record = self.session.get(CustomerRecord, customer_id)
        return customer_from_record(record) if record else None

    def list_customers(self) -> List[Customer]:
        """Get all customers sorted by name"""
        statement = select(CustomerRecord).order_by(CustomerRecord.name)
        return [customer_from_record(r) for r in self.session.exec(statement)]

    def customers_by_id(self) -> Dict[str, Customer]:
        """Lookup table used for display-name resolution"""
        return {c.id: c for c in self.list_customers()}

    def search_customers(self, term: str) -> List[Customer]:
        """Case-insensitive substring match on name or contact"""
        needle = term.strip().lower()
        customers = self.list_customers()
        if not needle:
            return customers
        return [
            c for c in customers
            if needle in c.name.lower() or needle in c.contact.lower()
        ]

    def create_or_replace(self, customer: Customer) -> Customer:
        """Insert a new customer or replace the fields of an existing one"""
        record = self.session.get(CustomerRecord, customer.id)
        if record is None:
            record = CustomerRecord(id=customer.id, name=customer.name)
            self.session.add(record)

        record.name = customer.name
        record.contact = customer.contact
        record.notes = customer.notes

        self._commit()
        self.session.refresh(record)
        return customer_from_record(record)

    def delete_customer(self, customer_id: str) -> bool:
        """Delete a customer. Slots referencing it are left untouched."""
        record = self.session.get(CustomerRecord, customer_id)
        if record:
            self.session.delete(record)
            self._commit()
            return True
        return False


class NotificationConfigRepository(_Repository):
    """Repository for the single NotificationConfig document"""

    CONFIG_ID = 1

    collection = CollectionKind.NOTIFICATION_CONFIG

    def get_notification_config(self) -> NotificationConfig:
        """Read the settings, creating the default document on first read"""
        record = self.session.get(NotificationConfigRecord, self.CONFIG_ID)
        if record is None:
            defaults = NotificationConfig()
            record = NotificationConfigRecord(
                id=self.CONFIG_ID,
                interval_value=defaults.interval_value,
                interval_unit=defaults.interval_unit.value,
            )
            self.session.add(record)
            self._commit()
            self.session.refresh(record)
            logger.info("Created default notification config")

        return NotificationConfig(
            bot_token=record.bot_token,
            chat_id=record.chat_id,
            enabled=record.enabled,
            interval_value=record.interval_value,
            interval_unit=IntervalUnit(record.interval_unit),
        )

    def save_notification_config(self, config: NotificationConfig) -> NotificationConfig:
        """Replace the settings document"""
        record = self.session.get(NotificationConfigRecord, self.CONFIG_ID)
        if record is None:
            record = NotificationConfigRecord(id=self.CONFIG_ID)
            self.session.add(record)

        record.bot_token = config.bot_token
        record.chat_id = config.chat_id
        record.enabled = config.enabled
        record.interval_value = config.interval_value
        record.interval_unit = config.interval_unit.value
        record.updated_at = utc_now()

        self._commit()
        return config
