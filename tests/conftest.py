"""
Pytest configuration and shared fixtures for tests
"""

import pytest
from datetime import date
from sqlmodel import Session, SQLModel, create_engine
from sqlalchemy.pool import StaticPool

from resellervault import db_models  # noqa: F401  (registers tables)
from resellervault.repositories import (
    AccountRepository,
    CustomerRepository,
    NotificationConfigRepository,
)
from resellervault.services.change_feed import ChangeFeed, CollectionKind

TODAY = date(2026, 10, 18)


@pytest.fixture(name="db_engine")
def db_engine_fixture():
    """Create in-memory SQLite database engine for testing"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # Keep single connection for in-memory DB
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(name="db_session")
def db_session_fixture(db_engine):
    """Create database session for testing"""
    with Session(db_engine) as session:
        yield session
        session.rollback()  # Rollback any uncommitted changes after test


@pytest.fixture(name="feed")
def feed_fixture(db_engine):
    """Change feed whose loaders read the test database"""

    def load(repo_cls, method):
        def loader():
            with Session(db_engine) as session:
                return getattr(repo_cls(session), method)()
        return loader

    return ChangeFeed(
        {
            CollectionKind.ACCOUNTS: load(AccountRepository, "list_accounts"),
            CollectionKind.CUSTOMERS: load(CustomerRepository, "list_customers"),
            CollectionKind.NOTIFICATION_CONFIG: load(
                NotificationConfigRepository, "get_notification_config"
            ),
        }
    )


@pytest.fixture(name="today")
def today_fixture():
    """Fixed reference day for expiration math"""
    return TODAY
