"""
SQLite store for the inventory documents.
One engine per process; every unit of work runs in its own session.
"""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from resellervault.config import get_config
from resellervault import db_models  # noqa: F401  (registers tables on SQLModel.metadata)

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def _enable_wal(dbapi_connection, connection_record) -> None:
    # Change-feed readers open their own sessions while a write is finishing
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def get_engine() -> Engine:
    """Engine for the configured database file, created on first use"""
    global _engine
    if _engine is None:
        db_path = Path(get_config().db_file)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        _engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False},
        )
        event.listen(_engine, "connect", _enable_wal)
        logger.info(f"Opened inventory database at {db_path}")

    return _engine


def init_database() -> None:
    """Create the accounts, customers and notification_config tables if missing"""
    SQLModel.metadata.create_all(get_engine())
    logger.info("Inventory tables ready")


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Session scope: commit on success, roll back and re-raise on error.

        with get_session() as session:
            accounts = AccountRepository(session).list_accounts()
    """
    session = Session(get_engine())
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_database() -> None:
    """Dispose of the engine; the next get_engine() reopens the file"""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Inventory database closed")
