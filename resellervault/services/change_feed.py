"""
Realtime change feed over the document collections.
Every committed write pushes a full snapshot of the collection to all
subscribers; access failures are pushed as FeedError items instead.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from resellervault.exceptions import PersistenceError
from resellervault.models import utc_now

logger = logging.getLogger(__name__)


class CollectionKind(str, Enum):
    ACCOUNTS = "accounts"
    CUSTOMERS = "customers"
    NOTIFICATION_CONFIG = "notification_config"


@dataclass
class Snapshot:
    """Full state of one collection at a point in time"""
    collection: CollectionKind
    data: Any
    taken_at: datetime = field(default_factory=utc_now)


@dataclass
class FeedError:
    """Delivered instead of a snapshot when the store cannot be read"""
    collection: CollectionKind
    message: str


FeedItem = Union[Snapshot, FeedError]

_CLOSED = object()


class Subscription:
    """
    Async iterator of FeedItems for one collection.

    Yields the current snapshot first, then one item per change, until
    unsubscribe() is called. Unsubscribing twice is harmless.
    """

    def __init__(self, feed: "ChangeFeed", collection: CollectionKind):
        self.feed = feed
        self.collection = collection
        self.active = True
        self._queue: asyncio.Queue = asyncio.Queue()

    def __aiter__(self) -> AsyncIterator[FeedItem]:
        return self

    async def __anext__(self) -> FeedItem:
        if not self.active and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            raise StopAsyncIteration
        return item

    def push(self, item: FeedItem) -> None:
        if self.active:
            self._queue.put_nowait(item)

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self.feed.remove(self)
        self._queue.put_nowait(_CLOSED)


class ChangeFeed:
    """Fan-out of collection snapshots to in-process subscribers"""

    def __init__(self, loaders: Dict[CollectionKind, Callable[[], Any]]):
        self.loaders = loaders
        self._subscribers: Dict[CollectionKind, List[Subscription]] = {
            kind: [] for kind in CollectionKind
        }

    def subscribe(self, collection: CollectionKind) -> Subscription:
        """Start a new subscription; can be called again after unsubscribing"""
        subscription = Subscription(self, collection)
        self._subscribers[collection].append(subscription)
        subscription.push(self.snapshot(collection))
        logger.debug(f"New subscriber for {collection.value}")
        return subscription

    def remove(self, subscription: Subscription) -> None:
        subscribers = self._subscribers[subscription.collection]
        if subscription in subscribers:
            subscribers.remove(subscription)

    def subscriber_count(self, collection: CollectionKind) -> int:
        return len(self._subscribers[collection])

    def notify(self, collection: CollectionKind) -> None:
        """Push a fresh snapshot of a collection to all its subscribers"""
        subscribers = list(self._subscribers[collection])
        if not subscribers:
            return
        item = self.snapshot(collection)
        for subscription in subscribers:
            subscription.push(item)

    def snapshot(self, collection: CollectionKind) -> FeedItem:
        try:
            return Snapshot(collection=collection, data=self.loaders[collection]())
        except (SQLAlchemyError, PersistenceError) as e:
            logger.error(f"Cannot read {collection.value}: {e}")
            return FeedError(collection=collection, message=str(e))

    def close(self) -> None:
        """Unsubscribe everybody"""
        for subscribers in self._subscribers.values():
            for subscription in list(subscribers):
                subscription.unsubscribe()


def _load_accounts():
    from resellervault.database import get_session
    from resellervault.repositories import AccountRepository

    with get_session() as session:
        return AccountRepository(session).list_accounts()


def _load_customers():
    from resellervault.database import get_session
    from resellervault.repositories import CustomerRepository

    with get_session() as session:
        return CustomerRepository(session).list_customers()


def _load_notification_config():
    from resellervault.database import get_session
    from resellervault.repositories import NotificationConfigRepository

    with get_session() as session:
        return NotificationConfigRepository(session).get_notification_config()


# Singleton instance
_feed: Optional[ChangeFeed] = None


def get_change_feed() -> ChangeFeed:
    """Get or create the process-wide feed backed by the configured database"""
    global _feed
    if _feed is None:
        _feed = ChangeFeed(
            {
                CollectionKind.ACCOUNTS: _load_accounts,
                CollectionKind.CUSTOMERS: _load_customers,
                CollectionKind.NOTIFICATION_CONFIG: _load_notification_config,
            }
        )
    return _feed
