"""
Expiration checker service - periodic background task.
Loads the inventory, sends the expiration digest and keeps the timer in
step with the notification settings.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from resellervault.config import get_config
from resellervault.database import get_session
from resellervault.exceptions import PersistenceError
from resellervault.models import NotificationConfig
from resellervault.repositories import (
    AccountRepository,
    CustomerRepository,
    NotificationConfigRepository,
)
from resellervault.services.change_feed import ChangeFeed, CollectionKind, FeedError
from resellervault.services.notification_service import (
    AlertOutcome,
    DeliveryResult,
    send_expiration_alert,
)

logger = logging.getLogger(__name__)

# Global stats tracking
stats = {
    "total_checks": 0,
    "alerts_sent": 0,
    "failed_checks": 0,
    "last_check_time": None,
    "last_outcome": None,
    "bot_start_time": None,
}


def get_stats() -> dict:
    """Get current statistics"""
    return stats


def set_bot_start_time() -> None:
    """Set bot start time in stats"""
    stats["bot_start_time"] = datetime.now()


async def run_expiration_check() -> DeliveryResult:
    """
    One notification cycle: read accounts, customers and settings, then
    send the digest. Used by the timer and by the /check command.
    """
    stats["total_checks"] += 1
    stats["last_check_time"] = datetime.now()

    try:
        with get_session() as session:
            accounts = AccountRepository(session).list_accounts()
            customers = CustomerRepository(session).customers_by_id()
            config = NotificationConfigRepository(session).get_notification_config()
    except (SQLAlchemyError, PersistenceError) as e:
        logger.error(f"Expiration check could not read the inventory: {e}")
        stats["last_outcome"] = AlertOutcome.STORAGE_ERROR.value
        stats["failed_checks"] += 1
        return DeliveryResult(
            AlertOutcome.STORAGE_ERROR, f"Could not read the inventory: {e}"
        )

    result = await send_expiration_alert(
        accounts, config, customers, today=get_config().today()
    )

    stats["last_outcome"] = result.outcome.value
    if result.outcome == AlertOutcome.SENT:
        stats["alerts_sent"] += 1
    elif not result.success:
        stats["failed_checks"] += 1
    return result


class ExpirationScheduler:
    """
    Runs a tick callback every interval while the process is alive.

    Not durable: a restart resets the schedule and missed ticks are not
    caught up. start() replaces any running timer, stop() is idempotent.
    """

    def __init__(self, tick: Callable[[], Awaitable]):
        self.tick = tick
        self.interval: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval_seconds: int) -> None:
        if interval_seconds <= 0:
            raise ValueError("Interval must be positive")
        self.stop()
        self.interval = interval_seconds
        self._task = asyncio.create_task(self._run(interval_seconds))
        logger.info(f"Expiration checks scheduled every {interval_seconds}s")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            self.interval = None
            logger.info("Expiration checks stopped")

    def apply_config(self, config: NotificationConfig) -> None:
        """Start, restart or stop the timer to match the settings"""
        if not config.enabled:
            self.stop()
            return
        if self.running and self.interval == config.interval_seconds:
            return
        self.start(config.interval_seconds)

    async def _run(self, interval_seconds: int) -> None:
        while True:
            # First tick after one full interval
            await asyncio.sleep(interval_seconds)
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Expiration check failed: {e}", exc_info=True)


async def watch_notification_config(feed: ChangeFeed, scheduler: ExpirationScheduler) -> None:
    """
    Keep the scheduler in step with the settings document.
    Runs until the subscription is closed.
    """
    subscription = feed.subscribe(CollectionKind.NOTIFICATION_CONFIG)
    try:
        async for item in subscription:
            if isinstance(item, FeedError):
                logger.error(f"Notification settings unavailable: {item.message}")
                continue
            scheduler.apply_config(item.data)
    finally:
        subscription.unsubscribe()
