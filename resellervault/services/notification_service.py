"""
Notification service for expiration alerts.
Builds a digest of accounts and slots that need renewing, renders it as
an HTML Telegram message and hands it to the messaging transport.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, List, Mapping, Optional

from resellervault.models import Account, Customer, NotificationConfig
from resellervault.services.expiration import (
    EXPIRING_SOON_DAYS,
    ExpirationStatus,
    classify,
    days_remaining,
    is_expiring_soon,
)
from resellervault.services.slot_assignment import resolve_display_name
from resellervault.telegram_transport import SendResult, send_message

logger = logging.getLogger(__name__)

Transport = Callable[[str, str, str, str], Awaitable[SendResult]]


@dataclass
class Occupant:
    position: int
    display_name: str


@dataclass
class AccountAlert:
    """An account whose own expiration date is close"""
    account_id: str
    service_name: str
    email: str
    days_remaining: int
    occupants: List[Occupant] = field(default_factory=list)


@dataclass
class SlotAlert:
    """A slot whose own override date is close while its account is fine"""
    account_id: str
    account_email: str
    service_name: str
    slot_id: str
    position: int
    customer_name: str
    days_remaining: int


@dataclass
class Digest:
    account_alerts: List[AccountAlert]
    slot_alerts: List[SlotAlert]

    @property
    def total(self) -> int:
        return len(self.account_alerts) + len(self.slot_alerts)


class AlertOutcome(str, Enum):
    SENT = "sent"
    NOTHING_TO_SEND = "nothing_to_send"
    CONFIGURATION_ERROR = "configuration_error"
    DELIVERY_ERROR = "delivery_error"
    STORAGE_ERROR = "storage_error"


@dataclass
class DeliveryResult:
    outcome: AlertOutcome
    message: str
    digest: Optional[Digest] = None

    @property
    def success(self) -> bool:
        return self.outcome in (AlertOutcome.SENT, AlertOutcome.NOTHING_TO_SEND)


def compose_digest(
    accounts: List[Account],
    customers: Optional[Mapping[str, Customer]] = None,
    today: Optional[date] = None,
) -> Optional[Digest]:
    """
    Collect everything that needs attention in this notification cycle.

    Accounts expiring within EXPIRING_SOON_DAYS produce an account alert
    listing their occupants. Only accounts that are otherwise safe have
    their occupied slots checked for slot-level alerts, so a slot is never
    reported twice. Expired accounts produce neither.

    Returns:
        Digest, or None when nothing needs attention
    """
    customers = customers or {}
    account_alerts: List[AccountAlert] = []
    slot_alerts: List[SlotAlert] = []

    for account in accounts:
        account_days = days_remaining(account.expiration_date, today)
        status = classify(account_days)

        if status == ExpirationStatus.EXPIRING_SOON:
            account_alerts.append(
                AccountAlert(
                    account_id=account.id,
                    service_name=account.service_name,
                    email=account.email,
                    days_remaining=account_days,
                    occupants=[
                        Occupant(position, resolve_display_name(slot, customers))
                        for position, slot in enumerate(account.slots, start=1)
                        if slot.is_occupied
                    ],
                )
            )
            continue

        if status != ExpirationStatus.SAFE:
            continue

        for position, slot in enumerate(account.slots, start=1):
            if not slot.is_occupied or slot.expiration_date is None:
                continue
            slot_days = days_remaining(slot.expiration_date, today)
            if is_expiring_soon(slot_days):
                slot_alerts.append(
                    SlotAlert(
                        account_id=account.id,
                        account_email=account.email,
                        service_name=account.service_name,
                        slot_id=slot.id,
                        position=position,
                        customer_name=resolve_display_name(slot, customers),
                        days_remaining=slot_days,
                    )
                )

    if not account_alerts and not slot_alerts:
        return None
    return Digest(account_alerts=account_alerts, slot_alerts=slot_alerts)


def _days_label(days: int) -> str:
    if days == 0:
        return "expires <b>today</b>"
    if days == 1:
        return "expires in <b>1 day</b>"
    return f"expires in <b>{days} days</b>"


def render_digest(digest: Digest) -> str:
    """Render a digest as an HTML message"""
    e = html.escape
    lines = [
        "⚠️ <b>Expiration Report</b>",
        "",
    ]

    if digest.account_alerts:
        lines.append(
            f"📦 <b>{len(digest.account_alerts)}</b> account(s) expiring within "
            f"{EXPIRING_SOON_DAYS} days:"
        )
        for alert in digest.account_alerts:
            lines.append("")
            lines.append(
                f"• <b>{e(alert.service_name)}</b> - <code>{e(alert.email or alert.account_id)}</code> "
                f"{_days_label(alert.days_remaining)}"
            )
            if alert.occupants:
                for occupant in alert.occupants:
                    lines.append(f"    #{occupant.position} {e(occupant.display_name)}")
            else:
                lines.append("    (no customers assigned)")

    if digest.slot_alerts:
        if digest.account_alerts:
            lines.append("")
        lines.append(f"👤 <b>{len(digest.slot_alerts)}</b> customer slot(s) expiring:")
        for alert in digest.slot_alerts:
            lines.append(
                f"• {e(alert.customer_name)} - {e(alert.service_name)} slot #{alert.position} "
                f"(<code>{e(alert.account_email or alert.account_id)}</code>) "
                f"{_days_label(alert.days_remaining)}"
            )

    lines.append("")
    lines.append("Please renew them via /accounts.")
    return "\n".join(lines)


async def send_expiration_alert(
    accounts: List[Account],
    config: NotificationConfig,
    customers: Optional[Mapping[str, Customer]] = None,
    transport: Optional[Transport] = None,
    today: Optional[date] = None,
) -> DeliveryResult:
    """
    Compose the digest and deliver it as one message.

    Never raises for delivery problems and never retries; the outcome
    tells configuration errors, empty cycles and delivery errors apart.
    """
    if not config.has_credentials:
        logger.warning("Expiration alert skipped: bot token or chat id not configured")
        return DeliveryResult(
            AlertOutcome.CONFIGURATION_ERROR,
            "Telegram bot token or chat ID not configured.",
        )

    digest = compose_digest(accounts, customers, today)
    if digest is None:
        logger.info("No accounts or slots expiring soon, no message sent")
        return DeliveryResult(
            AlertOutcome.NOTHING_TO_SEND, "No accounts expiring soon. No message sent."
        )

    transport = transport or send_message
    result = await transport(config.bot_token, config.chat_id, render_digest(digest), "HTML")
    if not result.ok:
        description = result.error_description or "Telegram API error"
        logger.error(f"Expiration alert delivery failed: {description}")
        return DeliveryResult(AlertOutcome.DELIVERY_ERROR, description, digest)

    logger.info(
        f"Sent expiration alert: {len(digest.account_alerts)} account(s), "
        f"{len(digest.slot_alerts)} slot(s)"
    )
    return DeliveryResult(
        AlertOutcome.SENT,
        f"Sent alert for {len(digest.account_alerts)} account(s) and "
        f"{len(digest.slot_alerts)} slot(s).",
        digest,
    )
