"""
Helpers shared by the command handlers: argument parsing and message formatting
"""

import html
from datetime import date
from typing import List, Mapping, Optional

from resellervault.models import Account, AccountType, Customer
from resellervault.services.expiration import (
    FAR_FUTURE,
    ExpirationStatus,
    classify,
    days_remaining,
)
from resellervault.services.slot_assignment import resolve_display_name

STATUS_ICONS = {
    ExpirationStatus.EXPIRED: "🔴",
    ExpirationStatus.EXPIRING_SOON: "🟡",
    ExpirationStatus.SAFE: "🟢",
}


def split_args(args: List[str]) -> List[str]:
    """Join command arguments and split them on '|' so values may contain spaces"""
    text = " ".join(args)
    if not text.strip():
        return []
    return [part.strip() for part in text.split("|")]


def parse_date(text: str) -> Optional[date]:
    """
    Parse YYYY-MM-DD; "-" or empty clears the date

    Raises:
        ValueError: If the text is not an ISO date
    """
    text = text.strip()
    if text in ("", "-"):
        return None
    return date.fromisoformat(text)


def expiration_label(value: Optional[date], today: Optional[date] = None) -> str:
    days = days_remaining(value, today)
    if days == FAR_FUTURE:
        return "⚪ no date"
    icon = STATUS_ICONS[classify(days)]
    if days < 0:
        return f"{icon} expired {-days}d ago"
    return f"{icon} {days}d left"


def format_account_line(account: Account, today: Optional[date] = None) -> str:
    """One-line summary for account lists"""
    e = html.escape
    occupancy = f"{len(account.occupied_slots)}/{account.max_slots}"
    kind = "shared" if account.type == AccountType.SHARED else "private"
    return (
        f"<b>{e(account.service_name)}</b> <code>{account.id}</code>\n"
        f"   {e(account.email)} · {kind} {occupancy} · "
        f"{expiration_label(account.expiration_date, today)}"
    )


def format_account(
    account: Account,
    customers: Mapping[str, Customer],
    today: Optional[date] = None,
    show_password: bool = False,
) -> str:
    """Account card with every slot"""
    e = html.escape
    lines = [
        f"<b>{e(account.service_name)}</b> <code>{account.id}</code>",
        f"📧 <code>{e(account.email)}</code>",
    ]
    if show_password:
        lines.append(f"🔑 <code>{e(account.password)}</code>")
    expires = account.expiration_date.isoformat() if account.expiration_date else "-"
    lines.append(f"📅 {expires} ({expiration_label(account.expiration_date, today)})")
    lines.append(
        f"{'Slots' if account.type == AccountType.SHARED else 'Customer'} "
        f"({len(account.occupied_slots)}/{account.max_slots}):"
    )

    for position, slot in enumerate(account.slots, start=1):
        if not slot.is_occupied:
            lines.append(f"  #{position} · empty")
            continue
        name = resolve_display_name(slot, customers)
        detail = f"  #{position} · {e(name)}"
        if slot.profile_name:
            detail += f" [{e(slot.profile_name)}]"
        if slot.expiration_date:
            detail += f" · {slot.expiration_date.isoformat()} ({expiration_label(slot.expiration_date, today)})"
        lines.append(detail)

    return "\n".join(lines)
