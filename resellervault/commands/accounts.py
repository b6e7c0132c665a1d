"""
Account commands - list, show, create, edit and delete accounts
"""

import html
import logging
from pydantic import ValidationError
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.commands.common import (
    format_account,
    format_account_line,
    parse_date,
    split_args,
)
from resellervault.config import get_config
from resellervault.database import get_session
from resellervault.exceptions import InventoryError
from resellervault.handlers.auth import admin_only
from resellervault.models import AccountType
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.change_feed import get_change_feed
from resellervault.services.inventory import InventoryService
from resellervault.services_catalog import find_suggested_service

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"service", "email", "password", "expires", "type", "slots"}


def _inventory(session) -> InventoryService:
    feed = get_change_feed()
    return InventoryService(
        AccountRepository(session, feed), CustomerRepository(session, feed)
    )


def _parse_type(text: str) -> AccountType:
    try:
        return AccountType(text.strip().upper())
    except ValueError:
        raise ValueError(f"Account type must be private or shared, got '{text}'")


@admin_only
async def accounts_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """List accounts, optionally filtered by service"""
    service_filter = " ".join(context.args).strip() or None
    today = get_config().today()

    with get_session() as session:
        repo = AccountRepository(session)
        if service_filter:
            service_filter = find_suggested_service(service_filter) or service_filter
        accounts = repo.list_accounts(service_filter)
        services = repo.list_service_names()

    if not accounts:
        await update.message.reply_text(
            "📭 No accounts yet.\n\nAdd one with /addaccount" if not service_filter
            else f"📭 No {html.escape(service_filter)} accounts.",
            parse_mode="HTML",
        )
        return

    header = f"📦 <b>Accounts</b> ({len(accounts)})"
    if service_filter:
        header += f" · {html.escape(service_filter)}"
    lines = [header, ""]
    lines.extend(format_account_line(a, today) for a in accounts)
    if not service_filter and len(services) > 1:
        lines.append("")
        lines.append("Filter: " + ", ".join(html.escape(s) for s in services))

    await update.message.reply_text("\n".join(lines), parse_mode="HTML")


@admin_only
async def account_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show one account with its slots and credentials"""
    if len(context.args) != 1:
        await update.message.reply_text(
            "Usage: <code>/account &lt;account id&gt;</code>", parse_mode="HTML"
        )
        return

    with get_session() as session:
        account = AccountRepository(session).get_account(context.args[0])
        customers = CustomerRepository(session).customers_by_id()

    if account is None:
        await update.message.reply_text("❌ Account not found.")
        return

    await update.message.reply_text(
        format_account(account, customers, get_config().today(), show_password=True),
        parse_mode="HTML",
    )


@admin_only
async def addaccount_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addaccount service | email | password | date | type | [slots]"""
    parts = split_args(context.args)
    if len(parts) < 4:
        await update.message.reply_text(
            "Usage:\n"
            "<code>/addaccount service | email | password | YYYY-MM-DD | private/shared | [slots]</code>\n\n"
            "Example:\n"
            "<code>/addaccount Netflix | me@mail.com | secret | 2026-12-01 | shared | 5</code>",
            parse_mode="HTML",
        )
        return

    try:
        service_name = find_suggested_service(parts[0]) or parts[0]
        expiration_date = parse_date(parts[3])
        account_type = _parse_type(parts[4]) if len(parts) > 4 and parts[4] else AccountType.PRIVATE
        max_slots = int(parts[5]) if len(parts) > 5 and parts[5] else None

        with get_session() as session:
            account = _inventory(session).create_account(
                service_name=service_name,
                email=parts[1],
                password=parts[2],
                expiration_date=expiration_date,
                account_type=account_type,
                max_slots=max_slots,
            )
            customers = CustomerRepository(session).customers_by_id()
    except (ValueError, ValidationError) as e:
        await update.message.reply_text(f"❌ Invalid account: {html.escape(str(e))}", parse_mode="HTML")
        return
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    await update.message.reply_text(
        "✅ Account created!\n\n" + format_account(account, customers, get_config().today()),
        parse_mode="HTML",
    )


@admin_only
async def editaccount_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /editaccount <id> | field=value | ..."""
    parts = split_args(context.args)
    if len(parts) < 2:
        await update.message.reply_text(
            "Usage: <code>/editaccount &lt;id&gt; | field=value | ...</code>\n"
            "Fields: service, email, password, expires, type, slots\n\n"
            "⚠️ Lowering slots releases the customers in the last slots.",
            parse_mode="HTML",
        )
        return

    account_id = parts[0]
    changes = {}
    try:
        for part in parts[1:]:
            key, sep, value = part.partition("=")
            key = key.strip().lower()
            if not sep or key not in EDITABLE_FIELDS:
                raise ValueError(f"Unknown field '{key}'")
            value = value.strip()
            if key == "service":
                changes["service_name"] = find_suggested_service(value) or value
            elif key == "email":
                changes["email"] = value
            elif key == "password":
                changes["password"] = value
            elif key == "expires":
                changes["expiration_date"] = parse_date(value)
            elif key == "type":
                changes["account_type"] = _parse_type(value)
            elif key == "slots":
                changes["max_slots"] = int(value)

        with get_session() as session:
            account = _inventory(session).update_account(account_id, **changes)
            customers = CustomerRepository(session).customers_by_id()
    except (ValueError, ValidationError) as e:
        await update.message.reply_text(f"❌ Invalid change: {html.escape(str(e))}", parse_mode="HTML")
        return
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    await update.message.reply_text(
        "✅ Account updated!\n\n" + format_account(account, customers, get_config().today()),
        parse_mode="HTML",
    )


@admin_only
async def delaccount_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delaccount <id>"""
    if len(context.args) != 1:
        await update.message.reply_text(
            "Usage: <code>/delaccount &lt;account id&gt;</code>", parse_mode="HTML"
        )
        return

    with get_session() as session:
        deleted = _inventory(session).delete_account(context.args[0])

    if deleted:
        await update.message.reply_text("🗑 Account deleted.")
    else:
        await update.message.reply_text("❌ Account not found.")
