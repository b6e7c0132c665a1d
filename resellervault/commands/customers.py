"""
Customer commands - list, search, add and delete customers
"""

import html
import logging
from pydantic import ValidationError
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.commands.common import split_args
from resellervault.database import get_session
from resellervault.exceptions import InventoryError
from resellervault.handlers.auth import admin_only
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.change_feed import get_change_feed
from resellervault.services.inventory import InventoryService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"name", "contact", "notes"}


@admin_only
async def customers_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """List customers, optionally filtered by a name/contact search"""
    term = " ".join(context.args)

    with get_session() as session:
        customers = CustomerRepository(session).search_customers(term)

    if not customers:
        await update.message.reply_text(
            "👥 No matching customers." if term else "👥 No customers yet.\n\nAdd one with /addcustomer"
        )
        return

    e = html.escape
    lines = [f"👥 <b>Customers</b> ({len(customers)})", ""]
    for c in customers:
        line = f"• {e(c.name)} <code>{c.id}</code>"
        if c.contact:
            line += f" · {e(c.contact)}"
        lines.append(line)

    await update.message.reply_text("\n".join(lines), parse_mode="HTML")


@admin_only
async def addcustomer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addcustomer name | [contact] | [notes]"""
    parts = split_args(context.args)
    if not parts or not parts[0]:
        await update.message.reply_text(
            "Usage: <code>/addcustomer name | [contact] | [notes]</code>",
            parse_mode="HTML",
        )
        return

    contact = parts[1] if len(parts) > 1 else ""
    notes = parts[2] if len(parts) > 2 and parts[2] else None

    try:
        with get_session() as session:
            feed = get_change_feed()
            inventory = InventoryService(
                AccountRepository(session, feed), CustomerRepository(session, feed)
            )
            customer = inventory.add_customer(parts[0], contact, notes)
    except ValidationError as e:
        await update.message.reply_text(f"❌ Invalid customer: {html.escape(str(e))}", parse_mode="HTML")
        return

    await update.message.reply_text(
        f"✅ Customer added: <b>{html.escape(customer.name)}</b> <code>{customer.id}</code>",
        parse_mode="HTML",
    )


@admin_only
async def editcustomer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /editcustomer <id> | field=value | ..."""
    parts = split_args(context.args)
    if len(parts) < 2:
        await update.message.reply_text(
            "Usage: <code>/editcustomer &lt;id&gt; | field=value | ...</code>\n"
            "Fields: name, contact, notes\n\n"
            "Assigned slots show the new name right away.",
            parse_mode="HTML",
        )
        return

    customer_id = parts[0]
    changes = {}
    try:
        for part in parts[1:]:
            key, sep, value = part.partition("=")
            key = key.strip().lower()
            if not sep or key not in EDITABLE_FIELDS:
                raise ValueError(f"Unknown field '{key}'")
            changes[key] = value.strip()

        with get_session() as session:
            feed = get_change_feed()
            inventory = InventoryService(
                AccountRepository(session, feed), CustomerRepository(session, feed)
            )
            customer = inventory.update_customer(customer_id, **changes)
    except (ValueError, ValidationError) as e:
        await update.message.reply_text(f"❌ Invalid change: {html.escape(str(e))}", parse_mode="HTML")
        return
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    line = f"<b>{html.escape(customer.name)}</b> <code>{customer.id}</code>"
    if customer.contact:
        line += f" · {html.escape(customer.contact)}"
    await update.message.reply_text(f"✅ Customer updated: {line}", parse_mode="HTML")


@admin_only
async def delcustomer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /delcustomer <id>"""
    if len(context.args) != 1:
        await update.message.reply_text(
            "Usage: <code>/delcustomer &lt;customer id&gt;</code>", parse_mode="HTML"
        )
        return

    with get_session() as session:
        feed = get_change_feed()
        inventory = InventoryService(
            AccountRepository(session, feed), CustomerRepository(session, feed)
        )
        deleted = inventory.delete_customer(context.args[0])

    if deleted:
        await update.message.reply_text(
            "🗑 Customer deleted.\n\nSlots assigned to them keep showing their last known name."
        )
    else:
        await update.message.reply_text("❌ Customer not found.")
