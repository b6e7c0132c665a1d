"""
Slot commands - assign, release and renew customer slots
"""

import html
import logging
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.commands.common import format_account, parse_date, split_args
from resellervault.config import get_config
from resellervault.database import get_session
from resellervault.exceptions import InventoryError
from resellervault.handlers.auth import admin_only
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.change_feed import get_change_feed
from resellervault.services.inventory import InventoryService
from resellervault.services.slot_assignment import SlotAssignmentService

logger = logging.getLogger(__name__)


async def _reply_account(update: Update, title: str, account, customers) -> None:
    await update.message.reply_text(
        f"{title}\n\n" + format_account(account, customers, get_config().today()),
        parse_mode="HTML",
    )


@admin_only
async def assign_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /assign <account> <slot#> customer-id or name | [date] | [profile]"""
    if len(context.args) < 3:
        await update.message.reply_text(
            "Usage:\n"
            "<code>/assign &lt;account&gt; &lt;slot#&gt; customer-id or name | [YYYY-MM-DD] | [profile]</code>\n\n"
            "A name that is not a customer id is stored as a guest.",
            parse_mode="HTML",
        )
        return

    account_id, slot_ref = context.args[0], context.args[1]
    parts = split_args(context.args[2:])
    who = parts[0]

    try:
        expiration_date = parse_date(parts[1]) if len(parts) > 1 else None
        profile_name = parts[2] if len(parts) > 2 and parts[2] else None

        with get_session() as session:
            feed = get_change_feed()
            customer_repo = CustomerRepository(session, feed)
            service = SlotAssignmentService(AccountRepository(session, feed), customer_repo)

            if customer_repo.get_customer(who) is not None:
                account = service.assign(
                    account_id, slot_ref, customer_id=who,
                    expiration_date=expiration_date, profile_name=profile_name,
                )
            else:
                account = service.assign(
                    account_id, slot_ref, customer_id=None, name=who,
                    expiration_date=expiration_date, profile_name=profile_name,
                )
            customers = customer_repo.customers_by_id()
    except ValueError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    await _reply_account(update, "✅ Slot assigned!", account, customers)


@admin_only
async def release_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /release <account> <slot#>"""
    if len(context.args) != 2:
        await update.message.reply_text(
            "Usage: <code>/release &lt;account&gt; &lt;slot#&gt;</code>", parse_mode="HTML"
        )
        return

    try:
        with get_session() as session:
            feed = get_change_feed()
            customer_repo = CustomerRepository(session, feed)
            service = SlotAssignmentService(AccountRepository(session, feed), customer_repo)
            account = service.clear(context.args[0], context.args[1])
            customers = customer_repo.customers_by_id()
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    await _reply_account(update, "🧹 Slot released.", account, customers)


@admin_only
async def renew_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /renew <account> YYYY-MM-DD (account date)
    or /renew <account> <slot#> YYYY-MM-DD (slot date)
    """
    if len(context.args) not in (2, 3):
        await update.message.reply_text(
            "Usage:\n"
            "<code>/renew &lt;account&gt; YYYY-MM-DD</code> - renew the account\n"
            "<code>/renew &lt;account&gt; &lt;slot#&gt; YYYY-MM-DD</code> - renew one customer",
            parse_mode="HTML",
        )
        return

    try:
        new_date = parse_date(context.args[-1])
        if new_date is None:
            raise ValueError("A renewal needs a date")

        with get_session() as session:
            feed = get_change_feed()
            account_repo = AccountRepository(session, feed)
            customer_repo = CustomerRepository(session, feed)
            if len(context.args) == 2:
                account = InventoryService(account_repo, customer_repo).renew_account(
                    context.args[0], new_date
                )
            else:
                account = SlotAssignmentService(account_repo, customer_repo).renew(
                    context.args[0], context.args[1], new_date
                )
            customers = customer_repo.customers_by_id()
    except ValueError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return
    except InventoryError as e:
        await update.message.reply_text(f"❌ {html.escape(str(e))}", parse_mode="HTML")
        return

    await _reply_account(update, "🔄 Renewed!", account, customers)
