"""
/start and /help commands - Welcome message and command reference
"""

import logging
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.handlers.auth import admin_only

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "📖 <b>ResellerVault commands</b>\n\n"
    "<b>Accounts</b>\n"
    "/accounts [service] - list accounts\n"
    "/account &lt;id&gt; - account card with slots\n"
    "/addaccount service | email | password | YYYY-MM-DD | private/shared | [slots]\n"
    "/editaccount &lt;id&gt; | field=value | ... (service, email, password, expires, type, slots)\n"
    "/delaccount &lt;id&gt;\n\n"
    "<b>Slots</b>\n"
    "/assign &lt;account&gt; &lt;slot#&gt; customer-id or name | [YYYY-MM-DD] | [profile]\n"
    "/release &lt;account&gt; &lt;slot#&gt;\n"
    "/renew &lt;account&gt; [slot#] YYYY-MM-DD\n\n"
    "<b>Customers</b>\n"
    "/customers [search]\n"
    "/addcustomer name | [contact] | [notes]\n"
    "/editcustomer &lt;id&gt; | field=value | ... (name, contact, notes)\n"
    "/delcustomer &lt;id&gt;\n\n"
    "<b>Alerts</b>\n"
    "/alerts - show settings\n"
    "/alerts token &lt;bot token&gt; · /alerts chat &lt;chat id&gt;\n"
    "/alerts every &lt;n&gt; minutes|hours|days · /alerts on · /alerts off\n"
    "/check - send the expiration report now\n"
    "/stats - dashboard numbers"
)


@admin_only
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /start command"""
    user = update.effective_user
    logger.info(f"Operator {user.id} started the bot")

    welcome_msg = (
        "👋 <b>Welcome to ResellerVault!</b>\n\n"
        "I keep track of your service accounts, who sits in which slot, "
        "and remind you before anything expires.\n\n"
        "⚡ <b>Getting Started:</b>\n"
        "• Add a customer: /addcustomer\n"
        "• Add an account: /addaccount\n"
        "• Configure reminders: /alerts\n"
        "• All commands: /help"
    )
    await update.message.reply_text(welcome_msg, parse_mode="HTML")


@admin_only
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle the /help command"""
    await update.message.reply_text(HELP_TEXT, parse_mode="HTML")
