"""
Operator access control for bot commands.
Only Telegram users listed in ADMIN_TELEGRAM_IDS may read or change the inventory.
"""

import functools
import logging

from telegram import Update
from telegram.ext import ContextTypes

from resellervault.config import get_config

logger = logging.getLogger(__name__)


def admin_only(handler):
    """Reject updates from users that are not configured as operators"""

    @functools.wraps(handler)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE):
        user = update.effective_user
        if user is None or not get_config().is_admin(user.id):
            logger.warning(
                f"Denied {handler.__name__} for user {user.id if user else 'unknown'}"
            )
            if update.effective_message:
                await update.effective_message.reply_text(
                    "⛔ Access denied. Ask the owner to add your Telegram ID to ADMIN_TELEGRAM_IDS."
                )
            return None
        return await handler(update, context)

    return wrapper
