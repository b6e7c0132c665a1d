"""
/alerts and /check commands - Notification settings and manual report
"""

import html
import logging
from pydantic import ValidationError
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.database import get_session
from resellervault.handlers.auth import admin_only
from resellervault.models import IntervalUnit, NotificationConfig
from resellervault.repositories import NotificationConfigRepository
from resellervault.services.change_feed import get_change_feed
from resellervault.services.expiration_checker import run_expiration_check
from resellervault.services.notification_service import AlertOutcome

logger = logging.getLogger(__name__)

OUTCOME_ICONS = {
    AlertOutcome.SENT: "✅",
    AlertOutcome.NOTHING_TO_SEND: "👌",
    AlertOutcome.CONFIGURATION_ERROR: "⚙️",
    AlertOutcome.DELIVERY_ERROR: "❌",
    AlertOutcome.STORAGE_ERROR: "🗄",
}


def _mask(token: str) -> str:
    if not token:
        return "not set"
    return token[:6] + "…" + token[-4:] if len(token) > 12 else "set"


def format_settings(config: NotificationConfig) -> str:
    return (
        "🔔 <b>Expiration Alerts</b>\n\n"
        f"Status: {'✅ enabled' if config.enabled else '⏸ disabled'}\n"
        f"Bot token: <code>{html.escape(_mask(config.bot_token))}</code>\n"
        f"Chat ID: <code>{html.escape(config.chat_id or 'not set')}</code>\n"
        f"Interval: every {config.interval_value} {config.interval_unit.value}\n\n"
        "Change with:\n"
        "<code>/alerts token &lt;bot token&gt;</code>\n"
        "<code>/alerts chat &lt;chat id&gt;</code>\n"
        "<code>/alerts every 12 hours</code>\n"
        "<code>/alerts on</code> · <code>/alerts off</code>\n\n"
        "Reminders only run while the bot is running."
    )


def apply_setting(config: NotificationConfig, args: list) -> NotificationConfig:
    """
    Return a copy of the settings with one change applied

    Raises:
        ValueError: On unknown options or invalid values
    """
    option = args[0].lower()
    changes = {}
    if option in ("on", "off"):
        changes["enabled"] = option == "on"
    elif option == "token" and len(args) == 2:
        changes["bot_token"] = args[1]
    elif option == "chat" and len(args) == 2:
        changes["chat_id"] = args[1]
    elif option == "every" and len(args) == 3:
        changes["interval_value"] = int(args[1])
        changes["interval_unit"] = IntervalUnit(args[2].lower())
    else:
        raise ValueError(f"Unknown option: {' '.join(args)}")
    return NotificationConfig.model_validate({**config.model_dump(), **changes})


@admin_only
async def alerts_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show or change the notification settings"""
    try:
        with get_session() as session:
            repo = NotificationConfigRepository(session, get_change_feed())
            config = repo.get_notification_config()
            if context.args:
                config = repo.save_notification_config(apply_setting(config, context.args))
                logger.info(f"Notification settings changed: {context.args[0]}")
    except (ValueError, ValidationError) as e:
        await update.message.reply_text(
            f"❌ {html.escape(str(e))}\n\nUse /alerts to see the available options.",
            parse_mode="HTML",
        )
        return

    await update.message.reply_text(format_settings(config), parse_mode="HTML")


@admin_only
async def check_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Run a notification cycle right now"""
    await update.message.reply_text("⏳ Sending expiration report...")
    result = await run_expiration_check()
    await update.message.reply_text(
        f"{OUTCOME_ICONS[result.outcome]} {html.escape(result.message)}",
        parse_mode="HTML",
    )
