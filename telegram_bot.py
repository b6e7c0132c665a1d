"""
ResellerVault Bot - Main Entry Point
Minimal bot setup that wires together all commands, handlers and the
background expiration notifier.
"""
import logging
from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from resellervault.config import get_config
from resellervault.database import init_database, close_database

# Import commands
from resellervault.commands.start import start_command, help_command
from resellervault.commands.accounts import (
    accounts_command,
    account_command,
    addaccount_command,
    editaccount_command,
    delaccount_command,
)
from resellervault.commands.customers import (
    customers_command,
    addcustomer_command,
    editcustomer_command,
    delcustomer_command,
)
from resellervault.commands.slots import assign_command, release_command, renew_command
from resellervault.commands.alerts import alerts_command, check_command
from resellervault.commands.stats import stats_command

# Import handlers
from resellervault.handlers.errors import error_handler

# Import services
from resellervault.services.change_feed import get_change_feed
from resellervault.services.expiration_checker import (
    ExpirationScheduler,
    run_expiration_check,
    set_bot_start_time,
    watch_notification_config,
)

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=logging.INFO
)
# httpx logs every Bot API request at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

COMMANDS = {
    "start": start_command,
    "help": help_command,
    "accounts": accounts_command,
    "account": account_command,
    "addaccount": addaccount_command,
    "editaccount": editaccount_command,
    "delaccount": delaccount_command,
    "customers": customers_command,
    "addcustomer": addcustomer_command,
    "editcustomer": editcustomer_command,
    "delcustomer": delcustomer_command,
    "assign": assign_command,
    "release": release_command,
    "renew": renew_command,
    "alerts": alerts_command,
    "check": check_command,
    "stats": stats_command,
}


async def post_init(application: Application) -> None:
    """Post-initialization callback - set bot commands and start the notifier"""
    set_bot_start_time()

    commands = [
        BotCommand("accounts", "List accounts"),
        BotCommand("customers", "List customers"),
        BotCommand("assign", "Assign a customer to a slot"),
        BotCommand("release", "Free a slot"),
        BotCommand("renew", "Renew an account or slot"),
        BotCommand("check", "Send the expiration report now"),
        BotCommand("alerts", "Reminder settings"),
        BotCommand("stats", "Dashboard numbers"),
        BotCommand("help", "All commands"),
    ]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands set")

    # Timer follows the notification settings document
    scheduler = ExpirationScheduler(run_expiration_check)
    application.bot_data["scheduler"] = scheduler
    application.create_task(watch_notification_config(get_change_feed(), scheduler))
    logger.info("Background expiration notifier started")


async def post_shutdown(application: Application) -> None:
    """Stop the notifier and release the database"""
    scheduler = application.bot_data.get("scheduler")
    if scheduler:
        scheduler.stop()
    get_change_feed().close()
    close_database()


def main() -> None:
    """Start the bot"""
    config = get_config()

    if not config.admin_telegram_ids:
        logger.warning("ADMIN_TELEGRAM_IDS is empty - nobody will be able to use the bot")

    logger.info("Initializing database...")
    init_database()

    application = (
        Application.builder()
        .token(config.telegram_bot_token)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    for name, handler in COMMANDS.items():
        application.add_handler(CommandHandler(name, handler))

    application.add_error_handler(error_handler)

    logger.info("Starting bot...")
    application.run_polling(allowed_updates=["message"])


if __name__ == '__main__':
    main()
