"""
/stats command - Dashboard numbers and notifier statistics
"""

import logging
from datetime import datetime
from telegram import Update
from telegram.ext import ContextTypes

from resellervault.config import get_config
from resellervault.database import get_session
from resellervault.handlers.auth import admin_only
from resellervault.repositories import AccountRepository, CustomerRepository
from resellervault.services.expiration_checker import get_stats
from resellervault.services.inventory import compute_dashboard_stats

logger = logging.getLogger(__name__)


@admin_only
async def stats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show inventory statistics"""
    stats = get_stats()

    uptime = "N/A"
    if stats["bot_start_time"]:
        uptime_seconds = (datetime.now() - stats["bot_start_time"]).total_seconds()
        hours = int(uptime_seconds // 3600)
        minutes = int((uptime_seconds % 3600) // 60)
        uptime = f"{hours}h {minutes}m"

    with get_session() as session:
        accounts = AccountRepository(session).list_accounts()
        total_customers = len(CustomerRepository(session).list_customers())

    dashboard = compute_dashboard_stats(accounts, get_config().today())

    message = (
        "📈 <b>Dashboard</b>\n\n"
        f"💳 Total accounts: {dashboard.total_accounts}\n"
        f"⚠️ Expiring soon: {dashboard.expiring_soon}\n"
        f"💼 Empty slots: {dashboard.empty_slots}\n"
        f"👤 Occupied slots: {dashboard.occupied_slots}\n"
        f"👥 Customers: {total_customers}\n\n"
        f"⏱ Uptime: {uptime}\n"
        f"🔍 Checks: {stats['total_checks']}\n"
        f"📨 Reports sent: {stats['alerts_sent']}\n"
        f"❌ Failed: {stats['failed_checks']}\n"
    )

    if stats["last_check_time"]:
        message += (
            f"\n⏰ Last check: {stats['last_check_time'].strftime('%H:%M:%S')}"
            f" ({stats['last_outcome']})"
        )

    await update.message.reply_text(message, parse_mode="HTML")
