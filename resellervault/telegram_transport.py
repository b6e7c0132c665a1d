"""
Telegram Bot API transport for outbound alerts.
One call, one message: no retries, failures come back as a SendResult.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    ok: bool
    error_description: Optional[str] = None


async def send_message(
    bot_token: str, chat_id: str, text: str, parse_mode: str = "HTML"
) -> SendResult:
    """
    Send a single message through the Bot API.

    Args:
        bot_token: Token of the bot that delivers the alert
        chat_id: Target chat (user, group or channel id)
        text: Message body
        parse_mode: Telegram parse mode of the body

    Returns:
        SendResult with ok=False and the API description on any failure
    """
    try:
        bot = Bot(token=bot_token)
        async with bot:
            await bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=parse_mode,
                disable_web_page_preview=True,
            )
    except TelegramError as e:
        # InvalidToken, NetworkError, TimedOut, BadRequest, Forbidden ...
        logger.error(f"Telegram rejected message to chat {chat_id}: {e.message}")
        return SendResult(ok=False, error_description=e.message)

    logger.info(f"Delivered message to chat {chat_id}")
    return SendResult(ok=True)
