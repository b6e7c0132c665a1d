"""
Tests for the Bot API transport
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from telegram.error import Forbidden, NetworkError

from resellervault.telegram_transport import send_message


def mock_bot(send_side_effect=None):
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=send_side_effect)
    return bot


class TestSendMessage:
    """Tests for send_message"""

    @pytest.mark.asyncio
    async def test_success(self):
        bot = mock_bot()
        with patch("resellervault.telegram_transport.Bot", return_value=bot) as MockBot:
            result = await send_message("1:abc", "42", "<b>hi</b>")

        assert result.ok is True
        assert result.error_description is None
        MockBot.assert_called_once_with(token="1:abc")
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["chat_id"] == "42"
        assert kwargs["text"] == "<b>hi</b>"
        assert kwargs["parse_mode"] == "HTML"

    @pytest.mark.asyncio
    async def test_api_error_description(self):
        """Test API rejections are returned, not raised"""
        bot = mock_bot(Forbidden("Forbidden: bot was blocked by the user"))
        with patch("resellervault.telegram_transport.Bot", return_value=bot):
            result = await send_message("1:abc", "42", "hi")

        assert result.ok is False
        assert "blocked" in result.error_description

    @pytest.mark.asyncio
    async def test_network_error_single_attempt(self):
        bot = mock_bot(NetworkError("connection reset"))
        with patch("resellervault.telegram_transport.Bot", return_value=bot):
            result = await send_message("1:abc", "42", "hi")

        assert result.ok is False
        assert bot.send_message.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_token(self):
        result = await send_message("", "42", "hi")
        assert result.ok is False
