"""
Process configuration for the ResellerVault bot.
Read once from the environment (and .env) with pydantic-settings.
Alert delivery credentials are NOT here: they live in the
notification_config document so operators can change them at runtime.
"""

from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BotConfig(BaseSettings):
    """Operator bot token, admin allow-list, database file and calendar timezone"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    telegram_bot_token: str = Field(
        ..., description="Telegram Bot API token of the operator bot (from @BotFather)"
    )

    # Access control
    admin_telegram_ids: List[int] = Field(
        default_factory=list,
        description="Telegram user IDs allowed to manage the inventory, e.g. [123, 456]",
    )

    # Database settings
    db_file: str = Field("resellervault.db", description="SQLite database file path")

    # Calendar settings
    timezone: Optional[str] = Field(
        None,
        description="IANA timezone used for calendar-day math (default: process local time)",
    )

    @field_validator("telegram_bot_token")
    @classmethod
    def validate_telegram_token(cls, v: str) -> str:
        """Validate Telegram bot token format"""
        if not v or v == "your_bot_token_here":
            raise ValueError(
                "TELEGRAM_BOT_TOKEN must be set to a valid token from @BotFather"
            )
        if ":" not in v:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN appears to be invalid (should contain ':')"
            )
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        """Reject unknown IANA zone names early"""
        if not v:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v

    def is_admin(self, user_id: int) -> bool:
        """Check if a Telegram user may operate the bot"""
        return user_id in self.admin_telegram_ids

    def today(self) -> date:
        """Current calendar day in the configured timezone"""
        if self.timezone:
            return datetime.now(ZoneInfo(self.timezone)).date()
        return date.today()


_config: Optional[BotConfig] = None


def get_config() -> BotConfig:
    """Load the configuration on first use; raises ValidationError when env is incomplete"""
    global _config
    if _config is None:
        _config = BotConfig()
    return _config


def reload_config() -> BotConfig:
    """Force reload configuration from environment"""
    global _config
    _config = BotConfig()
    return _config
