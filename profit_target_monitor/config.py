"""Configuration for Profit Target Monitor service."""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional


class Settings(BaseSettings):
    """Profit Target Monitor configuration."""

    # Notification sink - Google Apps Script web app that emails alerts
    sheets_url: Optional[str] = Field(default=None, alias="SHEETS_URL")
    alert_email: str = Field(default="", alias="ALERT_EMAIL")  # Forwarded to the sink

    # Telegram - Optional second channel
    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_chat_id: Optional[str] = Field(default=None, alias="TELEGRAM_CHAT_ID")

    # Price source
    price_api_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price",
        alias="PRICE_API_URL",
    )
    quote_currency: str = Field(default="usd", alias="QUOTE_CURRENCY")

    # Monitoring
    check_interval_seconds: int = Field(default=30, alias="CHECK_INTERVAL_SECONDS")
    fetch_timeout_seconds: float = Field(default=10.0, alias="FETCH_TIMEOUT_SECONDS")
    dispatch_timeout_seconds: float = Field(default=10.0, alias="DISPATCH_TIMEOUT_SECONDS")

    # Portfolio - JSON file with holdings and targets; built-in portfolio if unset
    portfolio_file: Optional[str] = Field(default=None, alias="PORTFOLIO_FILE")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Health endpoint
    health_port: int = Field(default=8080, alias="HEALTH_PORT")

    @property
    def sheets_enabled(self) -> bool:
        return bool(self.sheets_url) and "YOUR_GOOGLE" not in self.sheets_url

    @property
    def telegram_enabled(self) -> bool:
        return all([self.telegram_bot_token, self.telegram_chat_id])

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
