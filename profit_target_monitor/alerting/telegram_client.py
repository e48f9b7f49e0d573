"""Telegram client (optional second alert channel)."""

import logging
from typing import Optional

import httpx

from ..config import settings
from .delivery import post_json

logger = logging.getLogger(__name__)


class TelegramClient:
    """Client for sending Telegram messages."""

    def __init__(
        self,
        bot_token: Optional[str] = None,
        chat_id: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.bot_token = bot_token if bot_token is not None else settings.telegram_bot_token
        self.chat_id = chat_id if chat_id is not None else settings.telegram_chat_id
        self.timeout = timeout if timeout is not None else settings.dispatch_timeout_seconds
        self.enabled = all([self.bot_token, self.chat_id])
        self.base_url = f"https://api.telegram.org/bot{self.bot_token}"
        self._transport = transport

    def send_message(self, message: str) -> bool:
        """Send a plain-text message, retrying with backoff."""
        if not self.enabled:
            logger.debug("Telegram not configured")
            return False

        return post_json(
            "Telegram",
            f"{self.base_url}/sendMessage",
            {"chat_id": self.chat_id, "text": message},
            timeout=self.timeout,
            transport=self._transport,
        )
