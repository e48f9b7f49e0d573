"""Alerting module for Profit Target Monitor."""

from .sheets_client import SheetsClient
from .telegram_client import TelegramClient
from .dispatcher import AlertDispatcher

__all__ = ["SheetsClient", "TelegramClient", "AlertDispatcher"]
