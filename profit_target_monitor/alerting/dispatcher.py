"""Alert dispatcher fanning each alert out to every configured channel."""

import logging
from typing import Optional

from ..models import ProfitAlert
from .sheets_client import SheetsClient
from .telegram_client import TelegramClient

logger = logging.getLogger(__name__)


class AlertDispatcher:
    """Delivers profit alerts to Google Sheets (email) and Telegram.

    A failing channel never stops the others, and no delivery failure is
    raised to the caller.
    """

    def __init__(
        self,
        sheets_client: SheetsClient,
        telegram_client: Optional[TelegramClient] = None,
    ):
        self.sheets = sheets_client
        self.telegram = telegram_client

    @property
    def enabled(self) -> bool:
        return self.sheets.enabled or bool(self.telegram and self.telegram.enabled)

    def dispatch(self, alert: ProfitAlert) -> bool:
        """Send an alert to every enabled channel.

        Returns:
            True if at least one channel accepted the alert
        """
        if not self.enabled:
            logger.warning(
                f"No alert channel configured - {alert.key} logged only:\n{alert.format_message()}"
            )
            return False

        delivered = []

        if self.sheets.enabled:
            delivered.append(("sheets", self._send(self.sheets.send_alert, alert)))

        if self.telegram and self.telegram.enabled:
            delivered.append(
                ("telegram", self._send(self.telegram.send_message, alert.format_message()))
            )

        success = any(ok for _, ok in delivered)
        log_level = logging.INFO if success else logging.ERROR
        logger.log(
            log_level,
            f"Alert {'sent' if success else 'FAILED'}: {alert.key} via "
            + ", ".join(f"{channel}={'ok' if ok else 'failed'}" for channel, ok in delivered)
        )
        return success

    @staticmethod
    def _send(send, arg) -> bool:
        try:
            return bool(send(arg))
        except Exception as e:
            logger.error(f"Alert channel raised unexpectedly: {e}", exc_info=True)
            return False
