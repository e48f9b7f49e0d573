"""Google Apps Script web app client (primary alert sink).

The web app appends each alert to a sheet and emails it to the address
carried in the payload. Delivery of the email is the web app's job; ours
ends when it accepts the request.
"""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..models import ProfitAlert
from .delivery import post_json

logger = logging.getLogger(__name__)


class SheetsClient:
    """Posts profit alerts as JSON to the Apps Script endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        email: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url if url is not None else settings.sheets_url
        self.email = email if email is not None else settings.alert_email
        self.timeout = timeout if timeout is not None else settings.dispatch_timeout_seconds
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url) and "YOUR_GOOGLE" not in self.url

    def send_alert(self, alert: ProfitAlert) -> bool:
        """Send an alert, retrying with backoff.

        Returns:
            True if the endpoint answered with a 2xx status
        """
        if not self.enabled:
            logger.warning("Google Sheets URL not configured - skipping email alert")
            return False

        # Apps Script answers a POST with a redirect to the result
        sent = post_json(
            "Google Sheets",
            self.url,
            alert.to_payload(self.email),
            timeout=self.timeout,
            transport=self._transport,
            follow_redirects=True,
        )
        if sent:
            logger.info(f"Alert {alert.key} sent to Google Sheets")
        return sent
