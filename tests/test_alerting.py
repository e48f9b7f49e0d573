"""Tests for alert channels and the dispatcher."""

import json
from datetime import datetime, timezone
from decimal import Decimal
from unittest import mock

import httpx
import pytest

from profit_target_monitor.alerting import delivery
from profit_target_monitor.alerting.dispatcher import AlertDispatcher
from profit_target_monitor.alerting.sheets_client import SheetsClient
from profit_target_monitor.alerting.telegram_client import TelegramClient
from profit_target_monitor.models import ProfitAlert

SHEETS_URL = "https://script.example.test/macros/s/abc/exec"


def _alert(symbol: str = "SOL") -> ProfitAlert:
    return ProfitAlert(
        timestamp=datetime(2026, 5, 1, tzinfo=timezone.utc),
        symbol=symbol,
        name="Solana",
        current_price=Decimal("905.5"),
        target_level=1,
        target_price=Decimal("900"),
        target_description="First profit target (5.0x)",
        sell_percentage=Decimal("30"),
        sell_quantity=Decimal("44.179045596"),
        proceeds=Decimal("40004.1257871780"),
    )


@pytest.fixture(autouse=True)
def no_backoff():
    """Retries must not actually sleep in tests."""
    with mock.patch("profit_target_monitor.alerting.delivery.time.sleep") as sleep:
        yield sleep


class TestSheetsClient:

    def test_disabled_without_url(self):
        client = SheetsClient(url="", email="me@example.com")

        assert not client.enabled
        assert client.send_alert(_alert()) is False

    def test_disabled_with_placeholder_url(self):
        client = SheetsClient(url="https://script.google.com/YOUR_GOOGLE_SCRIPT_URL")

        assert not client.enabled

    def test_posts_payload(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text="ok")

        client = SheetsClient(
            url=SHEETS_URL, email="me@example.com", timeout=1.0,
            transport=httpx.MockTransport(handler),
        )

        assert client.send_alert(_alert()) is True
        assert len(requests) == 1
        assert requests[0].method == "POST"
        body = json.loads(requests[0].content)
        assert body["coin"] == "SOL"
        assert body["targetLevel"] == 1
        assert body["targetPrice"] == 900.0
        assert body["email"] == "me@example.com"
        assert "Sell 30% of position" in body["message"]

    def test_follows_apps_script_redirect(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "script.example.test":
                return httpx.Response(302, headers={"Location": "https://echo.example.test/result"})
            return httpx.Response(200, text='{"status": "ok"}')

        client = SheetsClient(url=SHEETS_URL, transport=httpx.MockTransport(handler))

        assert client.send_alert(_alert()) is True

    def test_retries_then_succeeds(self, no_backoff):
        responses = iter([httpx.Response(500), httpx.Response(200)])

        client = SheetsClient(
            url=SHEETS_URL, transport=httpx.MockTransport(lambda request: next(responses)),
        )

        assert client.send_alert(_alert()) is True
        no_backoff.assert_called_once_with(1)

    def test_gives_up_after_max_retries(self, no_backoff):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("unreachable", request=request)

        client = SheetsClient(url=SHEETS_URL, transport=httpx.MockTransport(handler))

        assert client.send_alert(_alert()) is False
        assert len(calls) == delivery.MAX_RETRIES
        assert [c.args[0] for c in no_backoff.call_args_list] == [1, 2]


class TestTelegramClient:

    def test_disabled_without_credentials(self):
        client = TelegramClient(bot_token="", chat_id="")

        assert not client.enabled
        assert client.send_message("hi") is False

    def test_sends_message(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True})

        client = TelegramClient(
            bot_token="TOKEN", chat_id="42", transport=httpx.MockTransport(handler),
        )

        assert client.send_message("hello") is True
        assert requests[0].url.path == "/botTOKEN/sendMessage"
        assert json.loads(requests[0].content) == {"chat_id": "42", "text": "hello"}

    def test_api_error_returns_false(self):
        client = TelegramClient(
            bot_token="TOKEN", chat_id="42",
            transport=httpx.MockTransport(lambda request: httpx.Response(400, text="bad")),
        )

        assert client.send_message("hello") is False

    def test_retries_through_shared_backoff(self, no_backoff):
        responses = iter([httpx.Response(502), httpx.Response(503), httpx.Response(200)])

        client = TelegramClient(
            bot_token="TOKEN", chat_id="42",
            transport=httpx.MockTransport(lambda request: next(responses)),
        )

        assert client.send_message("hello") is True
        assert [c.args[0] for c in no_backoff.call_args_list] == delivery.RETRY_BACKOFF_SECONDS


class TestAlertDispatcher:

    def setup_method(self):
        self.sheets = mock.MagicMock(spec=SheetsClient)
        self.sheets.enabled = True
        self.sheets.send_alert.return_value = True
        self.telegram = mock.MagicMock(spec=TelegramClient)
        self.telegram.enabled = True
        self.telegram.send_message.return_value = True
        self.dispatcher = AlertDispatcher(self.sheets, self.telegram)

    def test_sends_to_every_enabled_channel(self):
        alert = _alert()

        assert self.dispatcher.dispatch(alert) is True
        self.sheets.send_alert.assert_called_once_with(alert)
        self.telegram.send_message.assert_called_once_with(alert.format_message())

    def test_skips_disabled_channel(self):
        self.telegram.enabled = False

        assert self.dispatcher.dispatch(_alert()) is True
        self.telegram.send_message.assert_not_called()

    def test_one_failed_channel_does_not_block_the_other(self):
        self.sheets.send_alert.side_effect = RuntimeError("boom")

        assert self.dispatcher.dispatch(_alert()) is True
        self.telegram.send_message.assert_called_once()

    def test_all_channels_failing_returns_false(self):
        self.sheets.send_alert.return_value = False
        self.telegram.send_message.return_value = False

        assert self.dispatcher.dispatch(_alert()) is False

    def test_no_channel_configured_logs_only(self, caplog):
        self.sheets.enabled = False
        self.telegram.enabled = False

        with caplog.at_level("WARNING"):
            assert self.dispatcher.dispatch(_alert()) is False

        self.sheets.send_alert.assert_not_called()
        self.telegram.send_message.assert_not_called()
        assert "No alert channel configured" in caplog.text

    def test_telegram_is_optional(self):
        dispatcher = AlertDispatcher(self.sheets)

        assert dispatcher.dispatch(_alert()) is True
