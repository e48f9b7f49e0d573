"""Profit Target Monitor - Entry Point.

Checks the portfolio's current prices every CHECK_INTERVAL_SECONDS and
sends one alert per profit target as soon as the market reaches it.
"""

import json
import logging
import signal
import sys
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

from .config import settings
from .alerting.dispatcher import AlertDispatcher
from .alerting.sheets_client import SheetsClient
from .alerting.telegram_client import TelegramClient
from .monitor import ProfitTargetMonitor
from .portfolio import PortfolioError, load_portfolio
from .price_client import PriceClient

logger = logging.getLogger(__name__)

# Global monitor instance for signal handling
monitor: ProfitTargetMonitor = None


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def signal_handler(signum, frame):
    """Ask the loop to stop; the cycle in progress is allowed to finish."""
    logger.info(f"Received signal {signum}, stopping profit target monitor...")
    if monitor:
        monitor.stop()


def _start_health_server(port: int) -> HTTPServer:
    """Start a minimal HTTP health server on a daemon thread."""

    class _Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            if self.path == "/health":
                body = json.dumps(monitor.status() if monitor else {"running": False})
                self.send_response(200)
                self.send_header("Content-Type", "application/json")
                self.end_headers()
                self.wfile.write(body.encode("utf-8"))
            else:
                self.send_response(404)
                self.end_headers()

        def log_message(self, *args):
            pass  # suppress HTTP access logs

    server = HTTPServer(("", port), _Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    logger.info(f"Health server listening on :{port}/health")
    return server


def build_monitor(portfolio) -> ProfitTargetMonitor:
    """Wire the monitor to its price source and alert channels from settings."""
    dispatcher = AlertDispatcher(
        sheets_client=SheetsClient(),
        telegram_client=TelegramClient(),
    )
    return ProfitTargetMonitor(
        portfolio=portfolio,
        price_client=PriceClient(portfolio),
        dispatcher=dispatcher,
        interval_seconds=settings.check_interval_seconds,
    )


def main():
    """Main entry point."""
    global monitor

    configure_logging()

    try:
        portfolio = load_portfolio(settings.portfolio_file)
    except PortfolioError as e:
        logger.error(f"Fatal configuration error: {e}")
        sys.exit(1)

    logger.info("=" * 50)
    logger.info("PROFIT TARGET MONITOR")
    logger.info("=" * 50)

    # Log configuration
    logger.info(f"Monitoring {len(portfolio)} holdings, "
                f"{sum(len(h.targets) for h in portfolio)} targets")
    logger.info(f"Check interval: {settings.check_interval_seconds}s")
    logger.info(f"Google Sheets enabled: {settings.sheets_enabled}")
    logger.info(f"Telegram enabled: {settings.telegram_enabled}")
    if settings.alert_email:
        logger.info(f"Email alerts will be sent to: {settings.alert_email}")
    if not (settings.sheets_enabled or settings.telegram_enabled):
        logger.warning("No alert channel configured - alerts will only be logged")

    monitor = build_monitor(portfolio)

    # Setup signal handlers
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        _start_health_server(settings.health_port)
    except OSError as e:
        logger.warning(f"Health server disabled, cannot bind :{settings.health_port}: {e}")

    try:
        monitor.start()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        monitor.stop()

    logger.info("Profit Target Monitor shutdown complete")


if __name__ == "__main__":
    main()
