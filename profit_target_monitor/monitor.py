"""Profit Target Monitor - Main monitoring logic.

Each cycle fetches a price snapshot, works out which profit targets have
just been reached and dispatches one alert per target. A target is marked
as fired when its threshold is crossed, whether or not delivery succeeds,
so a failed alert is logged and never re-sent.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .config import settings
from .evaluator import evaluate
from .models import Holding, ProfitAlert, TriggerHistory
from .price_client import PriceClient
from .alerting.dispatcher import AlertDispatcher
from .scheduler import PeriodicTask

logger = logging.getLogger(__name__)


class ProfitTargetMonitor:
    """Watches a portfolio and reports each profit target exactly once."""

    def __init__(
        self,
        portfolio: Sequence[Holding],
        price_client: PriceClient,
        dispatcher: AlertDispatcher,
        history: Optional[TriggerHistory] = None,
        interval_seconds: Optional[float] = None,
    ):
        self.portfolio = list(portfolio)
        self.price_client = price_client
        self.dispatcher = dispatcher
        self.history = history if history is not None else TriggerHistory()
        self.interval_seconds = interval_seconds or settings.check_interval_seconds
        self._task = PeriodicTask(
            self.run_cycle,
            self.interval_seconds,
            name="profit target monitoring loop",
        )
        self._started = False
        self.last_cycle_at: Optional[datetime] = None
        self.alerts_sent = 0
        self.alerts_failed = 0
        self.alerts_skipped = 0

    def start(self) -> None:
        """Run the monitoring loop until ``stop()`` is called."""
        if self._started:
            raise RuntimeError("Monitor has already been started")
        self._started = True

        logger.info("Starting Profit Target Monitor")
        self._task.run()

    def stop(self) -> None:
        """Stop the loop before its next cycle. Safe to call multiple times."""
        if self._task.stopped:
            return
        logger.info("Stopping Profit Target Monitor...")
        self._task.stop()

    @property
    def running(self) -> bool:
        return self._started and not self._task.stopped

    def run_cycle(self) -> List[ProfitAlert]:
        """Fetch prices, evaluate targets and dispatch new alerts."""
        snapshot = self.price_client.fetch()
        if snapshot.is_empty:
            logger.warning("No prices available this cycle")

        alerts = evaluate(snapshot, self.portfolio, self.history)

        for alert in alerts:
            if self.dispatcher.dispatch(alert):
                self.alerts_sent += 1
            elif not self.dispatcher.enabled:
                # Log-only mode, nothing was attempted
                self.alerts_skipped += 1
            else:
                self.alerts_failed += 1

        self.last_cycle_at = datetime.now(timezone.utc)
        logger.debug(
            f"Cycle complete: {len(alerts)} new alert(s), {len(self.history)} target(s) fired so far"
        )
        return alerts

    def status(self) -> Dict[str, Any]:
        """Snapshot of monitor state for the health endpoint."""
        return {
            "running": self.running,
            "cycles": self._task.run_count,
            "last_cycle_at": self.last_cycle_at.isoformat() if self.last_cycle_at else None,
            "holdings": len(self.portfolio),
            "targets_fired": len(self.history),
            "alerts_sent": self.alerts_sent,
            "alerts_failed": self.alerts_failed,
            "alerts_skipped": self.alerts_skipped,
        }
