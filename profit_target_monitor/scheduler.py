"""Periodic task runner used by the monitoring loop."""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs ``func`` now, then again ``interval_seconds`` after each run ends.

    Runs never overlap: the next wait only starts once the current run has
    returned or raised. ``stop()`` ends the loop before the next run; a run
    already in progress is left to finish.
    """

    # Number of consecutive failures before escalating to CRITICAL.
    _ERROR_ALERT_THRESHOLD = 5

    # Longest a stop request waits to be noticed between runs.
    _POLL_SECONDS = 0.2

    def __init__(self, func: Callable[[], None], interval_seconds: float, name: str = "task"):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.func = func
        self.interval_seconds = interval_seconds
        self.name = name
        self.run_count = 0
        self.consecutive_errors = 0
        # Plain flag: stop() is called from signal handlers, which must not take locks
        self._stop_requested = False

    @property
    def stopped(self) -> bool:
        return self._stop_requested

    def stop(self) -> None:
        self._stop_requested = True

    def run(self) -> None:
        """Block, running the task until ``stop()`` is called."""
        logger.info(f"Starting {self.name} (interval: {self.interval_seconds}s)")

        while not self._stop_requested:
            self._run_once()
            self._wait()

        logger.info(f"{self.name} stopped after {self.run_count} run(s)")

    def _wait(self) -> None:
        deadline = time.monotonic() + self.interval_seconds
        while not self._stop_requested:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            time.sleep(min(self._POLL_SECONDS, remaining))

    def _run_once(self) -> None:
        self.run_count += 1
        try:
            self.func()
        except Exception as e:
            self.consecutive_errors += 1
            logger.error(
                f"Error in {self.name} (consecutive: {self.consecutive_errors}): {e}",
                exc_info=True,
            )
            if self.consecutive_errors == self._ERROR_ALERT_THRESHOLD:
                logger.critical(
                    f"{self.name}: {self.consecutive_errors} consecutive failures. "
                    f"Profit targets are NOT being checked. Last error: {e}"
                )
            return

        if self.consecutive_errors > 0:
            logger.info(
                f"{self.name} recovered after {self.consecutive_errors} consecutive error(s)"
            )
        self.consecutive_errors = 0
