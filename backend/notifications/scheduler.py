"""
Daily trigger for the broadcast loop.

Registers one job at a fixed UTC time of day on a private `schedule`
scheduler and polls it from a daemon thread. A failing cycle is logged and
never propagates to the host process.
"""

import threading
from datetime import datetime

import schedule

from models import BroadcastSummary
from notifications.broadcast import BroadcastRunner
from shared.errors import BroadcastInProgressError
from shared.logging import get_logger

logger = get_logger(__name__)

SCHEDULE_TIMEZONE = "UTC"


class DailyBroadcastScheduler:
    """Runs BroadcastRunner.run_cycle() once per day at `send_time` UTC."""

    def __init__(
        self,
        runner: BroadcastRunner,
        send_time: str = "09:00",
        poll_interval_seconds: float = 30.0,
        scheduler: schedule.Scheduler | None = None,
    ):
        self.runner = runner
        self.send_time = send_time
        self.poll_interval_seconds = poll_interval_seconds
        self.scheduler = scheduler or schedule.Scheduler()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.job = self.scheduler.every().day.at(send_time, SCHEDULE_TIMEZONE).do(
            self.run_now
        )

    @property
    def next_run(self) -> datetime | None:
        return self.job.next_run

    def run_now(self) -> BroadcastSummary | None:
        """
        Run one cycle immediately, swallowing and logging any failure.

        Returns:
            The cycle summary, or None if the cycle was skipped or failed
        """
        logger.info("Running daily GitHub updates job...")
        try:
            summary = self.runner.run_cycle()
        except BroadcastInProgressError:
            logger.warning("Broadcast already in progress, skipping scheduled run")
            return None
        except Exception:
            logger.exception("Scheduled broadcast failed")
            return None

        logger.info("Daily updates sent to %d subscribers", summary.sent)
        return summary

    def run_pending(self) -> None:
        self.scheduler.run_pending()

    def start(self) -> None:
        """Start polling in a daemon thread (no-op if already started)."""
        if self._thread and self._thread.is_alive():
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="daily-broadcast-scheduler", daemon=True
        )
        self._thread.start()
        logger.info(
            "Daily broadcast scheduled at %s %s (next run: %s)",
            self.send_time,
            SCHEDULE_TIMEZONE,
            self.next_run,
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self) -> None:
        while not self._stop.wait(self.poll_interval_seconds):
            try:
                self.run_pending()
            except Exception:
                logger.exception("Scheduler tick failed")
