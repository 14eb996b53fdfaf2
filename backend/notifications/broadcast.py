"""
Broadcast loop: one digest, sent to every active subscriber in turn.

A cycle lists active subscribers, fetches and formats one digest, then sends
it to each subscriber strictly in listing order with a fixed delay between
sends. A failed recipient is counted and skipped; it never aborts the cycle.
"""

import threading
import time
from collections.abc import Callable
from typing import Protocol

from models import BroadcastSummary, DispatchResult, Event
from models.types import EmailAddress
from notifications.digest_formatter import format_digest
from shared.errors import BroadcastInProgressError, DeliveryError
from shared.logging import get_logger
from shared.utils import log_summary
from subscribers.directory import SubscriberDirectory

logger = get_logger(__name__)


class EventSource(Protocol):
    def fetch_events(self) -> list[Event]: ...


class DigestDispatcher(Protocol):
    def send_digest(self, recipient: str, digest_text: str) -> str: ...


class BroadcastRunner:
    """Runs broadcast cycles, at most one at a time."""

    def __init__(
        self,
        directory: SubscriberDirectory,
        event_source: EventSource,
        dispatcher: DigestDispatcher,
        send_delay_seconds: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.directory = directory
        self.event_source = event_source
        self.dispatcher = dispatcher
        self.send_delay_seconds = send_delay_seconds
        self.sleep = sleep
        self._in_flight = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._in_flight.locked()

    def run_cycle(self) -> BroadcastSummary:
        """
        Run one broadcast cycle.

        Returns:
            BroadcastSummary with sent, failed and total counts

        Raises:
            BroadcastInProgressError: If another cycle is still running
            StoreError: If active subscribers cannot be listed
        """
        if not self._in_flight.acquire(blocking=False):
            raise BroadcastInProgressError()
        try:
            return self._run_cycle()
        finally:
            self._in_flight.release()

    def _run_cycle(self) -> BroadcastSummary:
        subscribers = self.directory.list_active()

        if not subscribers:
            logger.info("No active subscribers found")
            return BroadcastSummary()

        logger.info("Found %d active subscribers", len(subscribers))

        # Formatting errors propagate before any email goes out
        digest = format_digest(self.event_source.fetch_events())

        results: list[DispatchResult] = []
        for index, email in enumerate(subscribers):
            if index > 0 and self.send_delay_seconds > 0:
                self.sleep(self.send_delay_seconds)
            results.append(self._send_one(email, digest))

        summary = BroadcastSummary.from_results(results)
        log_summary(logger, "Daily updates", summary.sent, summary.failed, summary.total)
        return summary

    def send_welcome_digest(self, email: EmailAddress) -> DispatchResult | None:
        """
        Send the current digest to a single new subscriber.

        Never raises: a welcome email must not fail the signup that triggered it.
        """
        try:
            digest = format_digest(self.event_source.fetch_events())
            result = self._send_one(email, digest)
        except Exception:
            logger.exception("Welcome email to %s failed", email)
            return None

        if result.success:
            logger.info("Welcome email sent to: %s", email)
        return result

    def _send_one(self, email: EmailAddress, digest: str) -> DispatchResult:
        try:
            email_id = self.dispatcher.send_digest(email, digest)
        except DeliveryError as e:
            logger.error("  ✗ %s", e)
            return DispatchResult(recipient=email, success=False, error=e.reason)

        logger.info("  ✓ Sent digest to %s", email)
        return DispatchResult(recipient=email, success=True, email_id=email_id)
