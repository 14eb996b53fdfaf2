"""
Event source strategies for the GitHub activity feed.
Each strategy knows how to produce a page of events from one source and
catches its own failure mode, returning None so the next strategy can run.
"""

import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta
from typing import Any

import requests
from pydantic import TypeAdapter, ValidationError

from models import INTERESTING_KINDS, Event, EventActor, EventKind, EventTarget
from shared.errors import UpstreamFetchError
from shared.logging import get_logger
from shared.utils import utc_now

logger = get_logger(__name__)

_EVENT_LIST = TypeAdapter(list[Event])

SAMPLE_ACTORS = [
    "developer123",
    "coder456",
    "github_user",
    "contributor",
    "maintainer",
]

SAMPLE_REPOS = [
    "awesome-project/react-app",
    "open-source/javascript-utils",
    "popular-repo/vue-components",
    "trending/python-tools",
    "community/nodejs-api",
]


class EventSourceStrategy(ABC):
    """Base strategy for fetching one page of events"""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def fetch(self) -> list[Event] | None:
        """
        Fetch events from this source.

        Returns:
            Events most-recent-first, or None if this source failed
        """
        pass


class ApiEventStrategy(EventSourceStrategy):
    """Strategy for one GitHub REST events endpoint"""

    def __init__(
        self,
        url: str,
        session: requests.Session,
        page_size: int = 10,
        timeout: float = 30.0,
    ):
        self.url = url
        self.session = session
        self.page_size = page_size
        self.timeout = timeout

    @property
    def name(self) -> str:
        return f"{self.__class__.__name__}({self.url})"

    def fetch(self) -> list[Event] | None:
        try:
            return self._fetch()
        except UpstreamFetchError as e:
            if e.status_code == 403:
                logger.warning("  ⚠ Rate limited by %s, trying next source", self.url)
            elif e.status_code == 401:
                logger.warning("  ⚠ Credentials rejected by %s, trying next source", self.url)
            else:
                logger.warning("  ✗ Could not fetch %s: %s", self.url, e.reason)
            return None
        except Exception:
            logger.exception("  ✗ Unexpected error fetching %s", self.url)
            return None

    def _fetch(self) -> list[Event]:
        try:
            response = self.session.get(
                self.url, params={"per_page": self.page_size}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise UpstreamFetchError(self.url, f"network error: {e}") from e

        _log_rate_limit(response)

        if response.status_code in (401, 403):
            raise UpstreamFetchError(
                self.url, f"HTTP {response.status_code}", response.status_code
            )
        if not 200 <= response.status_code < 300:
            raise UpstreamFetchError(
                self.url,
                f"HTTP {response.status_code} - {response.reason}",
                response.status_code,
            )

        try:
            events = parse_events(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamFetchError(self.url, f"unparseable payload: {e}") from e

        if not events:
            raise UpstreamFetchError(self.url, "feed returned no events")

        logger.info("  ✓ Fetched %d events from %s", len(events), self.url)
        return filter_interesting(events)[: self.page_size]


class SampleEventStrategy(EventSourceStrategy):
    """Fallback strategy - synthesize plausible events when every source failed"""

    def __init__(
        self,
        count: int = 10,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.count = count
        self.rng = rng or random.Random()
        self.clock = clock

    def fetch(self) -> list[Event]:
        logger.info("Using sample GitHub data as fallback...")
        now = self.clock()
        kinds = [kind.value for kind in EventKind]

        return [
            Event(
                kind=self.rng.choice(kinds),
                actor=EventActor(handle=self.rng.choice(SAMPLE_ACTORS)),
                target=EventTarget(name=self.rng.choice(SAMPLE_REPOS)),
                occurred_at=now - timedelta(hours=i),
            )
            for i in range(self.count)
        ]


def parse_events(payload: Any) -> list[Event]:
    """Validate a GitHub events payload (a JSON array)."""
    if not isinstance(payload, list):
        raise ValueError(f"expected a list of events, got {type(payload).__name__}")
    return _EVENT_LIST.validate_python(payload)


def filter_interesting(events: list[Event]) -> list[Event]:
    """Keep interesting kinds; fall back to everything if none qualify."""
    interesting = [event for event in events if event.kind in INTERESTING_KINDS]
    return interesting or events


def first_success(
    strategies: Iterable[EventSourceStrategy],
) -> tuple[EventSourceStrategy, list[Event]] | None:
    """Run strategies in order and return the first one that produced events."""
    for strategy in strategies:
        events = strategy.fetch()
        if events is not None:
            return strategy, events
    return None


def _log_rate_limit(response: requests.Response) -> None:
    remaining = response.headers.get("X-RateLimit-Remaining")
    reset = response.headers.get("X-RateLimit-Reset")
    if remaining is None:
        return

    reset_at = reset
    if reset and reset.isdigit():
        try:
            reset_at = datetime.fromtimestamp(int(reset)).astimezone().isoformat()
        except (OverflowError, OSError, ValueError):
            reset_at = reset
    logger.info("GitHub API Rate Limit - Remaining: %s, Reset: %s", remaining, reset_at)
