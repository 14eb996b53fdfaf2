"""
Main event fetcher - walks the configured GitHub feeds and returns the first
page of events that any of them produces.
"""

import random

import requests

from config.settings import Settings
from ingest.events.event_sources import (
    ApiEventStrategy,
    EventSourceStrategy,
    SampleEventStrategy,
    first_success,
)
from models import Event
from shared.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "GitHub-Updates-App"


def build_session(github_token: str | None = None) -> requests.Session:
    """HTTP session carrying the client tag and optional bearer credential."""
    session = requests.Session()
    session.headers.update(
        {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
    )
    if github_token:
        session.headers["Authorization"] = f"Bearer {github_token}"
    return session


class EventFetcher:
    """Fetches recent public events, never failing outright"""

    def __init__(
        self,
        strategies: list[EventSourceStrategy],
        fallback: EventSourceStrategy | None = None,
    ):
        self.strategies = list(strategies)
        self.fallback = fallback or SampleEventStrategy()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session: requests.Session | None = None,
        rng: random.Random | None = None,
    ) -> "EventFetcher":
        session = session or build_session(settings.github_token)
        if not settings.github_token:
            logger.info("GITHUB_TOKEN not set, using unauthenticated GitHub requests")

        strategies: list[EventSourceStrategy] = [
            ApiEventStrategy(
                url,
                session,
                page_size=settings.events_page_size,
                timeout=settings.http_timeout_seconds,
            )
            for url in settings.event_source_urls
        ]
        fallback = SampleEventStrategy(count=settings.events_page_size, rng=rng)
        return cls(strategies, fallback)

    def fetch_events(self) -> list[Event]:
        """Return events from the first source that succeeds, else sample events."""
        logger.info("→ Fetching GitHub events (%d sources)", len(self.strategies))

        result = first_success([*self.strategies, self.fallback])
        if result is None:
            # Only reachable with a fallback that can fail
            logger.error("✗ Every event source failed, including the fallback")
            return []

        strategy, events = result
        logger.info("  Using source: %s", strategy.name)
        return events
