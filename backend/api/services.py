"""Explicitly owned dependencies for the HTTP app and the scheduler."""

import time
from collections.abc import Callable
from dataclasses import dataclass

from config.settings import Settings
from ingest.events.event_fetcher import EventFetcher
from notifications.broadcast import BroadcastRunner, DigestDispatcher, EventSource
from notifications.email_sender import EmailDispatcher
from notifications.scheduler import DailyBroadcastScheduler
from shared.db import get_supabase_client
from subscribers.directory import SubscriberDirectory, SupabaseSubscriberDirectory


@dataclass
class Services:
    settings: Settings
    directory: SubscriberDirectory
    event_source: EventSource
    dispatcher: DigestDispatcher
    runner: BroadcastRunner
    scheduler: DailyBroadcastScheduler | None = None


def build_services(
    settings: Settings,
    directory: SubscriberDirectory | None = None,
    event_source: EventSource | None = None,
    dispatcher: DigestDispatcher | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Services:
    """
    Wire production collaborators from settings.

    Any collaborator can be passed in to replace the real one (tests pass
    in-memory fakes and a no-op sleep).
    """
    if directory is None:
        directory = SupabaseSubscriberDirectory(get_supabase_client(settings))
    if event_source is None:
        event_source = EventFetcher.from_settings(settings)
    if dispatcher is None:
        dispatcher = EmailDispatcher(settings)

    runner = BroadcastRunner(
        directory,
        event_source,
        dispatcher,
        send_delay_seconds=settings.send_delay_seconds,
        sleep=sleep,
    )

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = DailyBroadcastScheduler(runner, send_time=settings.daily_send_time)

    return Services(
        settings=settings,
        directory=directory,
        event_source=event_source,
        dispatcher=dispatcher,
        runner=runner,
        scheduler=scheduler,
    )
