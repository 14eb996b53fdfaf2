"""
Digest formatting for GitHub activity emails.

The digest is plain text: one banner line followed by one line per event.
It is used verbatim as the text email body and split into paragraphs for HTML.
"""

from collections.abc import Sequence
from datetime import timezone

from models import Event, EventKind

DIGEST_BANNER = "Here are the latest GitHub activities:"
MAX_DIGEST_EVENTS = 5
FALLBACK_PHRASE = "had activity in"
EMPTY_DIGEST_LINE = "No recent activity to report."

EVENT_PHRASES: dict[str, str] = {
    EventKind.PUSH.value: "pushed to",
    EventKind.CREATE.value: "created",
    EventKind.WATCH.value: "starred",
    EventKind.FORK.value: "forked",
    EventKind.ISSUES.value: "opened issue in",
    EventKind.PULL_REQUEST.value: "created pull request in",
    EventKind.RELEASE.value: "published a release in",
    EventKind.PUBLIC.value: "open-sourced",
}


def describe_event(event: Event) -> str:
    """Render one event as a digest line."""
    phrase = EVENT_PHRASES.get(event.kind, FALLBACK_PHRASE)
    occurred = event.occurred_at
    if occurred.tzinfo is not None:
        occurred = occurred.astimezone(timezone.utc)
    when = occurred.strftime("%Y-%m-%d %H:%M UTC")
    return f"• {event.actor.handle} {phrase} {event.target.name} at {when}"


def format_digest(events: Sequence[Event]) -> str:
    """
    Format up to MAX_DIGEST_EVENTS events as the digest text.

    Events keep the order the source delivered them in.

    Args:
        events: Events, most recent first

    Returns:
        Banner line followed by one line per event
    """
    lines = [describe_event(event) for event in events[:MAX_DIGEST_EVENTS]]
    if not lines:
        lines = [EMPTY_DIGEST_LINE]
    return "\n".join([DIGEST_BANNER, *lines])


def digest_lines(digest: str) -> list[str]:
    """Non-empty lines of a digest, for paragraph-per-line rendering."""
    return [line.strip() for line in digest.split("\n") if line.strip()]
