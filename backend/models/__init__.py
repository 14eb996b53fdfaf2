"""Pydantic models for data validation and type checking."""

from models.broadcast import BroadcastSummary, DispatchResult
from models.event import (
    INTERESTING_KINDS,
    Event,
    EventActor,
    EventKind,
    EventTarget,
)
from models.subscriber import Subscriber, SubscriberCreate

__all__ = [
    "Subscriber",
    "SubscriberCreate",
    "Event",
    "EventActor",
    "EventTarget",
    "EventKind",
    "INTERESTING_KINDS",
    "DispatchResult",
    "BroadcastSummary",
]
