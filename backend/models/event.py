"""Pydantic models for public GitHub events."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from models.types import ActorHandle, RepoName


class EventKind(str, Enum):
    """Event types the digest knows how to describe."""

    PUSH = "PushEvent"
    CREATE = "CreateEvent"
    WATCH = "WatchEvent"
    FORK = "ForkEvent"
    ISSUES = "IssuesEvent"
    PULL_REQUEST = "PullRequestEvent"
    RELEASE = "ReleaseEvent"
    PUBLIC = "PublicEvent"


KNOWN_KINDS = frozenset(kind.value for kind in EventKind)

# Kinds kept when filtering a feed down to interesting activity
INTERESTING_KINDS = frozenset(
    {
        EventKind.PUSH.value,
        EventKind.CREATE.value,
        EventKind.WATCH.value,
        EventKind.FORK.value,
        EventKind.PULL_REQUEST.value,
        EventKind.ISSUES.value,
        EventKind.RELEASE.value,
    }
)


class EventActor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    handle: ActorHandle = Field(..., alias="login")


class EventTarget(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: RepoName


class Event(BaseModel):
    """
    One public activity record.

    Field aliases match the GitHub REST payload (type, repo, created_at) so
    API responses can be validated directly. Unknown kinds are kept as plain
    strings.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    kind: str = Field(..., alias="type", min_length=1)
    actor: EventActor
    target: EventTarget = Field(..., alias="repo")
    occurred_at: datetime = Field(..., alias="created_at")

    @property
    def is_known_kind(self) -> bool:
        return self.kind in KNOWN_KINDS
