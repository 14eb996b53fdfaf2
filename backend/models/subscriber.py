"""Pydantic models for subscriber records."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from models.types import EmailAddress


class SubscriberCreate(BaseModel):
    """Subscriber data for insertion into the subscribers table."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailAddress = Field(..., pattern=r"^[^@\s]+@[^@\s]+$")
    subscribed_at: datetime
    is_active: bool = True


class Subscriber(SubscriberCreate):
    """Complete subscriber record from the store."""

    updated_at: datetime | None = None
